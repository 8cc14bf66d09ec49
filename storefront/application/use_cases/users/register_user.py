# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import UTC, datetime

from storefront.domain.users.entities import User
from storefront.domain.users.exceptions import DuplicateIdentityError
from storefront.domain.users.repositories import PasswordHasher, UserRepository
from storefront.shared.logging import logger


class RegisterUserUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        password_hasher: PasswordHasher,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher

    def execute(self, username: str, email: str, password: str) -> User:
        # Fast path only; the store's unique constraints decide concurrent races.
        for identifier in (username, email):
            if self._users.find_by_username_or_email(identifier) is not None:
                logger.info(f"auth.register: identity taken username={username}")
                raise DuplicateIdentityError()

        now = datetime.now(UTC)
        hashed = self._password_hasher.hash(password)
        user = User(
            id=0,
            username=username,
            email=email,
            password_hash=hashed,
            created_at=now,
            updated_at=now,
        )
        return self._users.add(user)
