# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from storefront.domain.sessions import IssuedToken, TokenService
from storefront.domain.users.entities import User
from storefront.domain.users.exceptions import InvalidCredentialsError, UserNotFoundError
from storefront.domain.users.repositories import PasswordHasher, UserRepository
from storefront.shared.logging import logger


class LoginUserUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        tokens: TokenService,
        password_hasher: PasswordHasher,
    ) -> None:
        self._users = users
        self._tokens = tokens
        self._password_hasher = password_hasher

    def execute(self, username: str, password: str) -> tuple[User, IssuedToken]:
        user = self._users.find_by_username(username)
        if user is None:
            logger.info(f"auth.login: unknown username={username}")
            raise UserNotFoundError()

        if not self._password_hasher.verify(password, user.password_hash):
            logger.info(f"auth.login: bad password user_id={user.id}")
            raise InvalidCredentialsError()

        issued = self._tokens.issue(user.subject)
        return user, issued
