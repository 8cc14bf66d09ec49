# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from storefront.domain.users.entities import User
from storefront.domain.users.exceptions import UserNotFoundError
from storefront.domain.users.repositories import UserRepository


class GetCurrentUserUseCase:
    """Resolve the user behind a verified token subject."""

    def __init__(self, *, users: UserRepository) -> None:
        self._users = users

    def execute(self, subject: str) -> User:
        try:
            user_id = int(subject)
        except (TypeError, ValueError):
            raise UserNotFoundError() from None
        user = self._users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError()
        return user


class GetUserProfileUseCase:
    def __init__(self, *, users: UserRepository) -> None:
        self._users = users

    def execute(self, username: str) -> User:
        user = self._users.find_by_username(username)
        if user is None:
            raise UserNotFoundError()
        return user
