# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .entities import User
from .exceptions import DuplicateIdentityError, InvalidCredentialsError, UserNotFoundError
from .repositories import PasswordHasher, UserRepository

__all__ = [
    "DuplicateIdentityError",
    "InvalidCredentialsError",
    "PasswordHasher",
    "User",
    "UserNotFoundError",
    "UserRepository",
]
