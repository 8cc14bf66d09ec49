# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .get_user_profile import GetCurrentUserUseCase, GetUserProfileUseCase
from .login_user import LoginUserUseCase
from .register_user import RegisterUserUseCase

__all__ = [
    "GetCurrentUserUseCase",
    "GetUserProfileUseCase",
    "LoginUserUseCase",
    "RegisterUserUseCase",
]
