# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .entities import (
    IssuedToken,
    Rejected,
    TokenClaims,
    TokenFailure,
    TokenVerification,
    Verified,
)
from .ports import TokenService

__all__ = [
    "IssuedToken",
    "Rejected",
    "TokenClaims",
    "TokenFailure",
    "TokenService",
    "TokenVerification",
    "Verified",
]
