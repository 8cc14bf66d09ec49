# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import timedelta
from typing import Protocol

from .entities import IssuedToken, TokenVerification


class TokenService(Protocol):
    def issue(self, subject: str, ttl: timedelta | None = None) -> IssuedToken: ...
    def verify(self, token: str) -> TokenVerification: ...
