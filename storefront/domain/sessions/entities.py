# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Session token values.

Verification never raises for a bad token: it returns either ``Verified`` or
``Rejected`` so callers have to branch on the outcome.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class TokenFailure(StrEnum):
    MALFORMED = "malformed"
    EXPIRED = "expired"
    INVALID_SIGNATURE = "invalid_signature"


@dataclass(slots=True, frozen=True)
class TokenClaims:

    subject: str
    issued_at: datetime
    expires_at: datetime


@dataclass(slots=True, frozen=True)
class IssuedToken:

    token: str
    claims: TokenClaims


@dataclass(slots=True, frozen=True)
class Verified:

    claims: TokenClaims

    @property
    def subject(self) -> str:
        return self.claims.subject


@dataclass(slots=True, frozen=True)
class Rejected:

    failure: TokenFailure


TokenVerification = Verified | Rejected
