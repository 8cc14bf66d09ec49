# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Signed, time-limited session tokens (HS256 JWT).

``verify`` checks expiry on the unverified payload first and only then checks
the signature, so an expired token is reported as ``EXPIRED`` even when it
was signed with another key, and a caller can tell "log in again" apart from
"tampered".
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from storefront.domain.sessions import (
    IssuedToken,
    Rejected,
    TokenClaims,
    TokenFailure,
    TokenService,
    TokenVerification,
    Verified,
)
from storefront.shared.logging import logger

_JWT_ALG = "HS256"

# Signature-only pass; expiry was already decided against the injected clock.
_SIGNATURE_ONLY = {"verify_exp": False, "verify_iat": False, "verify_nbf": False}


def utc_now() -> datetime:
    return datetime.now(UTC)


def _numeric(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _claims_from_payload(payload: Mapping[str, Any]) -> TokenClaims | None:
    subject = payload.get("sub")
    issued_at = payload.get("iat")
    expires_at = payload.get("exp")
    if not isinstance(subject, str) or not subject:
        return None
    if not _numeric(issued_at) or not _numeric(expires_at):
        return None
    try:
        return TokenClaims(
            subject=subject,
            issued_at=datetime.fromtimestamp(issued_at, UTC),
            expires_at=datetime.fromtimestamp(expires_at, UTC),
        )
    except (OverflowError, OSError, ValueError):
        return None


class JwtTokenService(TokenService):
    def __init__(
        self,
        secret: str,
        ttl: timedelta,
        *,
        algorithm: str = _JWT_ALG,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if not secret:
            raise ValueError("jwt_secret_blank")
        if ttl <= timedelta(0):
            raise ValueError("ttl_not_positive")
        self._secret = secret
        self._ttl = ttl
        self._algorithm = algorithm
        self._clock = clock

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(self, subject: str, ttl: timedelta | None = None) -> IssuedToken:
        if not subject:
            raise ValueError("subject_blank")
        lifetime = self._ttl if ttl is None else ttl
        if lifetime <= timedelta(0):
            raise ValueError("ttl_not_positive")

        # NumericDate claims are whole seconds; round sub-second lifetimes up.
        seconds = math.ceil(lifetime.total_seconds())
        issued_at = self._clock().astimezone(UTC).replace(microsecond=0)
        expires_at = issued_at + timedelta(seconds=seconds)

        payload: dict[str, Any] = {
            "sub": subject,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        logger.debug(f"tokens.issue: sub={subject} exp={expires_at.isoformat()}")
        return IssuedToken(
            token=token,
            claims=TokenClaims(subject=subject, issued_at=issued_at, expires_at=expires_at),
        )

    def verify(self, token: str) -> TokenVerification:
        try:
            unverified = jwt.decode(token, options={"verify_signature": False})
        except jwt.InvalidTokenError:
            return Rejected(TokenFailure.MALFORMED)

        claims = _claims_from_payload(unverified)
        if claims is None:
            return Rejected(TokenFailure.MALFORMED)

        if claims.expires_at < self._clock():
            return Rejected(TokenFailure.EXPIRED)

        try:
            jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options=_SIGNATURE_ONLY,
            )
        except jwt.InvalidSignatureError:
            return Rejected(TokenFailure.INVALID_SIGNATURE)
        except jwt.DecodeError:
            return Rejected(TokenFailure.MALFORMED)
        except jwt.InvalidTokenError:
            # Wrong algorithm (including "none") or a claim PyJWT refuses.
            return Rejected(TokenFailure.INVALID_SIGNATURE)

        return Verified(claims)
