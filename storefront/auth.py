# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Per-request session gate.

A request moves through: no token -> bad header -> expired / bad signature
-> verified. Every step before ``verified`` is terminal and answers 401 with a
stable ``error`` code; ``verified`` stores the subject on ``flask.g`` for the
downstream handler.

Transport: the ``Authorization: Bearer <token>`` header is authoritative.
Only when the header is absent does the gate fall back to the httpOnly session
cookie set at login (``AUTH_COOKIE_FALLBACK``).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from functools import wraps
from typing import Any

from flask import g, jsonify, request

from storefront.domain.sessions import Rejected, TokenFailure, TokenService
from storefront.shared.logging import logger

BEARER_SCHEME = "Bearer"


class GateRejection(StrEnum):
    NO_TOKEN = "no_token"
    INVALID_FORMAT = "invalid_token_format"
    TOKEN_EXPIRED = "token_expired"
    INVALID_TOKEN = "invalid_token"

    @property
    def reason(self) -> str:
        return _REASONS[self]


_REASONS = {
    GateRejection.NO_TOKEN: "Unauthorized: no token provided",
    GateRejection.INVALID_FORMAT: "Unauthorized: invalid token format",
    GateRejection.TOKEN_EXPIRED: "Unauthorized: token expired",
    GateRejection.INVALID_TOKEN: "Unauthorized: invalid token",
}


@dataclass(slots=True, frozen=True)
class BearerCredential:
    token: str


@dataclass(slots=True, frozen=True)
class Admitted:
    subject: str


@dataclass(slots=True, frozen=True)
class Denied:
    rejection: GateRejection

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "error": self.rejection.value,
            "message": self.rejection.reason,
        }
        if self.rejection is GateRejection.TOKEN_EXPIRED:
            payload["expired"] = True
        return payload


GateDecision = Admitted | Denied


def parse_authorization_header(value: str) -> BearerCredential | GateRejection:
    """Accept exactly ``"Bearer <token>"``: one space, nothing else."""
    parts = value.split(" ")
    if len(parts) != 2:
        return GateRejection.INVALID_FORMAT
    scheme, token = parts
    if scheme != BEARER_SCHEME or not token:
        return GateRejection.INVALID_FORMAT
    return BearerCredential(token=token)


def _rejection_for(failure: TokenFailure) -> GateRejection:
    if failure is TokenFailure.EXPIRED:
        return GateRejection.TOKEN_EXPIRED
    return GateRejection.INVALID_TOKEN


class SessionGate:
    def __init__(
        self,
        tokens: TokenService,
        *,
        cookie_name: str = "token",
        cookie_fallback: bool = True,
    ) -> None:
        self._tokens = tokens
        self._cookie_name = cookie_name
        self._cookie_fallback = cookie_fallback

    def evaluate(self, authorization: str | None, cookie: str | None = None) -> GateDecision:
        if authorization:
            parsed = parse_authorization_header(authorization)
            if isinstance(parsed, GateRejection):
                return Denied(parsed)
            token = parsed.token
        elif self._cookie_fallback and cookie:
            token = cookie
        else:
            return Denied(GateRejection.NO_TOKEN)

        verification = self._tokens.verify(token)
        if isinstance(verification, Rejected):
            return Denied(_rejection_for(verification.failure))
        return Admitted(subject=verification.subject)

    def protect(self, view: Callable) -> Callable:
        @wraps(view)
        def inner(*args, **kwargs):
            decision = self.evaluate(
                request.headers.get("Authorization"),
                request.cookies.get(self._cookie_name),
            )
            if isinstance(decision, Denied):
                logger.warning(
                    f"Auth rejected ({decision.rejection.value}) on "
                    f"{request.method} {request.path}"
                )
                return jsonify(decision.to_dict()), 401, {"WWW-Authenticate": BEARER_SCHEME}

            g.user_id = decision.subject
            logger.debug(f"Auth OK: user={decision.subject} {request.method} {request.path}")
            return view(*args, **kwargs)

        return inner


def current_user_id() -> str:
    """Verified subject of the current request; only valid inside a protected view."""
    user_id = g.get("user_id")
    if user_id is None:
        raise RuntimeError("current_user_id() used outside a protected view")
    return user_id


__all__ = [
    "Admitted",
    "BearerCredential",
    "Denied",
    "GateDecision",
    "GateRejection",
    "SessionGate",
    "current_user_id",
    "parse_authorization_header",
]
