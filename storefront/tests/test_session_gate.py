from __future__ import annotations

from datetime import timedelta

import pytest
from flask import Flask

from storefront.application.services.tokens import JwtTokenService
from storefront.auth import (
    Admitted,
    BearerCredential,
    Denied,
    GateRejection,
    SessionGate,
    current_user_id,
    parse_authorization_header,
)

from .conftest import TEST_SECRET, FakeClock


@pytest.fixture()
def tokens(clock: FakeClock) -> JwtTokenService:
    return JwtTokenService(TEST_SECRET, timedelta(hours=1), clock=clock)


@pytest.fixture()
def gate(tokens: JwtTokenService) -> SessionGate:
    return SessionGate(tokens)


def test_parse_accepts_exact_bearer_scheme() -> None:
    assert parse_authorization_header("Bearer abc.def.ghi") == BearerCredential("abc.def.ghi")


@pytest.mark.parametrize(
    "header",
    [
        "Bearer",
        "Bearer ",
        "bearer abc",
        "Token abc",
        "Basic dXNlcjpwYXNz",
        "Bearer a b",
        "Bearer  abc",
        " Bearer abc",
    ],
)
def test_parse_rejects_anything_else(header: str) -> None:
    assert parse_authorization_header(header) is GateRejection.INVALID_FORMAT


@pytest.mark.parametrize("header", [None, ""])
def test_missing_header_is_no_token(gate: SessionGate, header: str | None) -> None:
    assert gate.evaluate(header) == Denied(GateRejection.NO_TOKEN)


def test_malformed_header_is_invalid_format(gate: SessionGate, tokens: JwtTokenService) -> None:
    token = tokens.issue("1").token

    assert gate.evaluate(f"Token {token}") == Denied(GateRejection.INVALID_FORMAT)


def test_valid_token_is_admitted(gate: SessionGate, tokens: JwtTokenService) -> None:
    token = tokens.issue("17").token

    assert gate.evaluate(f"Bearer {token}") == Admitted(subject="17")


def test_expired_token_is_flagged(
    gate: SessionGate, tokens: JwtTokenService, clock: FakeClock
) -> None:
    token = tokens.issue("17", timedelta(seconds=1)).token
    clock.advance(2)

    decision = gate.evaluate(f"Bearer {token}")

    assert decision == Denied(GateRejection.TOKEN_EXPIRED)
    assert isinstance(decision, Denied)
    assert decision.to_dict() == {
        "error": "token_expired",
        "message": "Unauthorized: token expired",
        "expired": True,
    }


def test_foreign_signature_is_invalid_token(gate: SessionGate, clock: FakeClock) -> None:
    foreign = JwtTokenService("someone-elses-secret-0123456789abcdef", timedelta(hours=1), clock=clock)

    decision = gate.evaluate(f"Bearer {foreign.issue('17').token}")

    assert decision == Denied(GateRejection.INVALID_TOKEN)
    assert isinstance(decision, Denied)
    assert "expired" not in decision.to_dict()


def test_garbage_token_is_invalid_token(gate: SessionGate) -> None:
    assert gate.evaluate("Bearer not-a-token") == Denied(GateRejection.INVALID_TOKEN)


def test_rejections_have_distinct_codes_and_reasons() -> None:
    assert len({r.value for r in GateRejection}) == len(GateRejection)
    assert len({r.reason for r in GateRejection}) == len(GateRejection)
    assert GateRejection.NO_TOKEN.reason == "Unauthorized: no token provided"
    assert GateRejection.INVALID_FORMAT.reason == "Unauthorized: invalid token format"
    assert GateRejection.INVALID_TOKEN.reason == "Unauthorized: invalid token"


def test_cookie_is_used_only_without_header(gate: SessionGate, tokens: JwtTokenService) -> None:
    token = tokens.issue("5").token

    assert gate.evaluate(None, token) == Admitted(subject="5")
    assert gate.evaluate("Token nope", token) == Denied(GateRejection.INVALID_FORMAT)


def test_cookie_fallback_can_be_disabled(tokens: JwtTokenService) -> None:
    gate = SessionGate(tokens, cookie_fallback=False)

    assert gate.evaluate(None, tokens.issue("5").token) == Denied(GateRejection.NO_TOKEN)


@pytest.fixture()
def gated_app(gate: SessionGate) -> Flask:
    app = Flask(__name__)

    @app.get("/whoami")
    @gate.protect
    def whoami():
        return {"userId": current_user_id()}

    return app


def test_protect_passes_subject_downstream(gated_app: Flask, tokens: JwtTokenService) -> None:
    token = tokens.issue("23").token

    with gated_app.test_client() as client:
        response = client.get("/whoami", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.get_json() == {"userId": "23"}


def test_protect_rejects_with_401(gated_app: Flask) -> None:
    with gated_app.test_client() as client:
        response = client.get("/whoami")

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"
    assert response.get_json() == {
        "error": "no_token",
        "message": "Unauthorized: no token provided",
    }


def test_current_user_id_outside_protected_view() -> None:
    app = Flask(__name__)
    with app.test_request_context("/"):
        with pytest.raises(RuntimeError):
            current_user_id()
