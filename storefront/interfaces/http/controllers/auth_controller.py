# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, Response, jsonify, request
from pydantic import ValidationError

from storefront.application.use_cases.users import (
    GetCurrentUserUseCase,
    GetUserProfileUseCase,
    LoginUserUseCase,
    RegisterUserUseCase,
)
from storefront.auth import SessionGate, current_user_id
from storefront.interfaces.http.dto.auth import (
    LoginRequestDTO,
    LoginSuccessDTO,
    MessageDTO,
    RegisterRequestDTO,
    UserPublicDTO,
)
from storefront.shared.config import SecurityConfig, load_config
from storefront.shared.errors.validation import raise_validation_error
from storefront.shared.logging import logger
from storefront.shared.middleware.rate_limit import rate_limit


def _public(user) -> dict:
    return UserPublicDTO.from_user(user).model_dump(mode="json", by_alias=True)


class AuthController:
    def __init__(
        self,
        *,
        gate: SessionGate,
        register_use_case: RegisterUserUseCase,
        login_use_case: LoginUserUseCase,
        current_user_use_case: GetCurrentUserUseCase,
        profile_use_case: GetUserProfileUseCase,
        security: SecurityConfig | None = None,
    ) -> None:
        self._gate = gate
        self._register_use_case = register_use_case
        self._login_use_case = login_use_case
        self._current_user_use_case = current_user_use_case
        self._profile_use_case = profile_use_case
        self._security = security or load_config().security

    @rate_limit(limit=5, window_seconds=60.0)
    def register(self) -> tuple[Response, int]:
        try:
            dto = RegisterRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        user = self._register_use_case.execute(dto.username, dto.email, dto.password)

        logger.info(f"auth.register: ok user_id={user.id}")
        return jsonify(_public(user)), HTTPStatus.CREATED

    @rate_limit(limit=10, window_seconds=60.0)
    def login(self) -> tuple[Response, int]:
        try:
            dto = LoginRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        user, issued = self._login_use_case.execute(dto.username, dto.password)

        payload = LoginSuccessDTO(
            token=issued.token,
            expires_at=issued.claims.expires_at,
            user=UserPublicDTO.from_user(user),
        ).model_dump(mode="json", by_alias=True)
        response = jsonify(payload)

        security = self._security
        lifetime = issued.claims.expires_at - issued.claims.issued_at
        response.set_cookie(
            security.cookie_name,
            issued.token,
            httponly=True,
            samesite=security.cookie_samesite,
            secure=security.cookie_secure,
            max_age=int(lifetime.total_seconds()),
        )
        logger.info(f"auth.login: ok user_id={user.id}")
        return response, HTTPStatus.OK

    def logout(self) -> tuple[Response, int]:
        # Tokens are not tracked server-side; only the client copy is dropped.
        security = self._security
        response = jsonify(MessageDTO(message="Logged out successfully").model_dump())
        response.delete_cookie(
            security.cookie_name,
            httponly=True,
            samesite=security.cookie_samesite,
            secure=security.cookie_secure,
        )
        logger.info("auth.logout: ok")
        return response, HTTPStatus.OK

    def show_me(self) -> tuple[Response, int]:
        user = self._current_user_use_case.execute(current_user_id())
        return jsonify(_public(user)), HTTPStatus.OK

    def user_profile(self, username: str) -> tuple[Response, int]:
        user = self._profile_use_case.execute(username)
        return jsonify(_public(user)), HTTPStatus.OK

    def protected(self) -> tuple[Response, int]:
        payload = {"message": "Access granted to protected route", "userId": current_user_id()}
        return jsonify(payload), HTTPStatus.OK

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("auth", __name__, url_prefix="/api")
        bp.add_url_rule("/register", view_func=self.register, methods=["POST"])
        bp.add_url_rule("/login", view_func=self.login, methods=["POST"])
        bp.add_url_rule("/logout", view_func=self.logout, methods=["GET"])
        bp.add_url_rule("/showme", view_func=self._gate.protect(self.show_me), methods=["GET"])
        bp.add_url_rule(
            "/user/<username>",
            view_func=self._gate.protect(self.user_profile),
            methods=["GET"],
        )
        bp.add_url_rule(
            "/protected", view_func=self._gate.protect(self.protected), methods=["GET"]
        )
        return bp
