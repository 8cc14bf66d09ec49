"""Application dependency container."""

from __future__ import annotations

from functools import cached_property

from storefront.application.services.password_hashing import WerkzeugPasswordHasher
from storefront.application.services.tokens import JwtTokenService
from storefront.application.use_cases.users import (
    GetCurrentUserUseCase,
    GetUserProfileUseCase,
    LoginUserUseCase,
    RegisterUserUseCase,
)
from storefront.auth import SessionGate
from storefront.infrastructure.repositories.users import SqlAlchemyUserRepository
from storefront.interfaces.http.controllers.auth_controller import AuthController
from storefront.interfaces.http.controllers.misc_controller import MiscController
from storefront.shared.config import AppConfig


class Container:
    """Wires one application instance; the signing secret is injected, never looked up."""

    def __init__(self, *, config: AppConfig, signing_secret: str) -> None:
        self._config = config
        self._signing_secret = signing_secret

    @cached_property
    def password_hasher(self) -> WerkzeugPasswordHasher:
        return WerkzeugPasswordHasher(self._config.password_hash_method)

    @cached_property
    def token_service(self) -> JwtTokenService:
        return JwtTokenService(self._signing_secret, self._config.token_ttl)

    @cached_property
    def user_repository(self) -> SqlAlchemyUserRepository:
        return SqlAlchemyUserRepository()

    @cached_property
    def session_gate(self) -> SessionGate:
        return SessionGate(
            self.token_service,
            cookie_name=self._config.security.cookie_name,
            cookie_fallback=self._config.security.cookie_fallback,
        )

    @cached_property
    def register_user_use_case(self) -> RegisterUserUseCase:
        return RegisterUserUseCase(
            users=self.user_repository,
            password_hasher=self.password_hasher,
        )

    @cached_property
    def login_user_use_case(self) -> LoginUserUseCase:
        return LoginUserUseCase(
            users=self.user_repository,
            tokens=self.token_service,
            password_hasher=self.password_hasher,
        )

    @cached_property
    def current_user_use_case(self) -> GetCurrentUserUseCase:
        return GetCurrentUserUseCase(users=self.user_repository)

    @cached_property
    def user_profile_use_case(self) -> GetUserProfileUseCase:
        return GetUserProfileUseCase(users=self.user_repository)

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(
            gate=self.session_gate,
            register_use_case=self.register_user_use_case,
            login_use_case=self.login_user_use_case,
            current_user_use_case=self.current_user_use_case,
            profile_use_case=self.user_profile_use_case,
            security=self._config.security,
        )

    @cached_property
    def misc_controller(self) -> MiscController:
        return MiscController()
