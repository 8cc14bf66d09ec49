from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError

from storefront.domain.users.entities import User
from storefront.shared.errors.validation_types import ValidationErrorType

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_.\-]+$")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class RegisterRequestDTO(BaseModel):
    username: str = Field(min_length=3, max_length=64)
    email: str = Field(max_length=254)
    password: str = Field(max_length=128)

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        if not _USERNAME_RE.match(value):
            raise PydanticCustomError(
                ValidationErrorType.USERNAME_INVALID_CHARS,
                "Username may contain only letters, digits, '_', '.' and '-'",
                {"pattern": _USERNAME_RE.pattern},
            )
        return value

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError(ValidationErrorType.MISSING, "Email cannot be empty", {})
        if not _EMAIL_RE.match(value):
            raise PydanticCustomError(
                ValidationErrorType.EMAIL_INVALID,
                "Email must look like name@example.com",
                {},
            )
        return value

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError(
                ValidationErrorType.PASSWORD_BLANK, "Password cannot be empty", {}
            )
        if len(value) < 8:
            raise PydanticCustomError(
                ValidationErrorType.PASSWORD_TOO_SHORT,
                "Password must be at least 8 characters long",
                {"min_length": 8},
            )
        return value


class LoginRequestDTO(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=1, max_length=128)  # No strength check on login


class UserPublicDTO(BaseModel):
    """Public projection of a user; the password hash has no field here."""

    id: int
    username: str
    email: str
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")

    @classmethod
    def from_user(cls, user: User) -> "UserPublicDTO":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class LoginSuccessDTO(BaseModel):
    message: str = "Login successful"
    token: str
    expires_at: datetime = Field(serialization_alias="expiresAt")
    user: UserPublicDTO


class MessageDTO(BaseModel):
    message: str
