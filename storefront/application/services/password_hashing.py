"""Password hashing strategies."""

from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from storefront.domain.users.repositories import PasswordHasher

# Comparable in cost to bcrypt with 10 rounds; tune via PASSWORD_HASH_METHOD.
DEFAULT_METHOD = "scrypt:32768:8:1"


class WerkzeugPasswordHasher(PasswordHasher):
    def __init__(self, method: str = DEFAULT_METHOD) -> None:
        self._method = method

    def hash(self, password: str) -> str:
        if not password:
            raise ValueError("password_blank")
        return str(generate_password_hash(password, method=self._method))

    def verify(self, password: str, hashed: str) -> bool:
        if not password or not hashed:
            return False
        try:
            return bool(check_password_hash(hashed, password))
        except ValueError:
            # Stored hash names a method this build cannot compute.
            return False
