# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func, select

from storefront.infrastructure.db import session_scope
from storefront.infrastructure.db.models import User


@dataclass(slots=True, frozen=True)
class CredentialStoreHealth:
    users: int

    def to_dict(self) -> dict[str, object]:
        return {"ok": True, "database": "ok", "users": self.users}


def check_credential_store() -> CredentialStoreHealth:
    """Round trip to the users table; raises SQLAlchemyError when unreachable."""
    with session_scope() as session:
        users = session.scalar(select(func.count()).select_from(User)) or 0
    return CredentialStoreHealth(users=users)


__all__ = ["CredentialStoreHealth", "check_credential_store"]
