# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from storefront.domain.users.entities import User as DomainUser
from storefront.domain.users.exceptions import DuplicateIdentityError
from storefront.domain.users.repositories import UserRepository
from storefront.infrastructure.db.models import User
from storefront.infrastructure.db.session import session_scope
from storefront.shared.logging import logger


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _to_domain(row: User) -> DomainUser:
    return DomainUser(
        id=row.id,
        username=row.username,
        email=row.email,
        password_hash=row.password_hash,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


class SqlAlchemyUserRepository(UserRepository):
    def find_by_username_or_email(self, identifier: str) -> DomainUser | None:
        with session_scope() as session:
            row = (
                session.query(User)
                .filter(or_(User.username == identifier, User.email == identifier))
                .first()
            )
            return _to_domain(row) if row else None

    def find_by_username(self, username: str) -> DomainUser | None:
        with session_scope() as session:
            row = session.query(User).filter(User.username == username).first()
            return _to_domain(row) if row else None

    def find_by_id(self, user_id: int) -> DomainUser | None:
        with session_scope() as session:
            row = session.get(User, user_id)
            return _to_domain(row) if row else None

    def add(self, user: DomainUser) -> DomainUser:
        try:
            with session_scope() as session:
                row = User(
                    username=user.username,
                    email=user.email,
                    password_hash=user.password_hash,
                    created_at=user.created_at,
                    updated_at=user.updated_at,
                )
                session.add(row)
                session.flush()
                session.refresh(row)
                persisted = _to_domain(row)
        except IntegrityError as exc:
            logger.info(f"users.add: unique constraint rejected username={user.username}")
            raise DuplicateIdentityError() from exc
        logger.info(f"users.add: created user_id={persisted.id}")
        return persisted
