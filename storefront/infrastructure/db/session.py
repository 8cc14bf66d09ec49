# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Engine and session factory for the credential store."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, scoped_session, sessionmaker

from storefront.shared.config import load_config
from storefront.shared.config.settings import DatabaseConfig
from storefront.shared.logging import logger


class Base(DeclarativeBase):
    pass


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def build_engine(database: DatabaseConfig) -> Engine:
    if not _is_sqlite(database.url):
        return create_engine(
            database.url,
            pool_pre_ping=True,
            pool_size=database.pool_size,
            max_overflow=database.max_overflow,
            pool_timeout=database.pool_timeout,
        )

    # Concurrent registrations wait on the write lock instead of failing with
    # "database is locked"; the loser then sees the unique constraint.
    engine = create_engine(
        database.url,
        pool_pre_ping=True,
        connect_args={
            "check_same_thread": False,
            "timeout": database.pool_timeout,
        },
    )

    @event.listens_for(engine, "connect")
    def _sqlite_pragmas(dbapi_connection, _record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


ENGINE: Engine = build_engine(load_config().database)

SessionLocal = scoped_session(
    sessionmaker(bind=ENGINE, autoflush=False, expire_on_commit=False)
)


@contextmanager
def session_scope() -> Iterator[Session]:
    """One unit of work: commit on success, roll back and re-raise on error."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception as exc:
        session.rollback()
        logger.debug(f"credential_store: rolled back after {type(exc).__name__}")
        raise
    finally:
        session.close()
        SessionLocal.remove()


def init_db() -> None:
    from storefront.infrastructure.db import models  # noqa: F401  registers tables

    Base.metadata.create_all(bind=ENGINE)
    logger.info(f"credential_store: schema ready ({ENGINE.dialect.name})")
