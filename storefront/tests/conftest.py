from __future__ import annotations

import os
import tempfile
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

# Configuration is read once at import time, so the environment is pinned
# before anything from storefront is imported.
_TMP = Path(tempfile.mkdtemp(prefix="storefront-tests-"))
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'storefront.db'}"
os.environ["JWT_SECRET"] = "storefront-test-signing-secret-0123456789"
os.environ["SECRETS_ENV_FILE"] = str(_TMP / ".env")
os.environ["PASSWORD_HASH_METHOD"] = "pbkdf2:sha256:1000"
os.environ["ENABLE_RATE_LIMIT"] = "0"
os.environ["COOKIE_SECURE"] = "0"
os.environ["LOG_FILE"] = str(_TMP / "storefront.log")

TEST_SECRET = os.environ["JWT_SECRET"]


class FakeClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def database() -> Iterator[None]:
    from storefront.infrastructure.db import ENGINE, Base
    from storefront.infrastructure.db import models  # noqa: F401

    Base.metadata.drop_all(bind=ENGINE)
    Base.metadata.create_all(bind=ENGINE)
    yield
    Base.metadata.drop_all(bind=ENGINE)
