from __future__ import annotations

import threading
from datetime import UTC, datetime

import pytest

from storefront.application.services.password_hashing import WerkzeugPasswordHasher
from storefront.application.use_cases.users import RegisterUserUseCase
from storefront.domain.users.entities import User
from storefront.domain.users.exceptions import DuplicateIdentityError
from storefront.infrastructure.repositories.users import SqlAlchemyUserRepository

pytestmark = pytest.mark.usefixtures("database")


def _user(username: str, email: str) -> User:
    now = datetime.now(UTC)
    return User(
        id=0,
        username=username,
        email=email,
        password_hash="pbkdf2:sha256:1000$salt$hash",
        created_at=now,
        updated_at=now,
    )


def _race(attempt, count: int = 2) -> list[str]:
    barrier = threading.Barrier(count)
    outcomes: list[str] = []
    lock = threading.Lock()

    def worker(index: int) -> None:
        barrier.wait()
        try:
            attempt(index)
            outcome = "ok"
        except DuplicateIdentityError:
            outcome = "duplicate"
        with lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    return sorted(outcomes)


def test_add_assigns_id_and_timezone_aware_timestamps() -> None:
    repo = SqlAlchemyUserRepository()

    created = repo.add(_user("alice", "alice@example.com"))

    assert created.id > 0
    assert created.created_at.tzinfo is not None
    assert repo.find_by_id(created.id) == created


def test_lookup_matches_either_column_exactly() -> None:
    repo = SqlAlchemyUserRepository()
    created = repo.add(_user("alice", "alice@example.com"))

    assert repo.find_by_username_or_email("alice") == created
    assert repo.find_by_username_or_email("alice@example.com") == created
    assert repo.find_by_username("alice") == created
    assert repo.find_by_username_or_email("Alice") is None
    assert repo.find_by_username_or_email("ALICE@example.com") is None
    assert repo.find_by_username("alice@example.com") is None
    assert repo.find_by_id(created.id + 100) is None


@pytest.mark.parametrize(
    ("username", "email"),
    [("alice", "other@example.com"), ("alice2", "alice@example.com")],
)
def test_unique_constraint_maps_to_duplicate_identity(username: str, email: str) -> None:
    repo = SqlAlchemyUserRepository()
    repo.add(_user("alice", "alice@example.com"))

    with pytest.raises(DuplicateIdentityError):
        repo.add(_user(username, email))


def test_concurrent_inserts_of_same_username_admit_exactly_one() -> None:
    repo = SqlAlchemyUserRepository()

    outcomes = _race(lambda i: repo.add(_user("carol", f"carol{i}@example.com")))

    assert outcomes == ["duplicate", "ok"]
    assert repo.find_by_username("carol") is not None


def test_concurrent_registrations_admit_exactly_one() -> None:
    repo = SqlAlchemyUserRepository()
    register = RegisterUserUseCase(
        users=repo, password_hasher=WerkzeugPasswordHasher("pbkdf2:sha256:1000")
    )

    outcomes = _race(
        lambda i: register.execute("dave", f"dave{i}@example.com", "secret123"),
        count=4,
    )

    assert outcomes == ["duplicate", "duplicate", "duplicate", "ok"]
