from __future__ import annotations

import multiprocessing
import os
import re
from pathlib import Path

import pytest
from dotenv import dotenv_values

from storefront.app import create_app
from storefront.infrastructure.signing_secret import (
    SecretProvisioningError,
    ensure_signing_secret,
    read_persisted_secret,
)
from storefront.shared.config import AppConfig


def _config(env_file: Path, **overrides: object) -> AppConfig:
    return AppConfig(_env_file=None, SECRETS_ENV_FILE=env_file, **overrides)  # type: ignore[call-arg]


@pytest.fixture()
def no_secret(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("JWT_SECRET", raising=False)


@pytest.mark.usefixtures("no_secret")
def test_missing_secret_is_generated_persisted_and_exported(tmp_path: Path) -> None:
    env_file = tmp_path / "conf" / ".env"

    secret = ensure_signing_secret(_config(env_file))

    assert re.fullmatch(r"[0-9a-f]{128}", secret)
    assert dotenv_values(env_file)["JWT_SECRET"] == secret
    assert os.environ["JWT_SECRET"] == secret


@pytest.mark.usefixtures("no_secret")
def test_generation_keeps_existing_env_entries(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("DATABASE_URL=sqlite:///app.db\n", encoding="utf-8")

    secret = ensure_signing_secret(_config(env_file))

    values = dotenv_values(env_file)
    assert values["DATABASE_URL"] == "sqlite:///app.db"
    assert values["JWT_SECRET"] == secret


@pytest.mark.usefixtures("no_secret")
def test_second_call_reuses_exported_secret(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    first = ensure_signing_secret(_config(env_file))
    before = env_file.read_text(encoding="utf-8")

    second = ensure_signing_secret(_config(env_file))

    assert second == first
    assert env_file.read_text(encoding="utf-8") == before


def test_configured_secret_has_no_side_effects(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"

    secret = ensure_signing_secret(_config(env_file, JWT_SECRET="configured-secret-value"))

    assert secret == "configured-secret-value"
    assert not env_file.exists()


@pytest.mark.usefixtures("no_secret")
def test_unwritable_env_file_refuses_to_start(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    config = _config(blocker / "nested" / ".env")

    with pytest.raises(SecretProvisioningError) as excinfo:
        ensure_signing_secret(config)

    assert excinfo.value.to_dict() == {"error": "internal_error"}
    assert "JWT_SECRET" not in os.environ

    with pytest.raises(SecretProvisioningError):
        create_app(config)


@pytest.mark.usefixtures("no_secret")
def test_restart_reuses_secret_from_custom_env_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    env_file = tmp_path / "secrets" / "secrets.env"
    monkeypatch.setenv("SECRETS_ENV_FILE", str(env_file))

    first = ensure_signing_secret(AppConfig())  # type: ignore[call-arg]
    # A restarted process starts without the exported variable.
    monkeypatch.delenv("JWT_SECRET")
    second = ensure_signing_secret(AppConfig())  # type: ignore[call-arg]

    assert second == first
    assert read_persisted_secret(env_file) == first
    assert os.environ["JWT_SECRET"] == first


@pytest.mark.usefixtures("no_secret")
def test_secret_persisted_by_previous_run_is_loaded(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("JWT_SECRET=persisted-secret-from-last-boot\n", encoding="utf-8")

    secret = ensure_signing_secret(_config(env_file))

    assert secret == "persisted-secret-from-last-boot"
    assert dotenv_values(env_file)["JWT_SECRET"] == secret
    assert os.environ["JWT_SECRET"] == secret


@pytest.mark.usefixtures("no_secret")
def test_blank_persisted_secret_is_replaced(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("JWT_SECRET=\n", encoding="utf-8")

    secret = ensure_signing_secret(_config(env_file))

    assert re.fullmatch(r"[0-9a-f]{128}", secret)
    assert read_persisted_secret(env_file) == secret


def _provision_in_worker(env_file: str, barrier, results) -> None:
    barrier.wait(timeout=60)
    config = AppConfig(_env_file=None, SECRETS_ENV_FILE=env_file)  # type: ignore[call-arg]
    results.put(ensure_signing_secret(config))


@pytest.mark.usefixtures("no_secret")
def test_concurrent_worker_processes_agree_on_one_secret(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.touch()
    workers = 4
    ctx = multiprocessing.get_context("spawn")
    barrier = ctx.Barrier(workers)
    results = ctx.Queue()

    processes = [
        ctx.Process(target=_provision_in_worker, args=(str(env_file), barrier, results))
        for _ in range(workers)
    ]
    for process in processes:
        process.start()
    secrets_seen = [results.get(timeout=120) for _ in range(workers)]
    for process in processes:
        process.join(timeout=30)

    assert all(process.exitcode == 0 for process in processes)
    assert len(set(secrets_seen)) == 1
    assert read_persisted_secret(env_file) == secrets_seen[0]
