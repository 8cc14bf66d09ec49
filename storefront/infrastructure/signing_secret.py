# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Boot-time provisioning of the token signing secret.

Runs once from the application factory, before any request is served. The
lookup order is: configured value, process environment, the env file named by
``SECRETS_ENV_FILE``. Only when all three are empty is a fresh secret
generated and written to that file, so restarts keep validating previously
issued tokens.

Several worker processes may boot at once against the same env file; the
read-or-generate step runs under an inter-process file lock so all of them end
up with the secret that was actually persisted.
"""

from __future__ import annotations

import os
import secrets
import threading
from pathlib import Path

from dotenv import dotenv_values, set_key
from filelock import FileLock

from storefront.shared.config import AppConfig
from storefront.shared.errors.base import InfrastructureError
from storefront.shared.logging import logger

SECRET_ENV_VAR = "JWT_SECRET"
SECRET_BYTES = 64
LOCK_TIMEOUT_SECONDS = 30.0

_LOCK = threading.Lock()


class SecretProvisioningError(InfrastructureError):
    def __init__(self, path: str) -> None:
        super().__init__(
            code="secret_provisioning_failed",
            context={"path": path},
            message=f"cannot persist {SECRET_ENV_VAR} to {path}",
        )


def generate_secret() -> str:
    return secrets.token_hex(SECRET_BYTES)


def _lock_path(env_path: Path) -> str:
    return f"{env_path}.lock"


def read_persisted_secret(env_path: Path) -> str | None:
    if not env_path.is_file():
        return None
    value = dotenv_values(env_path).get(SECRET_ENV_VAR)
    if value and value.strip():
        return value.strip()
    return None


def ensure_signing_secret(config: AppConfig) -> str:
    with _LOCK:
        existing = config.jwt_secret or (os.environ.get(SECRET_ENV_VAR) or "").strip()
        if existing:
            return existing

        env_path = config.secrets_env_file
        try:
            env_path.parent.mkdir(parents=True, exist_ok=True)
            with FileLock(_lock_path(env_path), timeout=LOCK_TIMEOUT_SECONDS):
                secret = read_persisted_secret(env_path)
                generated = secret is None
                if secret is None:
                    secret = generate_secret()
                    env_path.touch(exist_ok=True)
                    set_key(str(env_path), SECRET_ENV_VAR, secret)
        except OSError as exc:
            # filelock.Timeout is an OSError as well
            logger.critical(f"signing_secret: cannot provision via {env_path}: {exc}")
            raise SecretProvisioningError(str(env_path)) from exc

        os.environ[SECRET_ENV_VAR] = secret
        if generated:
            logger.warning(
                f"signing_secret: generated new {SECRET_ENV_VAR} and saved it to {env_path}"
            )
        else:
            logger.info(f"signing_secret: loaded {SECRET_ENV_VAR} from {env_path}")
        return secret


__all__ = [
    "SecretProvisioningError",
    "ensure_signing_secret",
    "generate_secret",
    "read_persisted_secret",
]
