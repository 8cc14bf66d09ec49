# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, frozen=True)
class User:

    id: int
    username: str
    email: str
    password_hash: str
    created_at: datetime
    updated_at: datetime

    @property
    def subject(self) -> str:
        """Identifier embedded in session tokens issued for this user."""
        return str(self.id)
