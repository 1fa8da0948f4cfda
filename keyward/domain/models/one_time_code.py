from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum
from typing import Optional


class CodeType(StrEnum):
    """Purpose and identity kind of a one-time code. One live record per (email, type)."""

    SIGNUP = "SIGNUP"
    USER = "USER"
    ADMIN = "ADMIN"


@dataclass(slots=True)
class OneTimeCode:
    email: str
    type: CodeType
    code: str
    expires_at: datetime
    attempts: int
    verified_at: Optional[datetime]
    created_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        current = now or datetime.now(timezone.utc)
        return current > self.expires_at
