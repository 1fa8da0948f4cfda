"""Repository for verification and password-reset codes."""

import sqlite3
from datetime import datetime
from typing import Optional

from keyward.domain.models import CodeType, OneTimeCode
from keyward.infrastructure.persistence.sqlite import SQLiteDatabase, from_iso, to_iso, utcnow


class OneTimeCodeRepository:
    """Stores at most one live code per (email, type); writes are upserts."""

    def __init__(self, database: SQLiteDatabase):
        self._db = database

    def upsert(self, email: str, code_type: CodeType, code: str, expires_at: datetime) -> OneTimeCode:
        email_clean = email.strip().lower()
        self._db.execute(
            """
            INSERT INTO one_time_codes (email, type, code, expires_at, attempts, verified_at, created_at)
            VALUES (?, ?, ?, ?, 0, NULL, ?)
            ON CONFLICT(email, type) DO UPDATE SET
                code = excluded.code,
                expires_at = excluded.expires_at,
                attempts = 0,
                verified_at = NULL
            """,
            (email_clean, CodeType(code_type).value, code, to_iso(expires_at), to_iso(utcnow())),
        )
        record = self.get(email_clean, code_type)
        if record is None:
            raise RuntimeError(f"{code_type} code for {email_clean} missing after upsert")
        return record

    def get(self, email: str, code_type: CodeType) -> Optional[OneTimeCode]:
        row = self._db.fetch_one(
            "SELECT * FROM one_time_codes WHERE email = ? AND type = ?",
            (email.strip().lower(), CodeType(code_type).value),
        )
        return self._row_to_code(row) if row else None

    def increment_attempts(self, email: str, code_type: CodeType) -> int:
        """Bump the failed-attempt counter and return the new value (0 if no record)."""
        key = (email.strip().lower(), CodeType(code_type).value)
        with self._db.transaction() as conn:
            conn.execute(
                "UPDATE one_time_codes SET attempts = attempts + 1 WHERE email = ? AND type = ?",
                key,
            )
            row = conn.execute(
                "SELECT attempts FROM one_time_codes WHERE email = ? AND type = ?",
                key,
            ).fetchone()
        return int(row["attempts"]) if row else 0

    def mark_verified(self, email: str, code_type: CodeType) -> None:
        self._db.execute(
            "UPDATE one_time_codes SET verified_at = ? WHERE email = ? AND type = ?",
            (to_iso(utcnow()), email.strip().lower(), CodeType(code_type).value),
        )

    def delete(self, email: str, code_type: CodeType) -> None:
        self._db.execute(
            "DELETE FROM one_time_codes WHERE email = ? AND type = ?",
            (email.strip().lower(), CodeType(code_type).value),
        )

    @staticmethod
    def _row_to_code(row: sqlite3.Row) -> OneTimeCode:
        return OneTimeCode(
            email=row["email"],
            type=CodeType(row["type"]),
            code=row["code"],
            expires_at=from_iso(row["expires_at"]),
            attempts=int(row["attempts"]),
            verified_at=from_iso(row["verified_at"]),
            created_at=from_iso(row["created_at"]),
        )
