"""Repository for Admin persistence."""

import sqlite3
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from keyward.domain.models import AccountStatus, Admin, AdminRole
from keyward.domain.ports.persistence import DuplicateEmailError
from keyward.infrastructure.persistence.sqlite import SQLiteDatabase, from_iso, to_iso, utcnow


class AdminRepository:
    """Repository for managing Admin entities in SQLite."""

    def __init__(self, database: SQLiteDatabase):
        self._db = database

    def count(self, *, include_deleted: bool = True) -> int:
        sql = "SELECT COUNT(*) AS total FROM admins"
        if not include_deleted:
            sql += " WHERE is_deleted = 0"
        row = self._db.fetch_one(sql)
        return int(row["total"]) if row else 0

    def list_active(self, offset: int, limit: int) -> Tuple[List[Admin], int]:
        """Return one page of non-deleted admins, newest first, plus the total count."""
        rows = self._db.fetch_all(
            "SELECT * FROM admins WHERE is_deleted = 0 ORDER BY created_at DESC LIMIT ? OFFSET ?",
            (limit, offset),
        )
        return [self._row_to_admin(row) for row in rows], self.count(include_deleted=False)

    def create(
        self,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        role: AdminRole = AdminRole.ADMIN,
        is_super: bool = False,
    ) -> Admin:
        admin_id = uuid.uuid4().hex
        now = to_iso(utcnow())
        email_clean = email.strip().lower()
        try:
            self._db.execute(
                """
                INSERT INTO admins (
                    id, email, password_hash, first_name, last_name, role, status,
                    is_deleted, is_super, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, 0, ?, ?, ?)
                """,
                (
                    admin_id,
                    email_clean,
                    password_hash,
                    first_name,
                    last_name,
                    AdminRole(role).value,
                    AccountStatus.ACTIVE.value,
                    int(is_super),
                    now,
                    now,
                ),
            )
        except sqlite3.IntegrityError as exc:
            raise DuplicateEmailError(email_clean) from exc
        admin = self.get_by_id(admin_id)
        if admin is None:
            raise RuntimeError(f"Admin {admin_id} missing after insert")
        return admin

    def get_by_id(self, identity_id: str) -> Optional[Admin]:
        row = self._db.fetch_one("SELECT * FROM admins WHERE id = ?", (identity_id,))
        return self._row_to_admin(row) if row else None

    def get_by_email(self, email: str) -> Optional[Admin]:
        row = self._db.fetch_one("SELECT * FROM admins WHERE email = ?", (email.strip().lower(),))
        return self._row_to_admin(row) if row else None

    def update(
        self,
        admin_id: str,
        *,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        role: Optional[AdminRole] = None,
        password_hash: Optional[str] = None,
        status: Optional[str] = None,
        is_deleted: Optional[bool] = None,
        deleted_at: Optional[datetime] = None,
    ) -> Admin:
        changes: Dict[str, Any] = {}
        if first_name is not None:
            changes["first_name"] = first_name
        if last_name is not None:
            changes["last_name"] = last_name
        if role is not None:
            changes["role"] = AdminRole(role).value
        if password_hash is not None:
            changes["password_hash"] = password_hash
        if status is not None:
            changes["status"] = AccountStatus(status).value
        if is_deleted is not None:
            changes["is_deleted"] = int(is_deleted)
        if deleted_at is not None:
            changes["deleted_at"] = to_iso(deleted_at)
        if changes:
            changes["updated_at"] = to_iso(utcnow())
            assignments = ", ".join(f"{column} = ?" for column in changes)
            self._db.execute(
                f"UPDATE admins SET {assignments} WHERE id = ?",
                (*changes.values(), admin_id),
            )
        admin = self.get_by_id(admin_id)
        if admin is None:
            raise ValueError(f"Admin {admin_id} not found")
        return admin

    @staticmethod
    def _row_to_admin(row: sqlite3.Row) -> Admin:
        return Admin(
            id=row["id"],
            email=row["email"],
            password_hash=row["password_hash"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            role=AdminRole(row["role"]),
            status=AccountStatus(row["status"]),
            is_deleted=bool(row["is_deleted"]),
            is_super=bool(row["is_super"]),
            created_at=from_iso(row["created_at"]),
            updated_at=from_iso(row["updated_at"]),
            deleted_at=from_iso(row["deleted_at"]),
        )
