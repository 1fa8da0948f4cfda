"""Repository for User persistence."""

import sqlite3
import uuid
from typing import Any, Dict, Optional

from keyward.domain.models import AccountStatus, User, UserRole
from keyward.domain.ports.persistence import DuplicateEmailError
from keyward.infrastructure.persistence.sqlite import SQLiteDatabase, from_iso, to_iso, utcnow


class UserRepository:
    """Repository for managing User entities in SQLite."""

    def __init__(self, database: SQLiteDatabase):
        self._db = database

    def create(
        self,
        email: str,
        password_hash: Optional[str],
        first_name: str,
        last_name: str,
        phone_number: Optional[str] = None,
        email_verified: bool = False,
    ) -> User:
        """Create a new user."""
        user_id = uuid.uuid4().hex
        now = to_iso(utcnow())
        email_clean = email.strip().lower()
        try:
            self._db.execute(
                """
                INSERT INTO users (
                    id, email, password_hash, first_name, last_name, phone_number,
                    role, status, is_deleted, email_verified, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, 0, ?, ?, ?)
                """,
                (
                    user_id,
                    email_clean,
                    password_hash,
                    first_name,
                    last_name,
                    phone_number,
                    UserRole.USER.value,
                    AccountStatus.ACTIVE.value,
                    int(email_verified),
                    now,
                    now,
                ),
            )
        except sqlite3.IntegrityError as exc:
            raise DuplicateEmailError(email_clean) from exc
        user = self.get_by_id(user_id)
        if user is None:
            raise RuntimeError(f"User {user_id} missing after insert")
        return user

    def get_by_id(self, identity_id: str) -> Optional[User]:
        """Get user by ID."""
        row = self._db.fetch_one("SELECT * FROM users WHERE id = ?", (identity_id,))
        return self._row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        row = self._db.fetch_one("SELECT * FROM users WHERE email = ?", (email.strip().lower(),))
        return self._row_to_user(row) if row else None

    def update(
        self,
        user_id: str,
        *,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        phone_number: Optional[str] = None,
        password_hash: Optional[str] = None,
        email_verified: Optional[bool] = None,
        status: Optional[str] = None,
        is_deleted: Optional[bool] = None,
    ) -> User:
        """Apply the given field changes; ``None`` leaves a field untouched."""
        changes: Dict[str, Any] = {}
        if first_name is not None:
            changes["first_name"] = first_name
        if last_name is not None:
            changes["last_name"] = last_name
        if phone_number is not None:
            changes["phone_number"] = phone_number
        if password_hash is not None:
            changes["password_hash"] = password_hash
        if email_verified is not None:
            changes["email_verified"] = int(email_verified)
        if status is not None:
            changes["status"] = AccountStatus(status).value
        if is_deleted is not None:
            changes["is_deleted"] = int(is_deleted)
        if changes:
            changes["updated_at"] = to_iso(utcnow())
            assignments = ", ".join(f"{column} = ?" for column in changes)
            self._db.execute(
                f"UPDATE users SET {assignments} WHERE id = ?",
                (*changes.values(), user_id),
            )
        user = self.get_by_id(user_id)
        if user is None:
            raise ValueError(f"User {user_id} not found")
        return user

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        """Convert database row to User entity."""
        return User(
            id=row["id"],
            email=row["email"],
            password_hash=row["password_hash"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            phone_number=row["phone_number"],
            role=UserRole(row["role"]),
            status=AccountStatus(row["status"]),
            is_deleted=bool(row["is_deleted"]),
            email_verified=bool(row["email_verified"]),
            created_at=from_iso(row["created_at"]),
            updated_at=from_iso(row["updated_at"]),
        )
