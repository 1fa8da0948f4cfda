from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Protocol, Tuple, TypeVar

from ..models import Admin, AdminRole, CodeType, OneTimeCode, User

IdentityT = TypeVar("IdentityT", covariant=True)


class DuplicateEmailError(Exception):
    """Raised by ``create`` when another record already holds the email."""

    def __init__(self, email: str) -> None:
        super().__init__(f"Email already registered: {email}")
        self.email = email


class IdentityLookup(Protocol[IdentityT]):
    """Read access shared by user and admin stores; all the guard needs."""

    def get_by_id(self, identity_id: str) -> Optional[IdentityT]:
        ...

    def get_by_email(self, email: str) -> Optional[IdentityT]:
        ...


class UserRepository(IdentityLookup[User], Protocol):
    """Persistence functions related to end-user accounts."""

    def create(
        self,
        email: str,
        password_hash: Optional[str],
        first_name: str,
        last_name: str,
        phone_number: Optional[str] = None,
        email_verified: bool = False,
    ) -> User:
        ...

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
        ...


class AdminRepository(IdentityLookup[Admin], Protocol):
    """Persistence functions related to administrator accounts."""

    def count(self, *, include_deleted: bool = True) -> int:
        ...

    def list_active(self, offset: int, limit: int) -> Tuple[List[Admin], int]:
        ...

    def create(
        self,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        role: AdminRole = AdminRole.ADMIN,
        is_super: bool = False,
    ) -> Admin:
        ...

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
        ...


class OneTimeCodeRepository(Protocol):
    """Verification and password-reset codes keyed by (email, type)."""

    def upsert(self, email: str, code_type: CodeType, code: str, expires_at: datetime) -> OneTimeCode:
        ...

    def get(self, email: str, code_type: CodeType) -> Optional[OneTimeCode]:
        ...

    def increment_attempts(self, email: str, code_type: CodeType) -> int:
        ...

    def mark_verified(self, email: str, code_type: CodeType) -> None:
        ...

    def delete(self, email: str, code_type: CodeType) -> None:
        ...
