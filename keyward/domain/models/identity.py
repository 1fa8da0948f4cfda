"""Identity domain models for end users and administrators."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Optional, Union


class AccountStatus(StrEnum):
    ACTIVE = "ACTIVE"
    DEACTIVATED = "DEACTIVATED"
    DELETED = "DELETED"


class UserRole(StrEnum):
    USER = "USER"


class AdminRole(StrEnum):
    ADMIN = "ADMIN"
    MODERATOR = "MODERATOR"


class IdentityScope(StrEnum):
    """Namespace an identity lives in; user and admin ids never share one."""

    USER = "user"
    ADMIN = "admin"


Role = Union[UserRole, AdminRole]


class _AccountState:
    """Shared authentication-eligibility rules for identity records."""

    __slots__ = ()

    @property
    def is_gone(self) -> bool:
        return bool(self.is_deleted) or self.status == AccountStatus.DELETED  # type: ignore[attr-defined]

    @property
    def is_active(self) -> bool:
        return not self.is_gone and self.status == AccountStatus.ACTIVE  # type: ignore[attr-defined]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()  # type: ignore[attr-defined]


@dataclass(slots=True)
class User(_AccountState):
    """
    End-user account.

    Attributes:
        id: Opaque unique identifier
        email: Lower-cased, unique email address
        password_hash: bcrypt hash, ``None`` for accounts without a password
        role: Closed user role
        status: Lifecycle status; only ``ACTIVE`` may authenticate
        is_deleted: Soft-delete flag, independent of ``status``
        email_verified: Whether the signup code has been confirmed
    """

    id: str
    email: str
    password_hash: Optional[str]
    first_name: str
    last_name: str
    phone_number: Optional[str]
    role: UserRole
    status: AccountStatus
    is_deleted: bool
    email_verified: bool
    created_at: datetime
    updated_at: datetime

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email} status={self.status} verified={self.email_verified}>"


@dataclass(slots=True)
class Admin(_AccountState):
    """Administrator account. ``is_super`` admins cannot be deleted or deactivated."""

    id: str
    email: str
    password_hash: Optional[str]
    first_name: str
    last_name: str
    role: AdminRole
    status: AccountStatus
    is_deleted: bool
    is_super: bool
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None

    def __repr__(self) -> str:
        return f"<Admin id={self.id} email={self.email} role={self.role} status={self.status}>"


Identity = Union[User, Admin]
