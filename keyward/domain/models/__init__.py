"""Domain models for the keyward application."""

from .identity import (
    AccountStatus,
    Admin,
    AdminRole,
    Identity,
    IdentityScope,
    Role,
    User,
    UserRole,
)
from .one_time_code import CodeType, OneTimeCode
from .tokens import AuthenticatedIdentity, TokenClaims, TokenPair

__all__ = [
    "AccountStatus",
    "Admin",
    "AdminRole",
    "AuthenticatedIdentity",
    "CodeType",
    "Identity",
    "IdentityScope",
    "OneTimeCode",
    "Role",
    "TokenClaims",
    "TokenPair",
    "User",
    "UserRole",
]
