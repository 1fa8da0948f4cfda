from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .identity import IdentityScope, Role


@dataclass(frozen=True, slots=True)
class TokenClaims:
    sub: Optional[str]
    email: Optional[str]
    role: Optional[str]
    exp: Optional[int]
    iat: Optional[int] = None


@dataclass(frozen=True, slots=True)
class TokenPair:
    access_token: str
    refresh_token: str

    def as_dict(self) -> dict:
        return {"accessToken": self.access_token, "refreshToken": self.refresh_token}


@dataclass(frozen=True, slots=True)
class AuthenticatedIdentity:
    """Identity attached to a request once the guard accepts its credential."""

    id: str
    role: Role
    scope: IdentityScope
