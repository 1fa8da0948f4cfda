"""Signing and verification of session and password-reset tokens."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from keyward.core.constants import (
    DEFAULT_TOKEN_EXPIRY_SECONDS,
    PASSWORD_RESET_PURPOSE,
    PASSWORD_RESET_TOKEN_TTL_SECONDS,
)
from keyward.domain.models import TokenClaims, TokenPair

logger = logging.getLogger(__name__)

_EXPIRY_PATTERN = re.compile(r"^(\d+)([smhdw])$", re.IGNORECASE)
_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400, "w": 604800}


class TokenInvalidError(Exception):
    """Raised when a token fails verification for any reason."""


class TokenExpiredError(TokenInvalidError):
    """The token is well-formed and correctly signed but past its expiry."""


class MalformedTokenError(TokenInvalidError):
    """The token could not be decoded or its signature does not match."""


def parse_expiry_to_seconds(value: Optional[str]) -> int:
    """Convert an expiry string such as ``"12h"`` or ``"7d"`` to seconds.

    Unparseable values fall back to seven days.
    """
    match = _EXPIRY_PATTERN.match((value or "").strip())
    if not match:
        logger.warning("Unparseable token expiry %r, using default of %s seconds", value, DEFAULT_TOKEN_EXPIRY_SECONDS)
        return DEFAULT_TOKEN_EXPIRY_SECONDS
    amount, unit = match.groups()
    return int(amount) * _UNIT_SECONDS[unit.lower()]


class TokenService:
    """Issues and verifies HS256 access/refresh token pairs."""

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_expiry: str = "12h",
        refresh_expiry: str = "7d",
        algorithm: str = "HS256",
    ) -> None:
        if not access_secret or not refresh_secret:
            raise RuntimeError("Both access and refresh token secrets must be configured.")
        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self._access_ttl = parse_expiry_to_seconds(access_expiry)
        self._refresh_ttl = parse_expiry_to_seconds(refresh_expiry)
        self._algorithm = algorithm

    @property
    def access_secret(self) -> str:
        return self._access_secret

    @property
    def refresh_secret(self) -> str:
        return self._refresh_secret

    @property
    def access_ttl_seconds(self) -> int:
        return self._access_ttl

    @property
    def refresh_ttl_seconds(self) -> int:
        """Lifetime of the longest-lived token; used as the TTL of blanket revocations."""
        return self._refresh_ttl

    # Session tokens ---------------------------------------------------------
    def issue_pair(self, subject_id: str, email: str, role: str) -> TokenPair:
        now = datetime.now(tz=timezone.utc)
        claims = {"sub": subject_id, "email": email, "role": str(role)}
        access = self._encode(claims, self._access_secret, now, self._access_ttl)
        refresh = self._encode(claims, self._refresh_secret, now, self._refresh_ttl)
        return TokenPair(access_token=access, refresh_token=refresh)

    def verify(self, token: str, secret: str) -> TokenClaims:
        payload = self._decode_verified(token, secret)
        return self._to_claims(payload)

    def verify_access(self, token: str) -> TokenClaims:
        return self.verify(token, self._access_secret)

    def verify_refresh(self, token: str) -> TokenClaims:
        return self.verify(token, self._refresh_secret)

    def decode(self, token: str) -> Optional[TokenClaims]:
        """Read claims without checking signature or expiry.

        Only meant for reading ``exp`` off a token that is being revoked; never
        use the result to make an authorization decision.
        """
        try:
            payload = jwt.decode(
                token,
                options={"verify_signature": False, "verify_exp": False},
                algorithms=[self._algorithm],
            )
        except jwt.PyJWTError:
            return None
        if not isinstance(payload, dict):
            return None
        return self._to_claims(payload)

    # Password reset ---------------------------------------------------------
    def issue_reset_token(self, email: str) -> str:
        now = datetime.now(tz=timezone.utc)
        claims = {"email": email, "purpose": PASSWORD_RESET_PURPOSE}
        return self._encode(claims, self._access_secret, now, PASSWORD_RESET_TOKEN_TTL_SECONDS)

    def verify_reset_token(self, token: str) -> str:
        """Return the email a reset token was minted for."""
        payload = self._decode_verified(token, self._access_secret)
        if payload.get("purpose") != PASSWORD_RESET_PURPOSE or not payload.get("email"):
            raise TokenInvalidError("Token was not issued for a password reset")
        return str(payload["email"])

    # Internals --------------------------------------------------------------
    def _encode(self, claims: Dict[str, Any], secret: str, now: datetime, ttl_seconds: int) -> str:
        payload = dict(claims)
        payload["iat"] = now
        payload["exp"] = now + timedelta(seconds=ttl_seconds)
        return jwt.encode(payload, secret, algorithm=self._algorithm)

    def _decode_verified(self, token: str, secret: str) -> Dict[str, Any]:
        try:
            return jwt.decode(token, secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError("Token expired") from exc
        except (jwt.DecodeError, jwt.InvalidSignatureError) as exc:
            raise MalformedTokenError(str(exc)) from exc
        except jwt.InvalidTokenError as exc:
            raise TokenInvalidError(str(exc)) from exc

    @staticmethod
    def _to_claims(payload: Dict[str, Any]) -> TokenClaims:
        def _as_int(value: Any) -> Optional[int]:
            try:
                return int(value) if value is not None else None
            except (TypeError, ValueError):
                return None

        sub = payload.get("sub")
        return TokenClaims(
            sub=str(sub) if sub else None,
            email=payload.get("email"),
            role=payload.get("role"),
            exp=_as_int(payload.get("exp")),
            iat=_as_int(payload.get("iat")),
        )
