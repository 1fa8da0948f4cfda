"""Request authentication and role authorization.

One :class:`AuthenticationGuard` implementation serves both identity kinds; the
user and admin guards differ only in their :class:`GuardConfig`.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Any, Collection, Optional

from keyward.application.security.passwords import verify_password_async
from keyward.application.security.token_service import (
    MalformedTokenError,
    TokenExpiredError,
    TokenInvalidError,
    TokenService,
)
from keyward.core.errors import AuthErrorCode, unauthorized
from keyward.core.logging import get_audit_logger
from keyward.domain.models import AuthenticatedIdentity, Identity, IdentityScope
from keyward.domain.ports.persistence import IdentityLookup
from keyward.infrastructure.cache.token_blacklist import TokenBlacklistStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GuardConfig:
    scope: IdentityScope
    secret: str
    repository: IdentityLookup[Any]
    basic_auth_allowed: bool = False

    @property
    def label(self) -> str:
        return self.scope.value.capitalize()


class AuthenticationGuard:
    """Turns an ``Authorization`` header into an :class:`AuthenticatedIdentity` or raises ``AuthError``."""

    def __init__(
        self,
        config: GuardConfig,
        token_service: TokenService,
        blacklist: TokenBlacklistStore,
    ) -> None:
        self._config = config
        self._tokens = token_service
        self._blacklist = blacklist

    @property
    def scope(self) -> IdentityScope:
        return self._config.scope

    async def authenticate(self, authorization: Optional[str]) -> AuthenticatedIdentity:
        if not authorization or not authorization.strip():
            raise unauthorized(AuthErrorCode.AUTH_HEADER_MISSING, "Authorization header is missing or invalid.")

        scheme, _, value = authorization.strip().partition(" ")
        value = value.strip()

        if scheme.lower() == "basic" and self._config.basic_auth_allowed:
            identity = await self._authenticate_basic(value)
        else:
            if scheme.lower() != "bearer" or not value:
                raise unauthorized(AuthErrorCode.INVALID_AUTH_TYPE, "Invalid authorization type.")
            identity = await self.resolve_token(value)

        return AuthenticatedIdentity(id=identity.id, role=identity.role, scope=self._config.scope)

    async def resolve_token(self, token: str, secret: Optional[str] = None) -> Identity:
        """Run the bearer checks against ``token`` and return the live identity it names.

        ``secret`` defaults to the guard's access secret; the refresh flow passes
        the refresh secret to reuse the same checks.
        """
        if await self._blacklist.is_token_blacklisted(token):
            logger.warning("Rejected revoked %s token", self._config.scope)
            raise unauthorized(AuthErrorCode.TOKEN_REVOKED, "Token has been revoked.")

        try:
            claims = self._tokens.verify(token, secret or self._config.secret)
        except TokenExpiredError:
            raise unauthorized(AuthErrorCode.TOKEN_EXPIRED, "Token expired.") from None
        except MalformedTokenError:
            raise unauthorized(AuthErrorCode.MALFORMED_TOKEN, "Malformed token.") from None
        except TokenInvalidError:
            raise unauthorized(AuthErrorCode.AUTH_FAILED, "Authentication failed.") from None

        if not claims.sub:
            raise unauthorized(AuthErrorCode.INVALID_TOKEN, "Invalid token: ID not present.")

        if await self._blacklist.is_identity_blacklisted(claims.sub, self._config.scope):
            logger.warning("Rejected token for blanket-revoked %s %s", self._config.scope, claims.sub)
            raise unauthorized(
                AuthErrorCode.IDENTITY_REVOKED,
                f"{self._config.label} tokens have been revoked.",
            )

        identity = self._config.repository.get_by_id(claims.sub)
        self._ensure_can_authenticate(identity)
        return identity

    async def _authenticate_basic(self, encoded: str) -> Identity:
        try:
            decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError, ValueError):
            raise self._basic_failure() from None
        email, separator, password = decoded.partition(":")
        if not separator or not email or not password:
            raise self._basic_failure()

        identity = self._config.repository.get_by_email(email)
        if identity is None or not identity.is_active:
            raise self._basic_failure()
        if not await verify_password_async(password, identity.password_hash):
            raise self._basic_failure()
        return identity

    @staticmethod
    def _basic_failure():
        return unauthorized(AuthErrorCode.BASIC_AUTH_FAILED, "Invalid email or password.")

    @staticmethod
    def _ensure_can_authenticate(identity: Optional[Identity]) -> None:
        if identity is None or identity.is_gone:
            raise unauthorized(AuthErrorCode.ACCOUNT_GONE, "This account does not exist.")
        if not identity.is_active:
            raise unauthorized(AuthErrorCode.ACCOUNT_INACTIVE, "You can't login at the moment.")


def authorize(
    identity: Optional[AuthenticatedIdentity],
    allowed_roles: Collection[str],
    client_ip: Optional[str] = None,
) -> None:
    """Reject ``identity`` unless its role is in ``allowed_roles``; an empty collection allows everyone."""
    if not allowed_roles:
        return
    if identity is not None and identity.role in allowed_roles:
        return
    scope = identity.scope.value if identity is not None else "user"
    identity_id = identity.id if identity is not None else "unknown"
    get_audit_logger().warning(
        "Unauthorized attempt by %s: %s from IP: %s", scope, identity_id, client_ip or "unknown"
    )
    raise unauthorized(AuthErrorCode.INSUFFICIENT_PERMISSIONS, "Insufficient permissions.")
