from __future__ import annotations

import logging
import time
from typing import Optional

from redis.exceptions import RedisError

from keyward.application.security.guard import AuthenticationGuard
from keyward.application.security.token_service import TokenService
from keyward.domain.models import Identity, TokenPair
from keyward.infrastructure.cache.token_blacklist import TokenBlacklistStore

logger = logging.getLogger(__name__)


class SessionService:
    """Refresh and logout for one identity kind; user and admin flows each own an instance."""

    def __init__(
        self,
        guard: AuthenticationGuard,
        token_service: TokenService,
        blacklist: TokenBlacklistStore,
    ) -> None:
        self._guard = guard
        self._tokens = token_service
        self._blacklist = blacklist

    async def refresh(self, refresh_token: str) -> tuple[Identity, TokenPair]:
        """Issue a new pair for a valid, unrevoked refresh token.

        The presented refresh token stays valid until it expires or is logged out.
        """
        identity = await self._guard.resolve_token(refresh_token, secret=self._tokens.refresh_secret)
        pair = self._tokens.issue_pair(identity.id, identity.email, identity.role)
        logger.info("Refreshed %s session for %s", self._guard.scope, identity.id)
        return identity, pair

    async def logout(self, access_token: Optional[str], refresh_token: Optional[str]) -> None:
        """Blacklist both tokens for their remaining lifetime. Never raises on store failure."""
        now = int(time.time())
        for kind, token in (("access", access_token), ("refresh", refresh_token)):
            if not token:
                continue
            claims = self._tokens.decode(token)
            if claims is None or claims.exp is None:
                logger.warning("Skipping undecodable %s token on %s logout", kind, self._guard.scope)
                continue
            ttl = max(0, claims.exp - now)
            if ttl <= 0:
                continue
            try:
                await self._blacklist.blacklist_token(token, ttl)
            except (RedisError, OSError):
                logger.exception("Could not revoke %s token during %s logout", kind, self._guard.scope)
        logger.info("%s logout processed", self._guard.scope.value.capitalize())

    async def revoke_identity(self, identity_id: str) -> None:
        """Blanket-revoke every token ``identity_id`` could present (TTL = refresh lifetime)."""
        await self._blacklist.blacklist_identity_tokens(
            identity_id, self._guard.scope, self._tokens.refresh_ttl_seconds
        )

    async def restore_identity(self, identity_id: str) -> None:
        await self._blacklist.clear_identity_blacklist(identity_id, self._guard.scope)
