"""Redis-backed revocation store for session tokens and identities."""

from __future__ import annotations

import logging
from typing import Any

from redis.exceptions import RedisError

from keyward.domain.models import IdentityScope

logger = logging.getLogger(__name__)

_STORE_ERRORS = (RedisError, OSError)


class TokenBlacklistStore:
    """Denylist of raw tokens and blanket per-identity revocations.

    Every entry carries a TTL equal to the remaining lifetime of whatever it
    revokes, so keys expire on their own. Reads fail open: if Redis is
    unreachable a token is reported as not revoked and the signature and expiry
    checks remain the primary gate. Writes propagate the store error to the
    caller after logging it.
    """

    _SENTINEL = "1"

    def __init__(self, client: Any, prefix: str = "blacklist") -> None:
        self._client = client
        self._prefix = prefix

    # Key layout -------------------------------------------------------------
    def _token_key(self, token: str) -> str:
        return f"{self._prefix}:token:{token}"

    def _identity_key(self, identity_id: str, scope: IdentityScope) -> str:
        return f"{self._prefix}:{IdentityScope(scope).value}:{identity_id}"

    # Tokens -----------------------------------------------------------------
    async def blacklist_token(self, token: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            logger.debug("Skipping blacklist write for already-expired token")
            return
        try:
            await self._client.set(self._token_key(token), self._SENTINEL, ex=int(ttl_seconds))
        except _STORE_ERRORS as exc:
            logger.error("Failed to blacklist token: %s", exc)
            raise
        logger.info("Token blacklisted (prefix=%s, ttl=%ss)", token[:20], ttl_seconds)

    async def is_token_blacklisted(self, token: str) -> bool:
        return await self._exists(self._token_key(token))

    # Identities -------------------------------------------------------------
    async def blacklist_identity_tokens(
        self, identity_id: str, scope: IdentityScope, ttl_seconds: int
    ) -> None:
        if ttl_seconds <= 0:
            logger.debug("Skipping blanket revocation for %s %s with non-positive TTL", scope, identity_id)
            return
        try:
            await self._client.set(
                self._identity_key(identity_id, scope), self._SENTINEL, ex=int(ttl_seconds)
            )
        except _STORE_ERRORS as exc:
            logger.error("Failed to blacklist %s tokens for %s: %s", scope, identity_id, exc)
            raise
        logger.info("All %s tokens revoked for %s (ttl=%ss)", scope, identity_id, ttl_seconds)

    async def is_identity_blacklisted(self, identity_id: str, scope: IdentityScope) -> bool:
        return await self._exists(self._identity_key(identity_id, scope))

    async def clear_identity_blacklist(self, identity_id: str, scope: IdentityScope) -> None:
        try:
            await self._client.delete(self._identity_key(identity_id, scope))
        except _STORE_ERRORS as exc:
            logger.error("Failed to clear %s blacklist for %s: %s", scope, identity_id, exc)
            raise
        logger.info("Cleared %s blacklist for %s", scope, identity_id)

    async def _exists(self, key: str) -> bool:
        try:
            value = await self._client.get(key)
        except _STORE_ERRORS as exc:
            logger.error("Revocation store read failed, treating key as absent: %s", exc)
            return False
        return value is not None
