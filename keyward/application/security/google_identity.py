"""Google ID token verification for "Sign in with Google"."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Mapping

from google.auth.exceptions import GoogleAuthError
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

logger = logging.getLogger(__name__)


class GoogleTokenError(Exception):
    """The ID token was rejected or carries no usable identity."""


@dataclass(frozen=True, slots=True)
class GoogleIdentity:
    email: str
    first_name: str
    last_name: str

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> GoogleIdentity:
        email = (claims.get("email") or "").strip().lower()
        name = (claims.get("name") or "").strip()
        if not email or not name:
            raise GoogleTokenError("Token payload is missing email or name")
        if claims.get("email_verified") is False:
            raise GoogleTokenError("Google has not verified this email address")
        first_name, _, last_name = name.partition(" ")
        return cls(email=email, first_name=first_name, last_name=last_name.strip())


class GoogleIdentityVerifier:
    """Checks signature, audience and expiry of Google-issued ID tokens."""

    def __init__(self, client_id: str) -> None:
        self._client_id = client_id
        self._request = google_requests.Request()

    async def verify(self, token: str) -> GoogleIdentity:
        try:
            claims = await asyncio.to_thread(
                id_token.verify_oauth2_token, token, self._request, self._client_id
            )
        except (ValueError, GoogleAuthError) as exc:
            logger.warning("Google ID token rejected: %s", exc)
            raise GoogleTokenError(str(exc)) from exc
        return GoogleIdentity.from_claims(claims)
