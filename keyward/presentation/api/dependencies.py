from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ...application.security.guard import AuthenticationGuard, authorize
from ...core.dependencies import get_admin_guard, get_user_guard
from ...domain.models import AdminRole, AuthenticatedIdentity, UserRole

_bearer_scheme = HTTPBearer(auto_error=False)


def client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def optional_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> Optional[str]:
    """Bearer token if one was sent; logout accepts requests without it."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        return None
    return credentials.credentials or None


async def _guard_request(
    request: Request,
    guard: AuthenticationGuard,
    roles: tuple,
) -> AuthenticatedIdentity:
    identity = await guard.authenticate(request.headers.get("Authorization"))
    authorize(identity, {str(role) for role in roles}, client_ip(request))
    request.state.identity = identity
    return identity


def require_user(*roles: UserRole):
    async def dependency(
        request: Request,
        guard: AuthenticationGuard = Depends(get_user_guard),
    ) -> AuthenticatedIdentity:
        return await _guard_request(request, guard, roles)

    return dependency


def require_admin(*roles: AdminRole):
    async def dependency(
        request: Request,
        guard: AuthenticationGuard = Depends(get_admin_guard),
    ) -> AuthenticatedIdentity:
        return await _guard_request(request, guard, roles)

    return dependency
