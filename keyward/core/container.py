from dataclasses import dataclass
from typing import Any

from ..application.security.guard import AuthenticationGuard
from ..application.security.token_service import TokenService
from ..application.services.admin_auth_service import AdminAuthService
from ..application.services.admin_service import AdminService
from ..application.services.user_auth_service import UserAuthService
from ..application.services.user_service import UserService
from ..domain.ports.notifications import EmailSender
from ..infrastructure.cache.token_blacklist import TokenBlacklistStore
from ..infrastructure.persistence.sqlite import SQLiteDatabase
from .config import Settings


@dataclass(slots=True)
class ApplicationContainer:
    """Dependency registry shared across the FastAPI application lifecycle."""

    settings: Settings
    database: SQLiteDatabase
    redis_client: Any
    token_blacklist: TokenBlacklistStore
    token_service: TokenService
    user_guard: AuthenticationGuard
    admin_guard: AuthenticationGuard
    user_auth_service: UserAuthService
    admin_auth_service: AdminAuthService
    admin_service: AdminService
    user_service: UserService
    email_service: EmailSender
