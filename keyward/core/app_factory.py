from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings
from .constants import API_PREFIX
from .container import ApplicationContainer
from .errors import AuthError, AuthErrorCode, error_envelope
from .logging import configure_logging
from ..application.security.google_identity import GoogleIdentityVerifier
from ..application.security.guard import AuthenticationGuard, GuardConfig
from ..application.security.token_service import TokenService
from ..application.services.admin_auth_service import AdminAuthService
from ..application.services.admin_service import AdminService
from ..application.services.session_service import SessionService
from ..application.services.user_auth_service import UserAuthService
from ..application.services.user_service import UserService
from ..application.services.verification_codes import VerificationCodeManager
from ..domain.models import IdentityScope
from ..domain.ports.notifications import EmailSender
from ..infrastructure.cache.redis_client import close_redis_client, create_redis_client
from ..infrastructure.cache.token_blacklist import TokenBlacklistStore
from ..infrastructure.persistence.sqlite import SQLiteDatabase
from ..infrastructure.repositories.admin_repository import AdminRepository
from ..infrastructure.repositories.one_time_code_repository import OneTimeCodeRepository
from ..infrastructure.repositories.user_repository import UserRepository
from ..presentation.api.routers import admin_auth as admin_auth_router
from ..presentation.api.routers import admins as admins_router
from ..presentation.api.routers import user_auth as user_auth_router
from ..presentation.api.routers import users as users_router
from ..services.email_service import EmailService

logger = logging.getLogger(__name__)

_STATUS_CODES = {
    status.HTTP_400_BAD_REQUEST: AuthErrorCode.BAD_REQUEST,
    status.HTTP_401_UNAUTHORIZED: AuthErrorCode.AUTH_FAILED,
    status.HTTP_404_NOT_FOUND: AuthErrorCode.NOT_FOUND,
    status.HTTP_409_CONFLICT: AuthErrorCode.CONFLICT,
}


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()

    app = FastAPI(title="Keyward", lifespan=_create_lifespan(settings))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)

    app.include_router(user_auth_router.router, prefix=API_PREFIX)
    app.include_router(admin_auth_router.router, prefix=API_PREFIX)
    app.include_router(admins_router.router, prefix=API_PREFIX)
    app.include_router(users_router.router, prefix=API_PREFIX)

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        container: ApplicationContainer = app.state.container  # type: ignore[attr-defined]
        try:
            redis_ok = bool(await container.redis_client.ping())
        except (RedisError, OSError):
            redis_ok = False
        return {"ok": True, "redis": redis_ok}

    return app


def build_container(
    settings: Settings,
    database: SQLiteDatabase,
    redis_client: Any,
    email_sender: Optional[EmailSender] = None,
) -> ApplicationContainer:
    """Wire repositories, stores and services around already-open resources."""
    users = UserRepository(database)
    admins = AdminRepository(database)
    codes = VerificationCodeManager(
        OneTimeCodeRepository(database),
        expiration_minutes=settings.otp_expiration_minutes,
        development_mode=settings.is_development,
    )
    blacklist = TokenBlacklistStore(redis_client)
    token_service = TokenService(
        access_secret=settings.jwt_secret,
        refresh_secret=settings.jwt_refresh_secret,
        access_expiry=settings.jwt_expiry_time,
        refresh_expiry=settings.jwt_refresh_expiry_time,
    )
    user_guard = AuthenticationGuard(
        GuardConfig(
            scope=IdentityScope.USER,
            secret=settings.jwt_secret,
            repository=users,
            basic_auth_allowed=settings.basic_auth_enabled,
        ),
        token_service,
        blacklist,
    )
    admin_guard = AuthenticationGuard(
        GuardConfig(scope=IdentityScope.ADMIN, secret=settings.jwt_secret, repository=admins),
        token_service,
        blacklist,
    )
    user_sessions = SessionService(user_guard, token_service, blacklist)
    admin_sessions = SessionService(admin_guard, token_service, blacklist)

    google_verifier = (
        GoogleIdentityVerifier(settings.google_client_id) if settings.google_client_id else None
    )

    if email_sender is None:
        email_sender = EmailService(
            smtp_host=settings.smtp_host,
            smtp_port=settings.smtp_port,
            smtp_username=settings.smtp_username,
            smtp_password=settings.smtp_password,
            from_email=settings.smtp_from_email,
            timeout_seconds=settings.smtp_timeout_seconds,
        )

    return ApplicationContainer(
        settings=settings,
        database=database,
        redis_client=redis_client,
        token_blacklist=blacklist,
        token_service=token_service,
        user_guard=user_guard,
        admin_guard=admin_guard,
        user_auth_service=UserAuthService(
            users,
            codes,
            token_service,
            user_sessions,
            email_sender,
            google_verifier=google_verifier,
            email_timeout_seconds=settings.smtp_timeout_seconds,
        ),
        admin_auth_service=AdminAuthService(
            admins,
            codes,
            token_service,
            admin_sessions,
            email_sender,
            email_timeout_seconds=settings.smtp_timeout_seconds,
        ),
        admin_service=AdminService(admins, admin_sessions),
        user_service=UserService(users),
        email_service=email_sender,
    )


def _create_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging()
        database = SQLiteDatabase(settings.database_path)
        redis_client = create_redis_client(settings.redis_url)
        container = build_container(settings, database, redis_client)
        container.admin_auth_service.ensure_default_admin(
            settings.admin_default_email, settings.admin_default_password
        )
        app.state.container = container  # type: ignore[attr-defined]
        logger.info("Keyward started (environment=%s)", settings.environment)

        try:
            yield
        finally:
            await close_redis_client(redis_client)
            database.close()

    return lifespan


def _validation_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
    errors = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(location), "message": error.get("msg", "Invalid value")})
    return errors


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError) -> JSONResponse:
        logger.info("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.code)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(exc.message, exc.code, exc.errors),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        code = _STATUS_CODES.get(exc.status_code, AuthErrorCode.BAD_REQUEST)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(str(exc.detail), code),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_exception(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = _validation_errors(exc)
        logger.info("Validation failed on %s %s: %s", request.method, request.url.path, errors)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_envelope("Validation failed", AuthErrorCode.VALIDATION_ERROR, errors),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_envelope("Internal server error", AuthErrorCode.INTERNAL_SERVER_ERROR),
        )
