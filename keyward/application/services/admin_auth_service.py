from __future__ import annotations

import logging
from typing import Optional

from keyward.application.security.passwords import hash_password, hash_password_async, verify_password_async
from keyward.application.security.token_service import TokenService
from keyward.application.services.notifications import dispatch_email
from keyward.application.services.session_service import SessionService
from keyward.application.services.verification_codes import VerificationCodeManager
from keyward.core.errors import AuthErrorCode, bad_request, not_found, unauthorized
from keyward.domain.models import Admin, AdminRole, CodeType, TokenPair
from keyward.domain.ports.notifications import EmailSender, EmailTemplate
from keyward.domain.ports.persistence import AdminRepository

logger = logging.getLogger(__name__)


def create_default_admin(admins: AdminRepository, email: Optional[str], password: Optional[str]) -> Optional[Admin]:
    """Create the super admin when no admin record exists yet; a no-op otherwise."""
    existing = admins.count()
    if existing:
        logger.info("Admin accounts present (%s); skipping default admin creation", existing)
        return None
    if not email or not password:
        logger.warning("No admin accounts exist and ADMIN_EMAIL/ADMIN_PASSWORD are not set")
        return None
    logger.info("Creating default administrator account for %s", email)
    return admins.create(
        email=email,
        password_hash=hash_password(password),
        first_name="Admin",
        last_name="User",
        role=AdminRole.ADMIN,
        is_super=True,
    )


class AdminAuthService:
    """Manages administrator sign-in, password reset and the bootstrap account."""

    def __init__(
        self,
        admins: AdminRepository,
        codes: VerificationCodeManager,
        token_service: TokenService,
        sessions: SessionService,
        email_sender: Optional[EmailSender] = None,
        email_timeout_seconds: Optional[float] = None,
    ) -> None:
        self._admins = admins
        self._codes = codes
        self._tokens = token_service
        self._sessions = sessions
        self._email = email_sender
        self._email_timeout = email_timeout_seconds

    # ------------------------------------------------------------------
    def ensure_default_admin(self, email: Optional[str], password: Optional[str]) -> Optional[Admin]:
        return create_default_admin(self._admins, email, password)

    async def login(self, email: str, password: str) -> tuple[Admin, TokenPair]:
        logger.info("Admin login attempt for %s", email)
        admin = self._admins.get_by_email(email)
        if admin is None:
            logger.warning("Admin login failed, unknown email %s", email)
            raise unauthorized(AuthErrorCode.INVALID_CREDENTIALS, "Invalid email or password.")
        if admin.is_gone:
            logger.warning("Admin login rejected, account %s is deleted", admin.id)
            raise unauthorized(AuthErrorCode.ACCOUNT_GONE, "This account does not exist.")
        if not admin.is_active:
            logger.warning("Admin login rejected, account %s is %s", admin.id, admin.status)
            raise unauthorized(AuthErrorCode.ACCOUNT_INACTIVE, "You can't login at the moment.")
        if not await verify_password_async(password, admin.password_hash):
            logger.warning("Admin login failed, bad password for %s", admin.id)
            raise unauthorized(AuthErrorCode.INVALID_CREDENTIALS, "Invalid email or password.")

        logger.info("Admin %s logged in", admin.id)
        return admin, self._tokens.issue_pair(admin.id, admin.email, admin.role)

    async def forgot_password(self, email: str, request_ip: Optional[str] = None) -> None:
        logger.info("Admin password reset requested for %s from %s", email, request_ip or "unknown")
        admin = self._admins.get_by_email(email)
        if admin is None or admin.is_gone:
            raise not_found("Admin not found.")
        record = self._codes.issue(admin.email, CodeType.ADMIN)
        await dispatch_email(
            self._email,
            admin.email,
            EmailTemplate.ADMIN_PASSWORD_RESET,
            {
                "name": admin.full_name,
                "code": record.code,
                "expiry_minutes": self._codes.expiration_minutes,
                "request_ip": request_ip or "Unknown",
            },
            timeout=self._email_timeout,
        )

    async def verify_code(self, email: str, code: str) -> bool:
        self._codes.check(email, CodeType.ADMIN, code)
        self._codes.mark_verified(email, CodeType.ADMIN)
        logger.info("Admin reset code verified for %s", email)
        return True

    async def reset_password(self, email: str, code: str, new_password: str) -> None:
        record = self._codes.check(email, CodeType.ADMIN, code)
        if record.verified_at is None:
            raise bad_request("Please verify your reset code first.", AuthErrorCode.CODE_NOT_VERIFIED)

        admin = self._admins.get_by_email(email)
        if admin is None or admin.is_gone:
            raise not_found("Admin not found.")

        password_hash = await hash_password_async(new_password)
        self._admins.update(admin.id, password_hash=password_hash)
        self._codes.consume(admin.email, CodeType.ADMIN)
        logger.info("Password reset completed for admin %s", admin.id)

    async def refresh(self, refresh_token: str) -> TokenPair:
        _, pair = await self._sessions.refresh(refresh_token)
        return pair

    async def logout(self, access_token: Optional[str], refresh_token: Optional[str]) -> None:
        await self._sessions.logout(access_token, refresh_token)
