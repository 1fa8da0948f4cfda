from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import status

from keyward.application.security.google_identity import GoogleIdentityVerifier, GoogleTokenError
from keyward.application.security.passwords import hash_password_async, verify_password_async
from keyward.application.security.token_service import TokenInvalidError, TokenService
from keyward.application.services.notifications import dispatch_email
from keyward.application.services.session_service import SessionService
from keyward.application.services.verification_codes import VerificationCodeManager
from keyward.core.errors import AuthError, AuthErrorCode, bad_request, conflict, not_found, unauthorized
from keyward.domain.models import CodeType, TokenPair, User
from keyward.domain.ports.notifications import EmailSender, EmailTemplate
from keyward.domain.ports.persistence import DuplicateEmailError, UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LoginResult:
    user: User
    tokens: Optional[TokenPair]

    @property
    def email_verified(self) -> bool:
        return self.user.email_verified


class UserAuthService:
    """Registration, email verification, login and password reset for end users."""

    def __init__(
        self,
        users: UserRepository,
        codes: VerificationCodeManager,
        token_service: TokenService,
        sessions: SessionService,
        email_sender: Optional[EmailSender] = None,
        google_verifier: Optional[GoogleIdentityVerifier] = None,
        email_timeout_seconds: Optional[float] = None,
    ) -> None:
        self._users = users
        self._codes = codes
        self._tokens = token_service
        self._sessions = sessions
        self._email = email_sender
        self._google = google_verifier
        self._email_timeout = email_timeout_seconds

    # Registration -----------------------------------------------------------
    async def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        phone_number: Optional[str] = None,
    ) -> tuple[User, TokenPair]:
        logger.info("User registration requested for %s", email)
        if self._users.get_by_email(email):
            logger.warning("Registration rejected, %s already exists", email)
            raise conflict("User with this email already exists.")

        password_hash = await hash_password_async(password)
        try:
            user = self._users.create(
                email=email,
                password_hash=password_hash,
                first_name=first_name,
                last_name=last_name,
                phone_number=phone_number,
                email_verified=False,
            )
        except DuplicateEmailError:
            logger.warning("Registration lost a race for %s", email)
            raise conflict("User with this email already exists.") from None
        await self._send_verification_code(user)
        tokens = self._tokens.issue_pair(user.id, user.email, user.role)
        logger.info("User %s registered", user.id)
        return user, tokens

    async def verify_email(self, email: str, code: str) -> tuple[User, TokenPair]:
        user = self._users.get_by_email(email)
        if user is None:
            logger.warning("Email verification for unknown address %s", email)
            raise not_found("Please check your email and try again.")

        self._codes.check(user.email, CodeType.SIGNUP, code)
        user = self._users.update(user.id, email_verified=True)
        self._codes.consume(user.email, CodeType.SIGNUP)
        logger.info("User %s verified their email", user.id)
        return user, self._tokens.issue_pair(user.id, user.email, user.role)

    async def resend_verification(self, email: str) -> None:
        user = self._users.get_by_email(email)
        if user is None:
            raise not_found("Please check your email and try again.")
        if user.email_verified:
            raise bad_request("Email already verified.", AuthErrorCode.EMAIL_ALREADY_VERIFIED)
        await self._send_verification_code(user)
        logger.info("Verification code re-sent to user %s", user.id)

    # Login ------------------------------------------------------------------
    async def login(self, email: str, password: str) -> LoginResult:
        logger.info("User login attempt for %s", email)
        user = self._users.get_by_email(email)
        if user is None:
            logger.warning("User login failed, unknown email %s", email)
            raise self._invalid_credentials()
        self._ensure_can_login(user)
        if not user.password_hash:
            raise unauthorized(
                AuthErrorCode.INVALID_CREDENTIALS,
                "Please use the appropriate login method for your account.",
            )
        if not await verify_password_async(password, user.password_hash):
            logger.warning("User login failed, bad password for %s", user.id)
            raise self._invalid_credentials()

        if not user.email_verified:
            logger.info("User %s must verify email before a session is issued", user.id)
            await self._send_verification_code(user)
            return LoginResult(user=user, tokens=None)

        logger.info("User %s logged in", user.id)
        return LoginResult(user=user, tokens=self._tokens.issue_pair(user.id, user.email, user.role))

    async def login_with_google(self, google_id_token: str) -> tuple[User, TokenPair, bool]:
        """Sign in with a Google ID token, creating a password-less account on first use.

        Returns the user, a token pair and whether the account was just created.
        """
        if self._google is None:
            logger.error("Google login requested but GOOGLE_CLIENT_ID is not configured")
            raise bad_request("Google authentication not configured.")
        try:
            identity = await self._google.verify(google_id_token)
        except GoogleTokenError:
            raise unauthorized(AuthErrorCode.INVALID_TOKEN, "Invalid Google token.") from None

        user = self._users.get_by_email(identity.email)
        is_new_user = user is None
        if user is None:
            logger.info("Creating account for Google sign-in %s", identity.email)
            try:
                user = self._users.create(
                    email=identity.email,
                    password_hash=None,
                    first_name=identity.first_name,
                    last_name=identity.last_name,
                    email_verified=True,
                )
            except DuplicateEmailError:
                raise conflict("User with this email already exists.") from None
        else:
            self._ensure_can_login(user)
            if not user.email_verified:
                user = self._users.update(user.id, email_verified=True)

        logger.info("User %s signed in with Google", user.id)
        return user, self._tokens.issue_pair(user.id, user.email, user.role), is_new_user

    # Password reset ---------------------------------------------------------
    async def forgot_password(self, email: str) -> None:
        user = self._users.get_by_email(email)
        if user is None:
            logger.warning("Password reset requested for unknown email %s", email)
            raise not_found("Invalid email.")
        record = self._codes.issue(user.email, CodeType.USER)
        await dispatch_email(
            self._email,
            user.email,
            EmailTemplate.USER_PASSWORD_RESET,
            {"name": user.full_name, "code": record.code, "expiry_minutes": self._codes.expiration_minutes},
            timeout=self._email_timeout,
        )

    async def verify_reset_code(self, email: str, code: str) -> str:
        """Check the emailed code and return a short-lived reset token."""
        user = self._users.get_by_email(email)
        if user is None:
            raise not_found("Invalid email.")
        self._codes.check(user.email, CodeType.USER, code)
        self._codes.mark_verified(user.email, CodeType.USER)
        logger.info("Password reset code verified for user %s", user.id)
        return self._tokens.issue_reset_token(user.email)

    async def reset_password(self, reset_token: str, new_password: str) -> None:
        try:
            email = self._tokens.verify_reset_token(reset_token)
        except TokenInvalidError:
            logger.warning("Password reset attempted with an invalid reset token")
            raise unauthorized(AuthErrorCode.INVALID_TOKEN, "Invalid or expired reset token.") from None

        user = self._users.get_by_email(email)
        if user is None:
            raise not_found("Invalid reset token.")
        self._codes.require_verified(user.email, CodeType.USER)

        password_hash = await hash_password_async(new_password)
        self._users.update(user.id, password_hash=password_hash)
        self._codes.consume(user.email, CodeType.USER)
        logger.info("Password reset completed for user %s", user.id)

    # Sessions ---------------------------------------------------------------
    async def refresh(self, refresh_token: str) -> TokenPair:
        _, pair = await self._sessions.refresh(refresh_token)
        return pair

    async def logout(self, access_token: Optional[str], refresh_token: Optional[str]) -> None:
        await self._sessions.logout(access_token, refresh_token)

    # Helpers ----------------------------------------------------------------
    async def _send_verification_code(self, user: User) -> None:
        record = self._codes.issue(user.email, CodeType.SIGNUP)
        await dispatch_email(
            self._email,
            user.email,
            EmailTemplate.EMAIL_VERIFICATION,
            {"name": user.full_name, "code": record.code, "expiry_minutes": self._codes.expiration_minutes},
            timeout=self._email_timeout,
        )

    @staticmethod
    def _ensure_can_login(user: User) -> None:
        if user.is_gone:
            logger.warning("User login rejected, account %s is deleted", user.id)
            raise unauthorized(AuthErrorCode.ACCOUNT_GONE, "This account does not exist.")
        if not user.is_active:
            logger.warning("User login rejected, account %s is %s", user.id, user.status)
            raise unauthorized(AuthErrorCode.ACCOUNT_INACTIVE, "You can't login at the moment.")

    @staticmethod
    def _invalid_credentials() -> AuthError:
        return AuthError(
            status_code=status.HTTP_401_UNAUTHORIZED,
            code=AuthErrorCode.INVALID_CREDENTIALS,
            message="Invalid email or password.",
        )
