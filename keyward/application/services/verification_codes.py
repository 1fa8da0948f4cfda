"""Issuing and checking short numeric codes for email verification and password resets."""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone

from keyward.core.constants import ADMIN_OTP_LENGTH, DEFAULT_OTP, MAX_CODE_ATTEMPTS, OTP_LENGTH
from keyward.core.errors import AuthErrorCode, bad_request
from keyward.domain.models import CodeType, OneTimeCode
from keyward.domain.ports.persistence import OneTimeCodeRepository

logger = logging.getLogger(__name__)


def generate_user_code() -> str:
    """Six digits, never starting with zero."""
    low = 10 ** (OTP_LENGTH - 1)
    return str(low + secrets.randbelow(9 * low))


def generate_admin_code() -> str:
    """Four digits, zero-padded."""
    return f"{secrets.randbelow(10 ** ADMIN_OTP_LENGTH):0{ADMIN_OTP_LENGTH}d}"


class VerificationCodeManager:
    """Wraps the code repository with expiry, attempt-cap and one-shot deletion rules."""

    def __init__(
        self,
        repository: OneTimeCodeRepository,
        expiration_minutes: int,
        max_attempts: int = MAX_CODE_ATTEMPTS,
        development_mode: bool = False,
    ) -> None:
        self._repository = repository
        self._expiration = timedelta(minutes=expiration_minutes)
        self._max_attempts = max_attempts
        self._development_mode = development_mode

    @property
    def expiration_minutes(self) -> int:
        return int(self._expiration.total_seconds() // 60)

    def issue(self, email: str, code_type: CodeType) -> OneTimeCode:
        """Create or overwrite the live code for ``(email, code_type)``."""
        if code_type is CodeType.ADMIN:
            code = DEFAULT_OTP if self._development_mode else generate_admin_code()
        else:
            code = generate_user_code()
        expires_at = datetime.now(tz=timezone.utc) + self._expiration
        record = self._repository.upsert(email, code_type, code, expires_at)
        logger.info("Issued %s code for %s (expires %s)", code_type, email, expires_at.isoformat())
        return record

    def check(self, email: str, code_type: CodeType, code: str) -> OneTimeCode:
        """Validate ``code`` against the live record; raises ``AuthError`` (400) on any failure.

        Expired records and records past the attempt cap are deleted so the
        caller has to request a fresh code. A mismatch bumps ``attempts``.
        """
        record = self._repository.get(email, code_type)
        if record is None:
            logger.warning("No %s code on file for %s", code_type, email)
            raise bad_request("Please request a new code first.", AuthErrorCode.CODE_NOT_FOUND)

        if record.is_expired():
            self._repository.delete(email, code_type)
            logger.warning("Expired %s code presented for %s", code_type, email)
            raise bad_request("Code expired. Please request a new one.", AuthErrorCode.CODE_EXPIRED)

        if record.attempts >= self._max_attempts:
            self._repository.delete(email, code_type)
            logger.warning("Attempt cap reached for %s code of %s", code_type, email)
            raise bad_request(
                "Too many failed attempts. Please request a new code.",
                AuthErrorCode.TOO_MANY_ATTEMPTS,
            )

        # compare_digest only accepts ASCII str; compare the encoded bytes.
        if not secrets.compare_digest(record.code.encode("utf-8"), code.encode("utf-8")):
            attempts = self._repository.increment_attempts(email, code_type)
            logger.warning("Invalid %s code for %s (attempt %s)", code_type, email, attempts)
            raise bad_request("Invalid code.", AuthErrorCode.INVALID_CODE)

        return record

    def mark_verified(self, email: str, code_type: CodeType) -> None:
        self._repository.mark_verified(email, code_type)

    def require_verified(self, email: str, code_type: CodeType) -> OneTimeCode:
        """Second phase of a reset: the record must exist, be unexpired and already verified."""
        record = self._repository.get(email, code_type)
        if record is None:
            raise bad_request("Please request a password reset first.", AuthErrorCode.CODE_NOT_FOUND)
        if record.is_expired():
            self._repository.delete(email, code_type)
            raise bad_request("Code expired. Please request a new one.", AuthErrorCode.CODE_EXPIRED)
        if record.verified_at is None:
            raise bad_request("Please verify your reset code first.", AuthErrorCode.CODE_NOT_VERIFIED)
        return record

    def consume(self, email: str, code_type: CodeType) -> None:
        self._repository.delete(email, code_type)
