"""Error codes and the HTTP exception type raised by services and guards."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, List, Optional

from fastapi import HTTPException, status


class AuthErrorCode(StrEnum):
    """Machine-readable error codes carried in the error envelope."""

    AUTH_HEADER_MISSING = "AUTH_HEADER_MISSING"
    INVALID_AUTH_TYPE = "INVALID_AUTH_TYPE"
    BASIC_AUTH_FAILED = "BASIC_AUTH_FAILED"
    TOKEN_REVOKED = "TOKEN_REVOKED"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    MALFORMED_TOKEN = "MALFORMED_TOKEN"
    AUTH_FAILED = "AUTH_FAILED"
    INVALID_TOKEN = "INVALID_TOKEN"
    IDENTITY_REVOKED = "IDENTITY_REVOKED"
    ACCOUNT_GONE = "ACCOUNT_GONE"
    ACCOUNT_INACTIVE = "ACCOUNT_INACTIVE"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_CODE = "INVALID_CODE"
    CODE_EXPIRED = "CODE_EXPIRED"
    TOO_MANY_ATTEMPTS = "TOO_MANY_ATTEMPTS"
    CODE_NOT_FOUND = "CODE_NOT_FOUND"
    CODE_NOT_VERIFIED = "CODE_NOT_VERIFIED"
    EMAIL_ALREADY_VERIFIED = "EMAIL_ALREADY_VERIFIED"
    CONFLICT = "CONFLICT"
    NOT_FOUND = "NOT_FOUND"
    BAD_REQUEST = "BAD_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class AuthError(HTTPException):
    """HTTP exception carrying a stable error code and user-facing message."""

    def __init__(
        self,
        *,
        status_code: int,
        code: AuthErrorCode,
        message: str,
        errors: Optional[List[Any]] = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=message)
        self.code = code
        self.message = message
        self.errors = errors

    def __repr__(self) -> str:
        return f"<AuthError {self.status_code} {self.code}: {self.message}>"


def unauthorized(code: AuthErrorCode, message: str) -> AuthError:
    return AuthError(status_code=status.HTTP_401_UNAUTHORIZED, code=code, message=message)


def bad_request(message: str, code: AuthErrorCode = AuthErrorCode.BAD_REQUEST) -> AuthError:
    return AuthError(status_code=status.HTTP_400_BAD_REQUEST, code=code, message=message)


def not_found(message: str) -> AuthError:
    return AuthError(status_code=status.HTTP_404_NOT_FOUND, code=AuthErrorCode.NOT_FOUND, message=message)


def conflict(message: str) -> AuthError:
    return AuthError(status_code=status.HTTP_409_CONFLICT, code=AuthErrorCode.CONFLICT, message=message)


def error_envelope(
    message: str,
    code: str,
    errors: Optional[List[Any]] = None,
) -> dict:
    return {
        "status": "error",
        "code": code,
        "message": message,
        "data": None,
        "errors": errors,
    }
