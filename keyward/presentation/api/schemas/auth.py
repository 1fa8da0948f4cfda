from typing import Optional

from pydantic import EmailStr, Field

from .common import (
    ADMIN_CODE_PATTERN,
    PHONE_PATTERN,
    USER_CODE_PATTERN,
    CamelModel,
    StrongPassword,
)


class RegisterRequest(CamelModel):
    email: EmailStr
    password: StrongPassword
    first_name: str = Field(min_length=2, max_length=100)
    last_name: str = Field(min_length=2, max_length=100)
    phone_number: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class EmailRequest(CamelModel):
    email: EmailStr


class VerifyEmailRequest(CamelModel):
    email: EmailStr
    code: str = Field(pattern=USER_CODE_PATTERN)


class VerifyResetCodeRequest(CamelModel):
    email: EmailStr
    code: str = Field(pattern=USER_CODE_PATTERN)


class UserResetPasswordRequest(CamelModel):
    reset_token: str = Field(min_length=1)
    new_password: StrongPassword


class AdminVerifyCodeRequest(CamelModel):
    email: EmailStr
    code: str = Field(pattern=ADMIN_CODE_PATTERN)


class AdminResetPasswordRequest(CamelModel):
    email: EmailStr
    code: str = Field(pattern=ADMIN_CODE_PATTERN)
    new_password: StrongPassword


class GoogleAuthRequest(CamelModel):
    id_token: str = Field(min_length=1)


class RefreshTokenRequest(CamelModel):
    refresh_token: str = Field(min_length=1)


class LogoutRequest(CamelModel):
    refresh_token: Optional[str] = None
