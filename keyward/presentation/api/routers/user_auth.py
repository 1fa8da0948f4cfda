from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, status

from ....application.services.user_auth_service import UserAuthService
from ....core.dependencies import get_user_auth_service
from ....core.responses import success_response
from ...api.dependencies import optional_bearer_token
from ...api.schemas.auth import (
    EmailRequest,
    GoogleAuthRequest,
    LoginRequest,
    LogoutRequest,
    RefreshTokenRequest,
    RegisterRequest,
    UserResetPasswordRequest,
    VerifyEmailRequest,
    VerifyResetCodeRequest,
)
from ...api.schemas.common import serialize_tokens, serialize_user

router = APIRouter(prefix="/auth/user", tags=["User Authentication"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    service: UserAuthService = Depends(get_user_auth_service),
) -> Dict[str, Any]:
    user, tokens = await service.register(
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
        phone_number=payload.phone_number,
    )
    return success_response(
        "User registered successfully. Please verify your email.",
        {"user": serialize_user(user), "tokens": serialize_tokens(tokens)},
    )


@router.post("/verify-email")
async def verify_email(
    payload: VerifyEmailRequest,
    service: UserAuthService = Depends(get_user_auth_service),
) -> Dict[str, Any]:
    user, tokens = await service.verify_email(payload.email, payload.code)
    return success_response(
        "Email verified successfully",
        {"user": serialize_user(user), "tokens": serialize_tokens(tokens)},
    )


@router.post("/resend-verification")
async def resend_verification(
    payload: EmailRequest,
    service: UserAuthService = Depends(get_user_auth_service),
) -> Dict[str, Any]:
    await service.resend_verification(payload.email)
    return success_response("Verification code sent to your email")


@router.post("/login")
async def login(
    payload: LoginRequest,
    service: UserAuthService = Depends(get_user_auth_service),
) -> Dict[str, Any]:
    result = await service.login(payload.email, payload.password)
    message = "Login successful" if result.email_verified else "Please verify your email first"
    return success_response(
        message,
        {
            "user": serialize_user(result.user),
            "emailVerified": result.email_verified,
            "tokens": serialize_tokens(result.tokens),
        },
    )


@router.post("/google")
async def google_login(
    payload: GoogleAuthRequest,
    service: UserAuthService = Depends(get_user_auth_service),
) -> Dict[str, Any]:
    user, tokens, is_new_user = await service.login_with_google(payload.id_token)
    return success_response(
        "Google login successful",
        {"user": serialize_user(user), "tokens": serialize_tokens(tokens), "isNewUser": is_new_user},
    )


@router.post("/forgot-password")
async def forgot_password(
    payload: EmailRequest,
    service: UserAuthService = Depends(get_user_auth_service),
) -> Dict[str, Any]:
    await service.forgot_password(payload.email)
    return success_response("Password reset code sent to your email")


@router.post("/verify-reset-code")
async def verify_reset_code(
    payload: VerifyResetCodeRequest,
    service: UserAuthService = Depends(get_user_auth_service),
) -> Dict[str, Any]:
    reset_token = await service.verify_reset_code(payload.email, payload.code)
    return success_response("Reset code verified successfully", {"resetToken": reset_token})


@router.post("/reset-password")
async def reset_password(
    payload: UserResetPasswordRequest,
    service: UserAuthService = Depends(get_user_auth_service),
) -> Dict[str, Any]:
    await service.reset_password(payload.reset_token, payload.new_password)
    return success_response("Password reset successful")


@router.post("/refresh")
async def refresh(
    payload: RefreshTokenRequest,
    service: UserAuthService = Depends(get_user_auth_service),
) -> Dict[str, Any]:
    tokens = await service.refresh(payload.refresh_token)
    return success_response("Token refreshed successfully", {"tokens": serialize_tokens(tokens)})


@router.post("/logout")
async def logout(
    payload: LogoutRequest,
    access_token: Optional[str] = Depends(optional_bearer_token),
    service: UserAuthService = Depends(get_user_auth_service),
) -> Dict[str, Any]:
    await service.logout(access_token, payload.refresh_token)
    return success_response("Logout successful")
