from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request

from ....application.services.admin_auth_service import AdminAuthService
from ....core.dependencies import get_admin_auth_service
from ....core.responses import success_response
from ...api.dependencies import client_ip, optional_bearer_token
from ...api.schemas.auth import (
    AdminResetPasswordRequest,
    AdminVerifyCodeRequest,
    EmailRequest,
    LoginRequest,
    LogoutRequest,
    RefreshTokenRequest,
)
from ...api.schemas.common import serialize_admin, serialize_tokens

router = APIRouter(prefix="/auth/admin", tags=["Admin Authentication"])


@router.post("/login")
async def admin_login(
    payload: LoginRequest,
    service: AdminAuthService = Depends(get_admin_auth_service),
) -> Dict[str, Any]:
    admin, tokens = await service.login(payload.email, payload.password)
    return success_response(
        "Login successful",
        {"admin": serialize_admin(admin), "tokens": serialize_tokens(tokens)},
    )


@router.post("/forgot-password")
async def admin_forgot_password(
    payload: EmailRequest,
    request: Request,
    service: AdminAuthService = Depends(get_admin_auth_service),
) -> Dict[str, Any]:
    await service.forgot_password(payload.email, client_ip(request))
    return success_response("Password reset code sent to email")


@router.post("/verify-code")
async def admin_verify_code(
    payload: AdminVerifyCodeRequest,
    service: AdminAuthService = Depends(get_admin_auth_service),
) -> Dict[str, Any]:
    verified = await service.verify_code(payload.email, payload.code)
    return success_response("Code verified successfully", {"verified": verified})


@router.post("/reset-password")
async def admin_reset_password(
    payload: AdminResetPasswordRequest,
    service: AdminAuthService = Depends(get_admin_auth_service),
) -> Dict[str, Any]:
    await service.reset_password(payload.email, payload.code, payload.new_password)
    return success_response("Password reset successfully")


@router.post("/refresh")
async def admin_refresh(
    payload: RefreshTokenRequest,
    service: AdminAuthService = Depends(get_admin_auth_service),
) -> Dict[str, Any]:
    tokens = await service.refresh(payload.refresh_token)
    return success_response("Token refreshed successfully", {"tokens": serialize_tokens(tokens)})


@router.post("/logout")
async def admin_logout(
    payload: LogoutRequest,
    access_token: Optional[str] = Depends(optional_bearer_token),
    service: AdminAuthService = Depends(get_admin_auth_service),
) -> Dict[str, Any]:
    await service.logout(access_token, payload.refresh_token)
    return success_response("Logout successful")
