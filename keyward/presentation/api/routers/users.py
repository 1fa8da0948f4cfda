"""API router for the authenticated user's own profile."""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ....application.services.user_service import UserService
from ....core.dependencies import get_user_service
from ....core.responses import success_response
from ....domain.models import AuthenticatedIdentity, UserRole
from ...api.dependencies import require_user
from ...api.schemas.admin import UpdatePasswordRequest
from ...api.schemas.common import serialize_user
from ...api.schemas.user import UpdateUserProfileRequest

router = APIRouter(prefix="/users", tags=["Users"])

_current_user = require_user(UserRole.USER)


@router.get("/me")
async def get_my_profile(
    service: UserService = Depends(get_user_service),
    identity: AuthenticatedIdentity = Depends(_current_user),
) -> Dict[str, Any]:
    user = service.get_profile(identity.id)
    return success_response("Profile retrieved successfully", {"user": serialize_user(user)})


@router.put("/me")
async def update_my_profile(
    payload: UpdateUserProfileRequest,
    service: UserService = Depends(get_user_service),
    identity: AuthenticatedIdentity = Depends(_current_user),
) -> Dict[str, Any]:
    user = service.update_profile(
        identity.id,
        first_name=payload.first_name,
        last_name=payload.last_name,
        phone_number=payload.phone_number,
    )
    return success_response("Profile updated successfully", {"user": serialize_user(user)})


@router.put("/me/password")
async def change_my_password(
    payload: UpdatePasswordRequest,
    service: UserService = Depends(get_user_service),
    identity: AuthenticatedIdentity = Depends(_current_user),
) -> Dict[str, Any]:
    """Change the caller's password; the current one must be supplied."""
    await service.change_password(identity.id, payload.current_password, payload.new_password)
    return success_response("Password updated successfully")
