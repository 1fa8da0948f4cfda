from typing import Any, Dict

from fastapi import APIRouter, Depends, Query, status

from ....application.services.admin_service import AdminService
from ....core.constants import DEFAULT_LIMIT, DEFAULT_PAGE
from ....core.dependencies import get_admin_service
from ....core.responses import success_response
from ....domain.models import AdminRole, AuthenticatedIdentity
from ...api.dependencies import require_admin
from ...api.schemas.admin import (
    CreateAdminRequest,
    UpdateAdminRequest,
    UpdatePasswordRequest,
    UpdateProfileRequest,
)
from ...api.schemas.common import serialize_admin

router = APIRouter(prefix="/admins", tags=["Admins"])

_any_admin = require_admin(AdminRole.ADMIN, AdminRole.MODERATOR)
_full_admin = require_admin(AdminRole.ADMIN)


@router.get("")
async def list_admins(
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1),
    service: AdminService = Depends(get_admin_service),
    _: AuthenticatedIdentity = Depends(_any_admin),
) -> Dict[str, Any]:
    result = service.list_admins(page, limit)
    return success_response(
        "Admins retrieved successfully",
        {
            "admins": [serialize_admin(admin) for admin in result.items],
            "pagination": {
                "page": result.page,
                "limit": result.limit,
                "total": result.total,
                "totalPages": result.total_pages,
            },
        },
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_admin(
    payload: CreateAdminRequest,
    service: AdminService = Depends(get_admin_service),
    _: AuthenticatedIdentity = Depends(_full_admin),
) -> Dict[str, Any]:
    admin = await service.create_admin(
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
        role=payload.role,
    )
    return success_response("Admin created successfully", {"admin": serialize_admin(admin)})


@router.get("/me")
async def get_me(
    service: AdminService = Depends(get_admin_service),
    identity: AuthenticatedIdentity = Depends(_any_admin),
) -> Dict[str, Any]:
    admin = service.get_me(identity.id)
    return success_response("Profile retrieved successfully", {"admin": serialize_admin(admin)})


@router.put("/me/profile")
async def update_my_profile(
    payload: UpdateProfileRequest,
    service: AdminService = Depends(get_admin_service),
    identity: AuthenticatedIdentity = Depends(_any_admin),
) -> Dict[str, Any]:
    admin = service.update_profile(identity.id, first_name=payload.first_name, last_name=payload.last_name)
    return success_response("Profile updated successfully", {"admin": serialize_admin(admin)})


@router.put("/me/password")
async def update_my_password(
    payload: UpdatePasswordRequest,
    service: AdminService = Depends(get_admin_service),
    identity: AuthenticatedIdentity = Depends(_any_admin),
) -> Dict[str, Any]:
    await service.update_password(identity.id, payload.current_password, payload.new_password)
    return success_response("Password updated successfully")


@router.get("/{admin_id}")
async def get_admin(
    admin_id: str,
    service: AdminService = Depends(get_admin_service),
    _: AuthenticatedIdentity = Depends(_any_admin),
) -> Dict[str, Any]:
    admin = service.get_admin(admin_id)
    return success_response("Admin retrieved successfully", {"admin": serialize_admin(admin)})


@router.put("/{admin_id}")
async def update_admin(
    admin_id: str,
    payload: UpdateAdminRequest,
    service: AdminService = Depends(get_admin_service),
    _: AuthenticatedIdentity = Depends(_full_admin),
) -> Dict[str, Any]:
    admin = service.update_admin(
        admin_id,
        first_name=payload.first_name,
        last_name=payload.last_name,
        role=payload.role,
    )
    return success_response("Admin updated successfully", {"admin": serialize_admin(admin)})


@router.delete("/{admin_id}")
async def delete_admin(
    admin_id: str,
    service: AdminService = Depends(get_admin_service),
    identity: AuthenticatedIdentity = Depends(_full_admin),
) -> Dict[str, Any]:
    await service.delete_admin(admin_id, identity.id)
    return success_response("Admin deleted successfully")


@router.put("/{admin_id}/status")
async def toggle_admin_status(
    admin_id: str,
    action: str = Query(..., pattern="^(activate|deactivate)$"),
    service: AdminService = Depends(get_admin_service),
    identity: AuthenticatedIdentity = Depends(_full_admin),
) -> Dict[str, Any]:
    admin = await service.toggle_status(admin_id, action, identity.id)
    return success_response(f"Admin {action}d successfully", {"admin": serialize_admin(admin)})
