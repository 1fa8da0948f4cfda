from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from redis.exceptions import RedisError

from keyward.application.security.passwords import hash_password_async, verify_password_async
from keyward.application.services.session_service import SessionService
from keyward.core.constants import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_PAGINATION_LIMIT
from keyward.core.errors import AuthErrorCode, bad_request, conflict, not_found, unauthorized
from keyward.domain.models import AccountStatus, Admin, AdminRole
from keyward.domain.ports.persistence import AdminRepository, DuplicateEmailError

logger = logging.getLogger(__name__)

STATUS_ACTIONS = {"activate": AccountStatus.ACTIVE, "deactivate": AccountStatus.DEACTIVATED}


@dataclass(frozen=True, slots=True)
class AdminPage:
    items: List[Admin]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


class AdminService:
    """Administrator account management performed by other administrators."""

    def __init__(self, admins: AdminRepository, sessions: SessionService) -> None:
        self._admins = admins
        self._sessions = sessions

    def list_admins(self, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT) -> AdminPage:
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGINATION_LIMIT)
        items, total = self._admins.list_active(offset=(page - 1) * limit, limit=limit)
        return AdminPage(items=items, page=page, limit=limit, total=total)

    def get_admin(self, admin_id: str) -> Admin:
        admin = self._admins.get_by_id(admin_id)
        if admin is None or admin.is_gone or admin.status == AccountStatus.DEACTIVATED:
            raise not_found("Admin not found.")
        return admin

    async def create_admin(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: AdminRole = AdminRole.ADMIN,
    ) -> Admin:
        # Soft-deleted rows keep their email reserved.
        if self._admins.get_by_email(email) is not None:
            logger.warning("Admin creation rejected, %s already in use", email)
            raise conflict("Email already in use.")
        password_hash = await hash_password_async(password)
        try:
            admin = self._admins.create(
                email=email,
                password_hash=password_hash,
                first_name=first_name,
                last_name=last_name,
                role=role,
            )
        except DuplicateEmailError:
            raise conflict("Email already in use.") from None
        logger.info("Admin %s created with role %s", admin.id, admin.role)
        return admin

    def update_admin(
        self,
        admin_id: str,
        *,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        role: Optional[AdminRole] = None,
    ) -> Admin:
        admin = self._admins.get_by_id(admin_id)
        if admin is None or admin.is_gone:
            raise not_found("Admin not found.")
        updated = self._admins.update(admin_id, first_name=first_name, last_name=last_name, role=role)
        logger.info("Admin %s updated", admin_id)
        return updated

    async def delete_admin(self, admin_id: str, current_admin_id: str) -> None:
        if admin_id == current_admin_id:
            logger.warning("Admin %s attempted to delete their own account", admin_id)
            raise bad_request("You cannot delete your own account.")
        admin = self._admins.get_by_id(admin_id)
        if admin is None:
            raise not_found("Admin not found.")
        if admin.is_super:
            logger.warning("Attempted deletion of super admin %s by %s", admin_id, current_admin_id)
            raise bad_request("Cannot delete super admin account. Please demote to regular admin first.")
        if admin.is_gone:
            raise bad_request("Admin is already deleted.")

        try:
            await self._sessions.revoke_identity(admin_id)
        except (RedisError, OSError):
            logger.exception("Token revocation failed while deleting admin %s", admin_id)

        self._admins.update(
            admin_id,
            is_deleted=True,
            status=AccountStatus.DELETED,
            deleted_at=datetime.now(tz=timezone.utc),
        )
        logger.info("Admin %s deleted by %s", admin_id, current_admin_id)

    async def toggle_status(self, admin_id: str, action: str, current_admin_id: str) -> Admin:
        target_status = STATUS_ACTIONS.get(action)
        if target_status is None:
            raise bad_request("Action must be either 'activate' or 'deactivate'.")
        if action == "deactivate" and admin_id == current_admin_id:
            raise bad_request("You cannot deactivate your own account.")

        admin = self._admins.get_by_id(admin_id)
        if admin is None or admin.is_gone:
            raise not_found("Admin not found.")
        if action == "deactivate" and admin.is_super:
            raise bad_request("Cannot deactivate super admin account. Please demote to regular admin first.")
        if admin.status == target_status:
            raise bad_request(f"Admin is already {target_status.value.lower()}.")

        try:
            if action == "deactivate":
                await self._sessions.revoke_identity(admin_id)
            else:
                await self._sessions.restore_identity(admin_id)
        except (RedisError, OSError):
            logger.exception("Revocation store update failed while trying to %s admin %s", action, admin_id)

        updated = self._admins.update(admin_id, status=target_status)
        logger.info("Admin %s %sd by %s", admin_id, action, current_admin_id)
        return updated

    # Own account ------------------------------------------------------
    def get_me(self, admin_id: str) -> Admin:
        admin = self._admins.get_by_id(admin_id)
        if admin is None or admin.is_gone:
            raise unauthorized(AuthErrorCode.ACCOUNT_GONE, "Admin not found.")
        return admin

    def update_profile(
        self,
        admin_id: str,
        *,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> Admin:
        self.get_me(admin_id)
        return self._admins.update(admin_id, first_name=first_name, last_name=last_name)

    async def update_password(self, admin_id: str, current_password: str, new_password: str) -> None:
        admin = self.get_me(admin_id)
        if not await verify_password_async(current_password, admin.password_hash):
            logger.warning("Admin %s supplied an incorrect current password", admin_id)
            raise bad_request("Current password is incorrect.", AuthErrorCode.INVALID_CREDENTIALS)
        password_hash = await hash_password_async(new_password)
        self._admins.update(admin_id, password_hash=password_hash)
        logger.info("Admin %s changed their password", admin_id)
