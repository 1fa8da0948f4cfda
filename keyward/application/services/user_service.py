"""Service for end users managing their own profile."""

import logging
from typing import Optional

from keyward.application.security.passwords import hash_password_async, verify_password_async
from keyward.core.errors import AuthErrorCode, bad_request, unauthorized
from keyward.domain.models import User
from keyward.domain.ports.persistence import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    """Profile reads and updates for the authenticated user."""

    def __init__(self, users: UserRepository) -> None:
        self._users = users

    def get_profile(self, user_id: str) -> User:
        user = self._users.get_by_id(user_id)
        if user is None or user.is_gone:
            raise unauthorized(AuthErrorCode.ACCOUNT_GONE, "This account does not exist.")
        return user

    def update_profile(
        self,
        user_id: str,
        *,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        phone_number: Optional[str] = None,
    ) -> User:
        self.get_profile(user_id)
        return self._users.update(
            user_id, first_name=first_name, last_name=last_name, phone_number=phone_number
        )

    async def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        user = self.get_profile(user_id)
        if not user.password_hash:
            raise bad_request("This account signs in without a password.")
        if not await verify_password_async(current_password, user.password_hash):
            logger.warning("User %s supplied an incorrect current password", user_id)
            raise bad_request("Current password is incorrect.", AuthErrorCode.INVALID_CREDENTIALS)
        self._users.update(user_id, password_hash=await hash_password_async(new_password))
        logger.info("User %s changed their password", user_id)
