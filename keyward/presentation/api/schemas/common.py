"""Shared request-model base and response serializers."""

import re
from typing import Annotated, Any, Dict, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ....core.constants import ADMIN_OTP_LENGTH, OTP_LENGTH
from ....domain.models import Admin, TokenPair, User

USER_CODE_PATTERN = rf"^[0-9]{{{OTP_LENGTH}}}$"
# Development admin codes are the six-digit default.
ADMIN_CODE_PATTERN = rf"^([0-9]{{{ADMIN_OTP_LENGTH}}}|[0-9]{{{OTP_LENGTH}}})$"
PHONE_PATTERN = r"^[0-9]{10,}$"


class CamelModel(BaseModel):
    """Request body accepting camelCase keys (snake_case also works)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)


def validate_password_strength(value: str) -> str:
    if len(value) < 8:
        raise ValueError("Password must be at least 8 characters")
    if len(value.encode("utf-8")) > 72:
        raise ValueError("Password must be at most 72 bytes")
    if not re.search(r"[A-Z]", value):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", value):
        raise ValueError("Password must contain at least one lowercase letter")
    if not re.search(r"\d", value):
        raise ValueError("Password must contain at least one number")
    return value


StrongPassword = Annotated[str, AfterValidator(validate_password_strength)]


def serialize_user(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "phoneNumber": user.phone_number,
        "role": user.role.value,
        "status": user.status.value,
        "emailVerified": user.email_verified,
        "createdAt": user.created_at.isoformat(),
    }


def serialize_admin(admin: Admin) -> Dict[str, Any]:
    return {
        "id": admin.id,
        "email": admin.email,
        "firstName": admin.first_name,
        "lastName": admin.last_name,
        "role": admin.role.value,
        "status": admin.status.value,
        "isSuper": admin.is_super,
        "createdAt": admin.created_at.isoformat(),
        "updatedAt": admin.updated_at.isoformat(),
    }


def serialize_tokens(pair: Optional[TokenPair]) -> Optional[Dict[str, str]]:
    return pair.as_dict() if pair is not None else None
