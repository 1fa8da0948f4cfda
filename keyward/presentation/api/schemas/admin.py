from typing import Optional

from pydantic import EmailStr, Field

from ....domain.models import AdminRole
from .common import CamelModel, StrongPassword


class CreateAdminRequest(CamelModel):
    email: EmailStr
    password: StrongPassword
    first_name: str = Field(min_length=2, max_length=100)
    last_name: str = Field(min_length=2, max_length=100)
    role: AdminRole = AdminRole.ADMIN


class UpdateAdminRequest(CamelModel):
    first_name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    role: Optional[AdminRole] = None


class UpdateProfileRequest(CamelModel):
    first_name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=2, max_length=100)


class UpdatePasswordRequest(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: StrongPassword
