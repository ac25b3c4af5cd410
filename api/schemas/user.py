# api/schemas/user.py
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, ConfigDict

from core.sa.models import AppRole


class UserRegister(BaseModel):
    """Payload of the identity provider's user-created event."""
    id: str
    email: str
    full_name: Optional[str] = None


class ProfileSchema(BaseModel):
    id: str
    full_name: str
    email: str
    student_id: Optional[str] = None
    phone: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileWithRoles(ProfileSchema):
    role_names: List[str] = []


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    student_id: Optional[str] = None
    phone: Optional[str] = None


class RoleGrant(BaseModel):
    role: AppRole


class ErrorResponse(BaseModel):
    detail: str
    code: str
