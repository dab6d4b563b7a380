from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr

from models.staff import StaffMember


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class StaffProfile(BaseModel):
    staff_id: str
    name: str
    email: EmailStr
    role: str
    is_active: bool
    last_login: Optional[datetime] = None

    @classmethod
    def from_model(cls, staff: StaffMember) -> "StaffProfile":
        return cls(
            staff_id=str(staff.id),
            name=staff.name,
            email=staff.email,
            role=staff.role,
            is_active=staff.is_active,
            last_login=staff.last_login,
        )
