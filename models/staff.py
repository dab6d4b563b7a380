from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from .base import MongoModel


class StaffRole(str, Enum):
    admin = "admin"
    stylist = "stylist"


class StaffMember(MongoModel):
    name: str
    email: str
    role: str
    hashed_password: str
    is_active: bool = True
    last_login: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == StaffRole.admin.value
