from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .base import MongoModel


class ServiceCategory(str, Enum):
    HAIR = "Hair"
    SKINCARE = "Skincare"
    NAILS = "Nails"
    BROWS_LASHES = "Brows & Lashes"
    WELLNESS = "Wellness"
    MAKEUP = "Makeup"
    BRIDAL = "Bridal"


class ServiceDuration(BaseModel):
    model_config = ConfigDict(frozen=True)

    minutes: int = Field(gt=0, le=24 * 60)
    label: Optional[str] = None

    @model_validator(mode="after")
    def _default_label(self) -> "ServiceDuration":
        if not self.label:
            object.__setattr__(self, "label", f"{self.minutes} min")
        return self


class Service(MongoModel):
    model_config = ConfigDict(use_enum_values=True)

    name: str
    description: str
    price: float = Field(ge=0)
    duration: ServiceDuration
    category: ServiceCategory
    icon: str
    popular: bool = False
    available: bool = True
    image: Optional[str] = None
    features: List[str] = Field(default_factory=list)
    requirements: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def formatted_price(self) -> str:
        return f"${self.price:.2f}"
