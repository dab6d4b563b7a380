from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from models.service import Service, ServiceCategory, ServiceDuration


class ServiceDurationIn(BaseModel):
    minutes: int = Field(gt=0, le=24 * 60)
    label: Optional[str] = Field(default=None, max_length=50)


class ServiceCreate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    description: str = Field(min_length=10, max_length=500)
    price: float = Field(ge=0)
    duration: ServiceDurationIn
    category: ServiceCategory
    icon: str = Field(min_length=1)
    popular: bool = False
    available: bool = True
    image: Optional[str] = None
    features: List[str] = Field(default_factory=list)
    requirements: List[str] = Field(default_factory=list)

    @field_validator("name", "description", "icon", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("price")
    @classmethod
    def _two_decimals(cls, value: float) -> float:
        return round(value, 2)

    @field_validator("features", "requirements")
    @classmethod
    def _drop_blank(cls, values: List[str]) -> List[str]:
        return [v.strip() for v in values if v and v.strip()]

    def to_service(self) -> Service:
        return Service(
            **self.model_dump(exclude={"duration"}),
            duration=ServiceDuration(**self.duration.model_dump()),
        )


class ServiceOut(BaseModel):
    id: str
    name: str
    description: str
    price: float
    formatted_price: str
    duration: ServiceDuration
    category: str
    icon: str
    popular: bool
    available: bool
    image: Optional[str] = None
    features: List[str]
    requirements: List[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, service: Service) -> "ServiceOut":
        data = service.model_dump(exclude={"id"})
        return cls(id=str(service.id), formatted_price=service.formatted_price, **data)


class ServiceMessage(BaseModel):
    message: str
    service: ServiceOut
