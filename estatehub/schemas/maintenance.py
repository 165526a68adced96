from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from estatehub.models.enums import MaintenancePriority, MaintenanceStatus
from estatehub.schemas.common import Money, ObjectId


class MaintenanceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    user_id: str
    property_id: str
    unit_id: str
    priority: MaintenancePriority
    status: MaintenanceStatus
    assigned_to: str | None
    estimated_cost: float | None
    actual_cost: float | None
    images: list[str]
    paid_date: datetime | None
    created_at: datetime
    updated_at: datetime


class MaintenanceCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=2000)
    property_id: ObjectId
    unit_id: ObjectId
    priority: MaintenancePriority = MaintenancePriority.MEDIUM
    estimated_cost: Money | None = None
    images: list[str] = Field(default_factory=list, max_length=20)


class MaintenanceStatusUpdate(BaseModel):
    status: MaintenanceStatus


class AssignStaffRequest(BaseModel):
    staff_id: ObjectId


class CostUpdate(BaseModel):
    actual_cost: Money
