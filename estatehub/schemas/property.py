from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from estatehub.schemas.common import Money, ObjectId


class PropertyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    address: str
    admin_id: str
    amenities: list[str]
    monthly_fee: float
    is_active: bool


class PropertyCreate(BaseModel):
    # admin_id is not accepted: the creator always owns what they create.
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=200)
    address: str = Field(min_length=1, max_length=500)
    monthly_fee: Money = Decimal("0")
    amenities: list[str] = Field(default_factory=list, max_length=50)


class PropertyUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=200)
    address: str | None = Field(default=None, min_length=1, max_length=500)
    monthly_fee: Money | None = None
    amenities: list[str] | None = Field(default=None, max_length=50)


class UnitOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    property_id: str
    unit_number: str
    tenant_id: str | None
    owner_id: str | None
    rent_amount: float
    maintenance_fee: float
    is_occupied: bool
    features: list[str]


class UnitCreate(BaseModel):
    # tenant_id/is_occupied only change through assign/remove.
    model_config = ConfigDict(extra="forbid")

    unit_number: str = Field(min_length=1, max_length=50)
    owner_id: ObjectId | None = None
    rent_amount: Money = Decimal("0")
    maintenance_fee: Money = Decimal("0")
    features: list[str] = Field(default_factory=list, max_length=50)


class UnitUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    unit_number: str | None = Field(default=None, min_length=1, max_length=50)
    owner_id: ObjectId | None = None
    rent_amount: Money | None = None
    maintenance_fee: Money | None = None
    features: list[str] | None = Field(default=None, max_length=50)


class AssignTenantRequest(BaseModel):
    tenant_id: ObjectId
