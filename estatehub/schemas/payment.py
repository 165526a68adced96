from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from estatehub.models.enums import PaymentMethod, PaymentStatus, PaymentType
from estatehub.schemas.common import ObjectId, PositiveMoney


class PaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    property_id: str
    unit_id: str
    amount: float
    payment_type: PaymentType
    payment_method: PaymentMethod
    status: PaymentStatus
    due_date: date
    paid_date: datetime | None
    transaction_id: str | None
    description: str | None


class PaymentCreate(BaseModel):
    # user_id/status/paid_date are server-assigned.
    model_config = ConfigDict(extra="forbid")

    property_id: ObjectId
    unit_id: ObjectId
    amount: PositiveMoney
    payment_type: PaymentType
    payment_method: PaymentMethod
    due_date: date
    transaction_id: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=1000)


class PaymentStatusUpdate(BaseModel):
    status: PaymentStatus


class PaymentReport(BaseModel):
    property_id: str
    period: str
    total_collected: float
    pending_amount: float
    payments: list[PaymentOut]
