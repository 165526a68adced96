from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, CheckConstraint, DateTime, Enum, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from estatehub.db.base import Base, ObjectIdMixin
from estatehub.models.enums import MaintenancePriority, MaintenanceStatus
from estatehub.models.identity import utcnow


class MaintenanceRequest(ObjectIdMixin, Base):
    __tablename__ = "maintenance_requests"
    __table_args__ = (
        CheckConstraint("estimated_cost IS NULL OR estimated_cost >= 0", name="ck_maintenance_estimated_cost"),
        CheckConstraint("actual_cost IS NULL OR actual_cost >= 0", name="ck_maintenance_actual_cost"),
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # Creator; always the authenticated actor.
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    property_id: Mapped[str] = mapped_column(ForeignKey("properties.id"), nullable=False, index=True)
    unit_id: Mapped[str] = mapped_column(ForeignKey("units.id"), nullable=False, index=True)

    priority: Mapped[MaintenancePriority] = mapped_column(
        Enum(MaintenancePriority, native_enum=False, length=16), default=MaintenancePriority.MEDIUM, nullable=False
    )
    status: Mapped[MaintenanceStatus] = mapped_column(
        Enum(MaintenanceStatus, native_enum=False, length=16),
        default=MaintenanceStatus.PENDING,
        nullable=False,
        index=True,
    )
    assigned_to: Mapped[str | None] = mapped_column(ForeignKey("users.id"), nullable=True, index=True)

    estimated_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    actual_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    images: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    # Set exactly when status is Completed.
    paid_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
