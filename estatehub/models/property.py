from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime, ForeignKey, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from estatehub.db.base import Base, ObjectIdMixin
from estatehub.models.identity import utcnow


class Property(ObjectIdMixin, Base):
    __tablename__ = "properties"
    __table_args__ = (CheckConstraint("monthly_fee >= 0", name="ck_property_monthly_fee"),)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)

    # Primary ownership anchor for everything beneath the property.
    admin_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)

    amenities: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    monthly_fee: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    units: Mapped[list["Unit"]] = relationship(back_populates="property", order_by="Unit.created_at")


class Unit(ObjectIdMixin, Base):
    """
    A unit is addressed by its own id and references its property.

    Invariant: `is_occupied` is true exactly when `tenant_id` is set. Only the
    conditional updates in `estatehub.gateway.units` write these two columns.
    """

    __tablename__ = "units"
    __table_args__ = (
        CheckConstraint("rent_amount >= 0", name="ck_unit_rent_amount"),
        CheckConstraint("maintenance_fee >= 0", name="ck_unit_maintenance_fee"),
        CheckConstraint(
            "(is_occupied AND tenant_id IS NOT NULL) OR (NOT is_occupied AND tenant_id IS NULL)",
            name="ck_unit_occupancy",
        ),
        UniqueConstraint("property_id", "unit_number", name="uq_unit_number_per_property"),
    )

    property_id: Mapped[str] = mapped_column(ForeignKey("properties.id"), nullable=False, index=True)
    unit_number: Mapped[str] = mapped_column(String(50), nullable=False)

    tenant_id: Mapped[str | None] = mapped_column(ForeignKey("users.id"), nullable=True, index=True)
    owner_id: Mapped[str | None] = mapped_column(ForeignKey("users.id"), nullable=True, index=True)

    rent_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    maintenance_fee: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    is_occupied: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    features: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    property: Mapped[Property] = relationship(back_populates="units")
