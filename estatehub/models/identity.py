from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from estatehub.db.base import Base, ObjectIdMixin
from estatehub.models.enums import Role


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(ObjectIdMixin, Base):
    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    # Stored case-folded; the unique constraint is what makes registration race-free.
    email: Mapped[str] = mapped_column(String(254), unique=True, nullable=False)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)

    role: Mapped[Role] = mapped_column(Enum(Role, native_enum=False, length=16), nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
