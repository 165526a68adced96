from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from estatehub.db.base import Base, ObjectIdMixin
from estatehub.models.enums import NotificationType
from estatehub.models.identity import utcnow


class Message(ObjectIdMixin, Base):
    """
    A direct message about a property.

    Conversations are not stored; they are derived from
    (property_id, {sender_id, receiver_id}).
    """

    __tablename__ = "messages"

    sender_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    receiver_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    property_id: Mapped[str] = mapped_column(ForeignKey("properties.id"), nullable=False, index=True)

    content: Mapped[str] = mapped_column(String(1000), nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    sent_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    attachments: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)


class Notification(ObjectIdMixin, Base):
    __tablename__ = "notifications"

    # Recipient and sole owner.
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[NotificationType] = mapped_column(Enum(NotificationType, native_enum=False, length=16), nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    related_entity: Mapped[str | None] = mapped_column(String(50), nullable=True)
    related_entity_id: Mapped[str | None] = mapped_column(String(24), nullable=True)
