from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from estatehub.models.enums import NotificationType
from estatehub.schemas.common import ObjectId

MAX_MESSAGE_LENGTH = 1000


class MessageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    sender_id: str
    receiver_id: str
    property_id: str
    content: str
    is_read: bool
    sent_at: datetime
    attachments: list[str]


class MessageCreate(BaseModel):
    # sender_id is always the authenticated actor.
    model_config = ConfigDict(extra="forbid")

    receiver_id: ObjectId
    property_id: ObjectId
    content: str = Field(min_length=1, max_length=MAX_MESSAGE_LENGTH)
    attachments: list[str] = Field(default_factory=list, max_length=10)


class ConversationOut(BaseModel):
    property_id: str
    other_user_id: str
    last_message: MessageOut
    unread_count: int


class UnreadCount(BaseModel):
    unread_count: int


class NotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    title: str
    message: str
    type: NotificationType
    is_read: bool
    created_at: datetime
    related_entity: str | None
    related_entity_id: str | None


class NotificationCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    user_id: ObjectId
    title: str = Field(min_length=2, max_length=200)
    message: str = Field(min_length=5, max_length=2000)
    type: NotificationType
    related_entity: str | None = Field(default=None, max_length=50)
    related_entity_id: ObjectId | None = None
