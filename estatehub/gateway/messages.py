"""
Messages gateway.

Conversations are not stored. A conversation is identified by
(property_id, other participant) from the actor's point of view and is built
from the messages the actor sent or received.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import and_, func, or_, select, update

from estatehub.errors import Forbidden, InvalidInput
from estatehub.gateway.base import ResourceGateway, require_object_id
from estatehub.gateway.identities import require_active_identity
from estatehub.gateway.units import require_active_property
from estatehub.models.messaging import Message
from estatehub.policy import Operation, ResourceType
from estatehub.schemas.messaging import ConversationOut, MessageCreate, MessageOut

logger = logging.getLogger(__name__)

CONVERSATION_HISTORY_LIMIT = 100


class MessageGateway(ResourceGateway[Message]):
    model = Message
    resource = ResourceType.MESSAGE
    label = "Message"

    def _involving_actor(self):
        return or_(Message.sender_id == self.actor.id, Message.receiver_id == self.actor.id)

    def conversations(self) -> list[ConversationOut]:
        stmt = self.scoped(select(Message).where(self._involving_actor()))
        messages = self.db.scalars(stmt.order_by(Message.sent_at.desc(), Message.id.desc())).all()

        grouped: dict[tuple[str, str], ConversationOut] = {}
        for message in messages:
            other = message.receiver_id if message.sender_id == self.actor.id else message.sender_id
            key = (message.property_id, other)
            unread = int(message.receiver_id == self.actor.id and not message.is_read)
            if key not in grouped:
                # Newest first, so the first message seen is the last one sent.
                grouped[key] = ConversationOut(
                    property_id=message.property_id,
                    other_user_id=other,
                    last_message=MessageOut.model_validate(message),
                    unread_count=unread,
                )
            else:
                grouped[key].unread_count += unread
        return list(grouped.values())

    def conversation(self, property_id: Any, other_user_id: Any) -> list[Message]:
        """Up to the latest 100 messages, oldest first. Marks the received ones read."""

        property_id = require_object_id(property_id, field="property_id")
        other_user_id = require_object_id(other_user_id, field="other_user_id")

        between = and_(
            Message.property_id == property_id,
            or_(
                and_(Message.sender_id == self.actor.id, Message.receiver_id == other_user_id),
                and_(Message.sender_id == other_user_id, Message.receiver_id == self.actor.id),
            ),
        )
        stmt = self.scoped(select(Message).where(between))
        latest = self.db.scalars(
            stmt.order_by(Message.sent_at.desc(), Message.id.desc()).limit(CONVERSATION_HISTORY_LIMIT)
        ).all()

        unread_ids = [m.id for m in latest if m.receiver_id == self.actor.id and not m.is_read]
        if unread_ids:
            self.db.execute(update(Message).where(Message.id.in_(unread_ids)).values(is_read=True))
            self.commit()

        return list(reversed(latest))

    def send(self, data: MessageCreate) -> Message:
        if data.receiver_id == self.actor.id:
            raise InvalidInput("Cannot send a message to yourself", field="receiver_id")
        require_active_identity(self.db, data.receiver_id, field="receiver_id")
        property_id = require_active_property(self.db, data.property_id)

        self.authorize_create({"sender_id": self.actor.id})

        message = Message(
            sender_id=self.actor.id,
            receiver_id=data.receiver_id,
            property_id=property_id,
            content=data.content,
            is_read=False,
            attachments=list(data.attachments),
        )
        self.db.add(message)
        self.commit()
        logger.info("Message sent id=%s by=%s", message.id, self.actor.id)
        return message

    def mark_read(self, message_id: Any) -> Message:
        message_id = self.authorize(Operation.UPDATE, message_id)
        message = self.fetch(message_id)
        # Read receipts belong to the receiver, whatever else the role may update.
        if message.receiver_id != self.actor.id:
            raise Forbidden("Only the receiver can mark a message as read")
        message.is_read = True
        self.commit()
        return message

    def mark_all_read(self) -> int:
        own_unread = self.scoped(
            select(Message.id).where(Message.receiver_id == self.actor.id, Message.is_read.is_(False)),
            Operation.UPDATE,
        )
        result = self.db.execute(
            update(Message)
            .where(Message.id.in_(own_unread))
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        self.commit()
        return result.rowcount

    def unread_count(self) -> int:
        stmt = self.scoped(
            select(Message.id).where(Message.receiver_id == self.actor.id, Message.is_read.is_(False))
        )
        return self.db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
