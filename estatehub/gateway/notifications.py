from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import delete, select, update

from estatehub.gateway.base import ResourceGateway
from estatehub.gateway.identities import require_active_identity
from estatehub.gateway.pagination import PageResult
from estatehub.models.messaging import Notification
from estatehub.policy import Operation, ResourceType
from estatehub.schemas.messaging import NotificationCreate

logger = logging.getLogger(__name__)


class NotificationGateway(ResourceGateway[Notification]):
    model = Notification
    resource = ResourceType.NOTIFICATION
    label = "Notification"

    def list(self, unread_only: bool = False, page: int | None = None, page_size: int | None = None) -> PageResult:
        # A personal inbox for every role, Admin included.
        stmt = select(Notification).where(Notification.user_id == self.actor.id)
        if unread_only:
            stmt = stmt.where(Notification.is_read.is_(False))
        return self.page(stmt.order_by(Notification.created_at.desc(), Notification.id), page, page_size)

    def create(self, data: NotificationCreate) -> Notification:
        recipient = require_active_identity(self.db, data.user_id, field="user_id")
        self.authorize_create({"user_id": recipient.id})

        notification = Notification(
            user_id=recipient.id,
            title=data.title.strip(),
            message=data.message.strip(),
            type=data.type,
            is_read=False,
            related_entity=data.related_entity,
            related_entity_id=data.related_entity_id,
        )
        self.db.add(notification)
        self.commit()
        logger.info("Notification created id=%s user=%s by=%s", notification.id, recipient.id, self.actor.id)
        return notification

    def mark_read(self, notification_id: Any) -> Notification:
        notification_id = self.authorize(Operation.UPDATE, notification_id)
        notification = self.fetch(notification_id)
        notification.is_read = True
        self.commit()
        return notification

    def mark_all_read(self) -> int:
        own_unread = self.scoped(
            select(Notification.id).where(Notification.user_id == self.actor.id, Notification.is_read.is_(False)),
            Operation.UPDATE,
        )
        result = self.db.execute(
            update(Notification)
            .where(Notification.id.in_(own_unread))
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        self.commit()
        return result.rowcount

    def delete(self, notification_id: Any) -> None:
        notification_id = self.authorize(Operation.DELETE, notification_id)
        self.db.execute(delete(Notification).where(Notification.id == notification_id))
        self.commit()
