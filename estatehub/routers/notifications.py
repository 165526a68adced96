from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from estatehub.gateway import NotificationGateway
from estatehub.models.messaging import Notification
from estatehub.routers.deps import gateway
from estatehub.schemas.common import Page, UpdatedCount
from estatehub.schemas.messaging import NotificationCreate, NotificationOut

router = APIRouter(prefix="/notifications", tags=["notifications"])

get_notifications = gateway(NotificationGateway)


@router.get("", response_model=Page[NotificationOut])
def list_notifications(
    unread_only: bool = False,
    page: int | None = None,
    page_size: int | None = None,
    notifications: NotificationGateway = Depends(get_notifications),
) -> dict:
    return notifications.list(unread_only=unread_only, page=page, page_size=page_size).to_dict()


@router.post("", response_model=NotificationOut, status_code=status.HTTP_201_CREATED)
def create_notification(
    payload: NotificationCreate, notifications: NotificationGateway = Depends(get_notifications)
) -> Notification:
    return notifications.create(payload)


@router.put("/mark-all-read", response_model=UpdatedCount)
def mark_all_read(notifications: NotificationGateway = Depends(get_notifications)) -> UpdatedCount:
    return UpdatedCount(updated_count=notifications.mark_all_read())


@router.put("/{id}/mark-read", response_model=NotificationOut)
def mark_read(id: str, notifications: NotificationGateway = Depends(get_notifications)) -> Notification:
    return notifications.mark_read(id)


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(id: str, notifications: NotificationGateway = Depends(get_notifications)) -> Response:
    notifications.delete(id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
