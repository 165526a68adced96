from __future__ import annotations

from fastapi import APIRouter, Depends, status

from estatehub.gateway import MessageGateway
from estatehub.models.messaging import Message
from estatehub.routers.deps import gateway
from estatehub.schemas.common import UpdatedCount
from estatehub.schemas.messaging import ConversationOut, MessageCreate, MessageOut, UnreadCount

router = APIRouter(prefix="/messages", tags=["messages"])

get_messages = gateway(MessageGateway)


@router.get("/conversations", response_model=list[ConversationOut])
def list_conversations(messages: MessageGateway = Depends(get_messages)) -> list[ConversationOut]:
    return messages.conversations()


@router.get("/conversation/{property_id}/{other_user_id}", response_model=list[MessageOut])
def get_conversation(
    property_id: str, other_user_id: str, messages: MessageGateway = Depends(get_messages)
) -> list[Message]:
    return messages.conversation(property_id, other_user_id)


@router.get("/unread-count", response_model=UnreadCount)
def unread_count(messages: MessageGateway = Depends(get_messages)) -> UnreadCount:
    return UnreadCount(unread_count=messages.unread_count())


@router.post("", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
def send_message(payload: MessageCreate, messages: MessageGateway = Depends(get_messages)) -> Message:
    return messages.send(payload)


@router.put("/mark-all-read", response_model=UpdatedCount)
def mark_all_read(messages: MessageGateway = Depends(get_messages)) -> UpdatedCount:
    return UpdatedCount(updated_count=messages.mark_all_read())


@router.put("/{id}/mark-read", response_model=MessageOut)
def mark_read(id: str, messages: MessageGateway = Depends(get_messages)) -> Message:
    return messages.mark_read(id)
