from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from api.deps import get_chat_service
from api.schemas.chat import (
    ChatMessageRequest,
    ChatMessageResponse,
    ChatHistoryItem,
)
from loanchat.model.chat import to_utc_iso
from loanchat.service.chat_service import ChatService

router = APIRouter(prefix="/api/chat", tags=["chat"])


@router.post("", response_model=ChatMessageResponse)
def send_message(
    body: ChatMessageRequest,
    chat_service: ChatService = Depends(get_chat_service),
):
    """Send a message and get the assistant's reply"""
    reply = chat_service.submit_turn(
        message=body.message,
        product_id=body.product_id,
        user_id=body.user_id,
        message_id=body.id,
    )
    return ChatMessageResponse(
        id=reply.id,
        role=reply.role,
        content=reply.content,
        created_at=to_utc_iso(reply.created_at),
    )


@router.get("", response_model=List[ChatHistoryItem])
def get_chat_history(
    product_id: Optional[str] = Query(default=None, alias="productId"),
    user_id: Optional[str] = Query(default=None, alias="userId"),
    chat_service: ChatService = Depends(get_chat_service),
):
    """All messages of a conversation, oldest first"""
    messages = chat_service.get_history(product_id=product_id, user_id=user_id)
    return [
        ChatHistoryItem(
            id=msg.id,
            user_id=msg.user_id,
            product_id=msg.product_id,
            role=msg.role,
            content=msg.content,
            created_at=to_utc_iso(msg.created_at),
        )
        for msg in messages
    ]
