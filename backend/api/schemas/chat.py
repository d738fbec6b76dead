from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ChatMessageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: Optional[str] = Field(default=None, alias="productId")
    user_id: Optional[str] = Field(default=None, alias="userId")
    id: Optional[str] = None  # client id for the user turn, reused on resend
    message: Optional[str] = None  # required; checked by the service so a missing message is a 400


class ChatMessageResponse(BaseModel):
    id: str
    role: str  # assistant
    content: str
    created_at: str


class ChatHistoryItem(BaseModel):
    id: str
    user_id: Optional[str] = None
    product_id: Optional[str] = None
    role: str  # user | assistant
    content: str
    created_at: str
