# loanchat/model/chat.py

"""
Chat data model

One row per turn, scoped by (product_id, user_id) and ordered by created_at.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field
from datetime import datetime, timezone
import uuid


def utcnow() -> datetime:
    """Naive UTC timestamp, the form the message table stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_iso(value: datetime) -> str:
    """ISO 8601 with an explicit UTC offset; naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """A single chat turn"""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: Optional[str] = None  # None -> anonymous
    product_id: Optional[str] = None  # None -> general conversation
    role: ChatRole
    content: str
    created_at: datetime = Field(default_factory=utcnow)

    model_config = {
        "use_enum_values": True,
    }
