from .chat import (
    ChatMessageRequest,
    ChatMessageResponse,
    ChatHistoryItem,
)
from .product import (
    RecommendationRequest,
    ProductListResponse,
)

__all__ = [
    "ChatMessageRequest",
    "ChatMessageResponse",
    "ChatHistoryItem",
    "RecommendationRequest",
    "ProductListResponse",
]
