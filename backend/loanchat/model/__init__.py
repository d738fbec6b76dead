from .chat import ChatMessage, ChatRole, utcnow
from .product import Product

__all__ = [
    "ChatMessage",
    "ChatRole",
    "Product",
    "utcnow",
]
