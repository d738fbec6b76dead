from fastapi import Depends, Request

from loanchat.database.chat_repository import ChatRepository
from loanchat.database.product_repository import ProductRepository
from loanchat.service.chat_service import ChatService


def get_chat_repo(request: Request) -> ChatRepository:
    """Return a ChatRepository over the app's session factory (stateless, safe per-request)."""
    return ChatRepository(request.app.state.session_factory)


def get_product_repo(request: Request) -> ProductRepository:
    return ProductRepository(request.app.state.session_factory)


def get_chat_service(
    request: Request,
    chat_repo: ChatRepository = Depends(get_chat_repo),
    product_repo: ProductRepository = Depends(get_product_repo),
) -> ChatService:
    return ChatService(
        chat_repo=chat_repo,
        product_repo=product_repo,
        generator=request.app.state.generation_client,
    )
