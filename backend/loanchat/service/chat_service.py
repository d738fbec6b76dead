# loanchat/service/chat_service.py

"""
Chat Service - product-scoped assistant

Features:
- Submit a turn: persist user turn -> build product context -> generate -> persist reply
- Read a conversation's history

The assistant only sees the product context and the current turn, never the
earlier transcript.
"""

import logging
from typing import List, Optional

from loanchat.database.chat_repository import ChatRepository
from loanchat.database.product_repository import ProductRepository
from loanchat.errors import GenerationError, StorageError, ValidationError
from loanchat.model.chat import ChatMessage, ChatRole
from loanchat.service.llm_service import GenerationClient
from loanchat.service.prompt_builder import build_product_context

logger = logging.getLogger(__name__)


class ChatService:
    """Loan product chat"""

    def __init__(
        self,
        chat_repo: ChatRepository,
        product_repo: ProductRepository,
        generator: GenerationClient,
    ):
        self.chat_repo = chat_repo
        self.product_repo = product_repo
        self.generator = generator

    def submit_turn(
        self,
        message: Optional[str],
        product_id: Optional[str] = None,
        user_id: Optional[str] = None,
        message_id: Optional[str] = None,
    ) -> ChatMessage:
        """
        Record the user's turn, generate a reply and record it.

        Args:
            message: user message, required
            product_id: scopes the conversation (and the context) to one product
            user_id: None for anonymous users
            message_id: client id for the user turn; resending the same id
                reuses the stored turn instead of adding another

        Returns:
            The assistant message

        Raises:
            ValidationError: empty message, or message_id belongs to another conversation
            StorageError: the user turn could not be stored, or product lookup failed
            GenerationError: generation failed; carries the primary attempt's error
        """
        if not message or not message.strip():
            raise ValidationError("Message is required")

        product_id = product_id or None
        user_id = user_id or None

        # 1. user turn; a turn we could not record is never sent to generation
        user_turn = ChatMessage(
            user_id=user_id,
            product_id=product_id,
            role=ChatRole.USER,
            content=message,
        )
        if message_id:
            user_turn.id = message_id
        stored = self.chat_repo.add_message(user_turn)
        if (
            stored.role != ChatRole.USER.value
            or stored.product_id != product_id
            or stored.user_id != user_id
        ):
            raise ValidationError("Message id already in use", details=message_id)

        # 2. context
        context = ""
        if product_id:
            product = self.product_repo.get_product_by_id(product_id)
            if product:
                context = build_product_context(product)
            else:
                logger.info(f"Product {product_id} not found, answering without context")

        # 3. generate
        try:
            reply = self.generator.generate(message, context)
        except Exception as e:
            raise GenerationError(str(e) or "Generation failed", details=type(e).__name__) from e

        # 4. assistant turn; the caller gets the reply even if it cannot be stored
        assistant = ChatMessage(
            user_id=user_id,
            product_id=product_id,
            role=ChatRole.ASSISTANT,
            content=reply,
        )
        try:
            assistant = self.chat_repo.add_message(assistant)
        except StorageError as e:
            logger.error(f"❌ Error saving AI response {assistant.id}: {e.details or e}")

        return assistant

    def get_history(
        self,
        product_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> List[ChatMessage]:
        """Conversation for (product_id, user_id), oldest first. One filter is required."""
        if not product_id and not user_id:
            raise ValidationError("productId or userId is required")
        return self.chat_repo.list_messages(product_id=product_id, user_id=user_id)
