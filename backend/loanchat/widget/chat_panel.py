# loanchat/widget/chat_panel.py

"""
Chat panel state, independent of the UI toolkit.

State machine:
    closed -> open(fetching) -> open(idle) -> open(sending) -> open(idle) -> ...

Optimistic updates: a sent message is shown immediately as `pending`. When the
server reply arrives it becomes `confirmed` and the assistant message is
appended after it; when the call fails it becomes `failed` and can be retried
or discarded.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from loanchat.widget.api_client import ChatApiClient, ChatClientError

logger = logging.getLogger(__name__)


class PanelState(str, Enum):
    CLOSED = "closed"
    FETCHING = "fetching"
    IDLE = "idle"
    SENDING = "sending"


class DeliveryStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass
class TranscriptEntry:
    id: str
    role: str
    content: str
    created_at: str
    status: DeliveryStatus = DeliveryStatus.CONFIRMED

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "TranscriptEntry":
        return cls(
            id=data["id"],
            role=data["role"],
            content=data["content"],
            created_at=data["created_at"],
        )


@dataclass
class ChatPanel:
    client: ChatApiClient
    product_id: Optional[str] = None
    user_id: Optional[str] = None

    state: PanelState = PanelState.CLOSED
    messages: List[TranscriptEntry] = field(default_factory=list)
    draft: str = ""
    last_error: Optional[str] = None
    # bumped on every transcript change; the UI scrolls to the bottom when it moves
    revision: int = 0

    # =====================================================
    # Open / close
    # =====================================================

    @property
    def is_open(self) -> bool:
        return self.state != PanelState.CLOSED

    @property
    def is_busy(self) -> bool:
        return self.state in (PanelState.FETCHING, PanelState.SENDING)

    def open(self) -> None:
        """Open the panel and load the conversation once."""
        if self.is_open:
            return
        self.state = PanelState.FETCHING
        try:
            history = self.client.fetch_history(self.product_id, self.user_id)
        except ChatClientError as e:
            logger.error(f"Failed to fetch messages: {e}")
            self.last_error = str(e)
        else:
            fetched = [TranscriptEntry.from_api(m) for m in history]
            # local messages the server never recorded stay visible
            known = {m.id for m in fetched}
            unsent = [
                m for m in self.messages
                if m.status == DeliveryStatus.FAILED and m.id not in known
            ]
            self.messages = fetched + unsent
            self.last_error = None
            self._touch()
        finally:
            self.state = PanelState.IDLE

    def close(self) -> None:
        if self.state == PanelState.SENDING:
            # in-flight sends are not cancellable
            return
        self.state = PanelState.CLOSED

    # =====================================================
    # Sending
    # =====================================================

    def can_send(self, text: Optional[str] = None) -> bool:
        text = self.draft if text is None else text
        return self.state == PanelState.IDLE and bool(text.strip())

    def send(self, text: Optional[str] = None) -> Optional[TranscriptEntry]:
        """
        Send a message (the draft by default).

        Returns the assistant entry, or None if nothing was sent or the call failed.
        """
        text = self.draft if text is None else text
        if not self.can_send(text):
            return None

        entry = TranscriptEntry(
            id=str(uuid.uuid4()),
            role="user",
            content=text.strip(),
            created_at=datetime.now(timezone.utc).isoformat(),
            status=DeliveryStatus.PENDING,
        )
        self.messages.append(entry)
        self.draft = ""
        self._touch()
        return self._deliver(entry)

    def retry(self, entry_id: str) -> Optional[TranscriptEntry]:
        """Send a failed message again, in place."""
        entry = self._find(entry_id)
        if entry is None or entry.status != DeliveryStatus.FAILED:
            return None
        if self.state != PanelState.IDLE:
            return None
        entry.status = DeliveryStatus.PENDING
        self._touch()
        return self._deliver(entry)

    def discard(self, entry_id: str) -> bool:
        """Drop a failed message from the transcript."""
        entry = self._find(entry_id)
        if entry is None or entry.status != DeliveryStatus.FAILED:
            return False
        self.messages.remove(entry)
        self._touch()
        return True

    def _deliver(self, entry: TranscriptEntry) -> Optional[TranscriptEntry]:
        self.state = PanelState.SENDING
        try:
            data = self.client.submit_turn(
                entry.content, self.product_id, self.user_id, message_id=entry.id
            )
        except ChatClientError as e:
            logger.error(f"Error sending message: {e}")
            entry.status = DeliveryStatus.FAILED
            self.last_error = str(e)
            self._touch()
            return None
        finally:
            self.state = PanelState.IDLE

        # keep the optimistic entry, confirm it, and add the reply after it
        entry.status = DeliveryStatus.CONFIRMED
        reply = TranscriptEntry.from_api(data)
        self.messages.append(reply)
        self.last_error = None
        self._touch()
        return reply

    def _find(self, entry_id: str) -> Optional[TranscriptEntry]:
        for m in self.messages:
            if m.id == entry_id:
                return m
        return None

    def _touch(self) -> None:
        self.revision += 1
