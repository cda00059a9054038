from __future__ import annotations

from typing import Protocol
from uuid import UUID

from pulse_chat.domain.entities.message import Message


class MessageReader(Protocol):
    async def list_messages(
        self,
        conversation_id: UUID,
        *,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Message]:
        """Newest `limit` messages after skipping `offset`, oldest first."""
        ...


class MessageWriter(Protocol):
    async def create(self, message: Message) -> Message:
        """Insert message. Returned record carries the sender profile."""
        ...
