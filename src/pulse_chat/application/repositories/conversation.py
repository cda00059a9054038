from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from pulse_chat.domain.entities.conversation import Conversation


class ConversationReader(Protocol):
    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        """Conversation with its participants (and their profiles) loaded."""
        ...

    async def find_direct(self, user_a: str, user_b: str) -> Conversation | None:
        """Find the non-group conversation shared by exactly these two users."""
        ...

    async def list_for_user(self, user_id: str) -> list[Conversation]:
        """Conversations the user takes part in, most recently updated first."""
        ...


class ConversationWriter(Protocol):
    async def create(self, conversation: Conversation) -> Conversation: ...

    async def touch_updated_at(
        self, conversation_id: UUID, ts: datetime
    ) -> None: ...
