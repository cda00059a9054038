from __future__ import annotations

from typing import Protocol
from uuid import UUID


class ParticipantDirectory(Protocol):
    async def list_participant_ids(self, conversation_id: UUID) -> list[str]:
        """Current participant ids; empty when the conversation does not exist."""
        ...
