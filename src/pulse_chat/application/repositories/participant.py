from __future__ import annotations

from typing import Protocol
from uuid import UUID

from pulse_chat.domain.entities.participant import Participant


class ParticipantReader(Protocol):
    async def is_participant(self, conversation_id: UUID, user_id: str) -> bool: ...

    async def list_user_ids(self, conversation_id: UUID) -> list[str]: ...


class ParticipantWriter(Protocol):
    async def add(self, participant: Participant) -> None: ...
