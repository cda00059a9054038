from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from pulse_chat.domain.entities.message import Message
from pulse_chat.domain.entities.participant import Participant


@dataclass(frozen=True, slots=True)
class Conversation:
    id: UUID
    name: str | None
    is_group: bool
    created_by: str | None
    created_at: datetime
    updated_at: datetime
    participants: tuple[Participant, ...] = field(default_factory=tuple)
    last_message: Message | None = None

    @property
    def participant_ids(self) -> list[str]:
        return [p.user_id for p in self.participants]
