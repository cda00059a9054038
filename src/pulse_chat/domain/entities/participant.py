from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from pulse_chat.domain.entities.user import User


@dataclass(frozen=True, slots=True)
class Participant:
    conversation_id: UUID
    user_id: str
    joined_at: datetime
    user: User | None = None
