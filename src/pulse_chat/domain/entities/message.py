from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from pulse_chat.domain.entities.user import User


@dataclass(frozen=True, slots=True)
class Message:
    id: UUID
    conversation_id: UUID
    sender_id: str
    content: str
    created_at: datetime
    sender: User | None = None
