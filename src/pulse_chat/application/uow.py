from __future__ import annotations

from typing import Protocol

from pulse_chat.application.repositories.conversation import (
    ConversationReader,
    ConversationWriter,
)
from pulse_chat.application.repositories.message import MessageReader, MessageWriter
from pulse_chat.application.repositories.participant import (
    ParticipantReader,
    ParticipantWriter,
)
from pulse_chat.application.repositories.user import UserRepository


class UnitOfWork(Protocol):
    users: UserRepository
    conversations: ConversationReader
    conversations_w: ConversationWriter
    participants: ParticipantReader
    participants_w: ParticipantWriter
    messages: MessageReader
    messages_w: MessageWriter

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...
