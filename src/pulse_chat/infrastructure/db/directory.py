from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pulse_chat.infrastructure.db.repositories.participant import ParticipantReaderRepo


class SqlParticipantDirectory:
    """Reads participant ids with a short-lived session per lookup."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list_participant_ids(self, conversation_id: UUID) -> list[str]:
        async with self._session_factory() as session:
            return await ParticipantReaderRepo(session).list_user_ids(conversation_id)
