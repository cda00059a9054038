from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from pulse_chat.domain.entities.conversation import Conversation
from pulse_chat.infrastructure.db.mappers import conversation as mapper
from pulse_chat.infrastructure.db.mappers import message as message_mapper
from pulse_chat.infrastructure.db.models.conversation import ConversationModel
from pulse_chat.infrastructure.db.models.message import MessageModel
from pulse_chat.infrastructure.db.models.participant import ParticipantModel


class ConversationReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        result = await self._session.get(
            ConversationModel, conversation_id, populate_existing=True,
        )
        return mapper.model_to_entity(result) if result else None

    async def find_direct(self, user_a: str, user_b: str) -> Conversation | None:
        p1 = aliased(ParticipantModel)
        p2 = aliased(ParticipantModel)
        shared = (
            select(p1.conversation_id)
            .join(p2, p1.conversation_id == p2.conversation_id)
            .where(p1.user_id == user_a, p2.user_id == user_b)
        )
        stmt = (
            select(ConversationModel)
            .where(
                ConversationModel.is_group.is_(False),
                ConversationModel.id.in_(shared),
            )
            .order_by(ConversationModel.created_at)
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def list_for_user(self, user_id: str) -> list[Conversation]:
        stmt = (
            select(ConversationModel)
            .join(
                ParticipantModel,
                ParticipantModel.conversation_id == ConversationModel.id,
            )
            .where(ParticipantModel.user_id == user_id)
            .order_by(ConversationModel.updated_at.desc(), ConversationModel.id)
        )
        result = await self._session.execute(stmt)
        models = result.scalars().unique().all()
        if not models:
            return []

        last_stmt = (
            select(MessageModel)
            .where(MessageModel.conversation_id.in_([m.id for m in models]))
            .distinct(MessageModel.conversation_id)
            .order_by(MessageModel.conversation_id, MessageModel.created_at.desc())
        )
        last_result = await self._session.execute(last_stmt)
        last_by_conv = {
            m.conversation_id: message_mapper.model_to_entity(m)
            for m in last_result.scalars().all()
        }
        return [
            mapper.model_to_entity(m, last_message=last_by_conv.get(m.id))
            for m in models
        ]


class ConversationWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, conversation: Conversation) -> Conversation:
        model = mapper.entity_to_model(conversation)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model, with_participants=False)

    async def touch_updated_at(
        self,
        conversation_id: UUID,
        ts: datetime,
    ) -> None:
        stmt = (
            update(ConversationModel)
            .where(ConversationModel.id == conversation_id)
            .values(updated_at=ts)
        )
        await self._session.execute(stmt)
