from __future__ import annotations

from pulse_chat.domain.entities.conversation import Conversation
from pulse_chat.domain.entities.message import Message
from pulse_chat.infrastructure.db.mappers import participant as participant_mapper
from pulse_chat.infrastructure.db.models.conversation import ConversationModel


def model_to_entity(
    model: ConversationModel,
    *,
    with_participants: bool = True,
    last_message: Message | None = None,
) -> Conversation:
    participants: tuple = ()
    if with_participants:
        participants = tuple(
            participant_mapper.model_to_entity(p) for p in model.participants
        )
    return Conversation(
        id=model.id,
        name=model.name,
        is_group=model.is_group,
        created_by=model.created_by,
        created_at=model.created_at,
        updated_at=model.updated_at,
        participants=participants,
        last_message=last_message,
    )


def entity_to_model(entity: Conversation) -> ConversationModel:
    return ConversationModel(
        id=entity.id,
        name=entity.name,
        is_group=entity.is_group,
        created_by=entity.created_by,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
    )
