from __future__ import annotations

from pulse_chat.domain.entities.participant import Participant
from pulse_chat.infrastructure.db.mappers import user as user_mapper
from pulse_chat.infrastructure.db.models.participant import ParticipantModel


def model_to_entity(model: ParticipantModel) -> Participant:
    return Participant(
        conversation_id=model.conversation_id,
        user_id=model.user_id,
        joined_at=model.joined_at,
        user=user_mapper.model_to_entity(model.user) if model.user else None,
    )


def entity_to_model(entity: Participant) -> ParticipantModel:
    return ParticipantModel(
        conversation_id=entity.conversation_id,
        user_id=entity.user_id,
        joined_at=entity.joined_at,
    )
