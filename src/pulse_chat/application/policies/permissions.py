from __future__ import annotations

from pulse_chat.application.dto.principal import Principal
from pulse_chat.application.exceptions import ForbiddenError, NotFoundError
from pulse_chat.application.repositories.participant import ParticipantReader
from pulse_chat.domain.entities.conversation import Conversation


async def assert_conversation_access(
    principal: Principal,
    conversation: Conversation | None,
    participants: ParticipantReader,
) -> Conversation:
    """Raise if conversation doesn't exist or principal is not a member."""
    if conversation is None:
        raise NotFoundError("Conversation not found")

    is_member = await participants.is_participant(conversation.id, principal.user_id)
    if not is_member:
        raise ForbiddenError("Access denied")

    return conversation
