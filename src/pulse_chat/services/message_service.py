from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from pulse_chat.application.dto.message import SendMessageDTO
from pulse_chat.application.dto.principal import Principal
from pulse_chat.application.exceptions import ValidationError
from pulse_chat.application.policies.permissions import assert_conversation_access
from pulse_chat.application.uow import UnitOfWork
from pulse_chat.domain.entities.message import Message
from pulse_chat.infrastructure.ws.dispatcher import BroadcastDispatcher

logger = logging.getLogger(__name__)


async def send_message(
    dto: SendMessageDTO,
    principal: Principal,
    uow: UnitOfWork,
    dispatcher: BroadcastDispatcher,
) -> Message:
    """Persist a message, then push it to the other online participants.

    The push is best-effort: the persisted message is returned even when the
    participant lookup or every write fails.
    """
    content = dto.content.strip()
    if not content:
        raise ValidationError("Message content must not be empty")

    conversation = await uow.conversations.get_by_id(dto.conversation_id)
    await assert_conversation_access(principal, conversation, uow.participants)

    now = datetime.now(timezone.utc)
    msg = await uow.messages_w.create(
        Message(
            id=uuid.uuid4(),
            conversation_id=dto.conversation_id,
            sender_id=principal.user_id,
            content=content,
            created_at=now,
        )
    )
    await uow.conversations_w.touch_updated_at(dto.conversation_id, msg.created_at)
    await uow.commit()

    try:
        participant_ids = await uow.participants.list_user_ids(dto.conversation_id)
    except Exception:  # noqa: BLE001
        logger.exception("Participant lookup failed, message %s not pushed", msg.id)
        return msg

    await dispatcher.message_created(msg, participant_ids)
    return msg


async def list_messages(
    conversation_id: uuid.UUID,
    principal: Principal,
    limit: int,
    offset: int,
    uow: UnitOfWork,
) -> list[Message]:
    conversation = await uow.conversations.get_by_id(conversation_id)
    await assert_conversation_access(principal, conversation, uow.participants)
    return await uow.messages.list_messages(
        conversation_id, limit=limit, offset=offset,
    )
