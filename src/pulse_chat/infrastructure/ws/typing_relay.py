from __future__ import annotations

import logging
from uuid import UUID

from pulse_chat.application.ports.directory import ParticipantDirectory
from pulse_chat.infrastructure.ws.dispatcher import BroadcastDispatcher
from pulse_chat.infrastructure.ws.protocol import TypingNotice

logger = logging.getLogger(__name__)


class TypingRelay:
    """Stateless forwarding of typing state to the other participants.

    Nothing is remembered between calls; consumers time typing indicators out
    on their own.
    """

    def __init__(
        self,
        dispatcher: BroadcastDispatcher,
        directory: ParticipantDirectory,
    ) -> None:
        self._dispatcher = dispatcher
        self._directory = directory

    async def relay(
        self,
        sender_id: str,
        conversation_id: UUID,
        is_typing: bool,
    ) -> int:
        try:
            participant_ids = await self._directory.list_participant_ids(conversation_id)
        except Exception:  # noqa: BLE001
            logger.exception("Participant lookup failed for %s, typing event dropped", conversation_id)
            return 0

        if sender_id not in participant_ids:
            logger.warning("User %s is not in conversation %s, typing event dropped", sender_id, conversation_id)
            return 0

        notice = TypingNotice(
            conversation_id=conversation_id,
            user_id=sender_id,
            is_typing=is_typing,
        )
        return await self._dispatcher.broadcast(
            participant_ids, notice, exclude_user_id=sender_id,
        )
