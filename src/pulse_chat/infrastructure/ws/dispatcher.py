from __future__ import annotations

import logging
from collections.abc import Iterable

from pulse_chat.domain.entities.message import Message
from pulse_chat.infrastructure.ws.protocol import (
    MessageRecord,
    NewMessageEvent,
    OutboundEvent,
)
from pulse_chat.infrastructure.ws.registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class BroadcastDispatcher:
    """Best-effort fan-out of an event to the online members of a conversation.

    Offline participants are skipped; a failed write counts as offline. There
    is no acknowledgement, retry or queue: the REST history is the durable
    source of truth.
    """

    def __init__(self, registry: ConnectionRegistry) -> None:
        self._registry = registry

    async def broadcast(
        self,
        participant_ids: Iterable[str],
        event: OutboundEvent,
        exclude_user_id: str | None = None,
    ) -> int:
        raw = event.to_wire()
        delivered = 0
        for user_id in dict.fromkeys(participant_ids):
            if user_id == exclude_user_id:
                continue
            handle = self._registry.lookup(user_id)
            if handle is None or not handle.is_live:
                logger.debug("User %s not connected, skipping %s", user_id, event.type)
                continue
            try:
                await handle.send_text(raw)
            except Exception:
                logger.debug("Push of %s to %s failed", event.type, user_id, exc_info=True)
                self._registry.unregister(user_id, handle)
                continue
            delivered += 1
        return delivered

    async def message_created(
        self,
        message: Message,
        participant_ids: Iterable[str],
    ) -> int:
        """Push a persisted message to everyone in the conversation but its sender."""
        event = NewMessageEvent(
            conversation_id=message.conversation_id,
            message=MessageRecord.from_message(message),
        )
        delivered = await self.broadcast(
            participant_ids, event, exclude_user_id=message.sender_id,
        )
        logger.info(
            "Message %s pushed to %d recipient(s) in conversation %s",
            message.id, delivered, message.conversation_id,
        )
        return delivered
