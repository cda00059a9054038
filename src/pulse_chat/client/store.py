from __future__ import annotations

import bisect
from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from pulse_chat.infrastructure.ws.protocol import MessageRecord


def _order_key(record: MessageRecord) -> tuple[datetime, str]:
    return record.created_at, str(record.id)


class MessageStore:
    """Client-side message cache, one chronological list per conversation.

    Messages can arrive twice, once pushed live and once in a REST page
    fetched concurrently; every merge is keyed by message id so the second
    copy is a no-op.
    """

    def __init__(self) -> None:
        self._messages: dict[UUID, list[MessageRecord]] = {}
        self._ids: dict[UUID, set[UUID]] = {}

    def merge(self, conversation_id: UUID, record: MessageRecord) -> bool:
        """Insert ``record`` unless its id is already cached. Returns True if added."""
        ids = self._ids.setdefault(conversation_id, set())
        if record.id in ids:
            return False
        ids.add(record.id)
        bisect.insort(
            self._messages.setdefault(conversation_id, []), record, key=_order_key,
        )
        return True

    def merge_history(
        self,
        conversation_id: UUID,
        records: Iterable[MessageRecord],
    ) -> int:
        return sum(self.merge(conversation_id, r) for r in records)

    def messages(self, conversation_id: UUID) -> list[MessageRecord]:
        return list(self._messages.get(conversation_id, ()))

    def __contains__(self, message_id: object) -> bool:
        return any(message_id in ids for ids in self._ids.values())
