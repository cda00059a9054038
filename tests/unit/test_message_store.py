from __future__ import annotations

import uuid
from datetime import timedelta

from pulse_chat.client.store import MessageStore
from pulse_chat.infrastructure.ws.protocol import MessageRecord
from tests.conftest import T0, make_message

CID = uuid.uuid4()


def _record(content: str, seconds: int = 0) -> MessageRecord:
    return MessageRecord.from_message(
        make_message(conversation_id=CID, content=content, created_at=T0 + timedelta(seconds=seconds))
    )


def test_merge_is_idempotent_by_id():
    store = MessageStore()
    record = _record("m1")

    assert store.merge(CID, record) is True
    assert store.merge(CID, record.model_copy()) is False
    assert [m.content for m in store.messages(CID)] == ["m1"]
    assert record.id in store


def test_live_push_before_history_page():
    """A pushed message and the same message in a later REST page collapse."""
    store = MessageStore()
    m1, m2, m3 = _record("m1", 1), _record("m2", 2), _record("m3", 3)
    store.merge(CID, m3)

    added = store.merge_history(CID, [m1, m2, m3])

    assert added == 2
    assert [m.content for m in store.messages(CID)] == ["m1", "m2", "m3"]


def test_out_of_order_arrivals_are_sorted():
    store = MessageStore()
    for record in (_record("late", 5), _record("early", 1), _record("mid", 3)):
        store.merge(CID, record)

    assert [m.content for m in store.messages(CID)] == ["early", "mid", "late"]


def test_conversations_are_kept_apart():
    store = MessageStore()
    store.merge(CID, _record("here"))

    assert store.messages(uuid.uuid4()) == []
    assert uuid.uuid4() not in store
