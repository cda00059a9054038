from __future__ import annotations

import uuid

import pytest

from pulse_chat.client.typing_notifier import TypingNotifier
from tests.conftest import FakeScheduler


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def sent():
    return []


@pytest.fixture
def notifier(scheduler, sent):
    return TypingNotifier(sent.append, idle_timeout=1.0, scheduler=scheduler)


def _states(sent):
    return [e.is_typing for e in sent]


def test_first_keystroke_starts_typing_once(notifier, scheduler, sent):
    cid = uuid.uuid4()

    notifier.keystroke(cid)
    notifier.keystroke(cid)
    notifier.keystroke(cid)

    assert _states(sent) == [True]
    assert sent[0].conversation_id == cid
    assert len(scheduler.pending) == 1
    assert scheduler.pending[0].delay == 1.0
    assert notifier.is_typing(cid)


def test_idle_timeout_stops_typing(notifier, scheduler, sent):
    cid = uuid.uuid4()
    notifier.keystroke(cid)

    scheduler.fire(scheduler.pending[0])

    assert _states(sent) == [True, False]
    assert not notifier.is_typing(cid)


def test_typing_again_after_idle_resends_start(notifier, scheduler, sent):
    cid = uuid.uuid4()
    notifier.keystroke(cid)
    scheduler.fire(scheduler.pending[0])

    notifier.keystroke(cid)

    assert _states(sent) == [True, False, True]


def test_stop_ends_typing_immediately(notifier, scheduler, sent):
    cid = uuid.uuid4()
    notifier.keystroke(cid)

    notifier.stop(cid)
    notifier.stop(cid)

    assert _states(sent) == [True, False]
    assert scheduler.pending == []


def test_conversations_debounce_independently(notifier, scheduler, sent):
    a, b = uuid.uuid4(), uuid.uuid4()
    notifier.keystroke(a)
    notifier.keystroke(b)

    scheduler.fire(scheduler.pending[0])

    assert [(e.conversation_id, e.is_typing) for e in sent] == [(a, True), (b, True), (a, False)]
    assert notifier.is_typing(b)


def test_cancel_all_drops_timers_silently(notifier, scheduler, sent):
    notifier.keystroke(uuid.uuid4())

    notifier.cancel_all()

    assert scheduler.pending == []
    assert _states(sent) == [True]
