"""Shared test fixtures."""
from __future__ import annotations

import dataclasses
import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable
from uuid import UUID

import pytest

from pulse_chat.application.dto.principal import Principal
from pulse_chat.domain.entities.conversation import Conversation
from pulse_chat.domain.entities.message import Message
from pulse_chat.domain.entities.participant import Participant
from pulse_chat.domain.entities.user import User
from pulse_chat.infrastructure.auth.ws_tokens import LiveTokenIssuer
from pulse_chat.infrastructure.ws.dispatcher import BroadcastDispatcher
from pulse_chat.infrastructure.ws.registry import ConnectionRegistry
from pulse_chat.infrastructure.ws.typing_relay import TypingRelay

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def alice() -> Principal:
    return Principal(user_id="alice", email="alice@example.com", first_name="Alice")


@pytest.fixture
def bob() -> Principal:
    return Principal(user_id="bob", email="bob@example.com", first_name="Bob")


def make_user(user_id: str, first_name: str | None = None) -> User:
    return User(
        id=user_id,
        email=f"{user_id}@example.com",
        first_name=first_name or user_id.capitalize(),
        last_name=None,
        profile_image_url=None,
        created_at=T0,
        updated_at=T0,
    )


def make_conversation(
    *,
    conversation_id: UUID | None = None,
    name: str | None = None,
    is_group: bool = False,
    created_by: str = "alice",
    updated_at: datetime = T0,
) -> Conversation:
    return Conversation(
        id=conversation_id or uuid.uuid4(),
        name=name,
        is_group=is_group,
        created_by=created_by,
        created_at=T0,
        updated_at=updated_at,
    )


def make_message(
    *,
    conversation_id: UUID | None = None,
    sender_id: str = "alice",
    content: str = "hi",
    created_at: datetime = T0,
    sender: User | None = None,
) -> Message:
    return Message(
        id=uuid.uuid4(),
        conversation_id=conversation_id or uuid.uuid4(),
        sender_id=sender_id,
        content=content,
        created_at=created_at,
        sender=sender or make_user(sender_id),
    )


# storage fakes


@dataclass
class FakeUserRepo:
    _users: dict[str, User] = field(default_factory=dict)

    async def get_by_id(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    async def upsert(self, user: User) -> User:
        existing = self._users.get(user.id)
        created_at = existing.created_at if existing else T0
        stored = dataclasses.replace(user, created_at=created_at, updated_at=T0)
        self._users[user.id] = stored
        return stored

    async def search(self, query: str, *, exclude_user_id: str, limit: int = 10) -> list[User]:
        q = query.lower()
        return [
            u for u in self._users.values()
            if u.id != exclude_user_id
            and any(q in (v or "").lower() for v in (u.first_name, u.last_name, u.email))
        ][:limit]


@dataclass
class FakeParticipantReader:
    _participants: list[Participant] = field(default_factory=list)
    fail_with: Exception | None = None

    async def is_participant(self, conversation_id: UUID, user_id: str) -> bool:
        return any(
            p.conversation_id == conversation_id and p.user_id == user_id
            for p in self._participants
        )

    async def list_user_ids(self, conversation_id: UUID) -> list[str]:
        if self.fail_with is not None:
            raise self.fail_with
        return [p.user_id for p in self._participants if p.conversation_id == conversation_id]


@dataclass
class FakeParticipantWriter:
    _reader: FakeParticipantReader

    async def add(self, participant: Participant) -> None:
        self._reader._participants.append(participant)


@dataclass
class FakeMessageReader:
    _messages: list[Message] = field(default_factory=list)

    async def list_messages(
        self, conversation_id: UUID, *, limit: int = 50, offset: int = 0,
    ) -> list[Message]:
        ordered = sorted(
            (m for m in self._messages if m.conversation_id == conversation_id),
            key=lambda m: m.created_at,
            reverse=True,
        )
        return ordered[offset:offset + limit][::-1]


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader
    _users: FakeUserRepo

    async def create(self, message: Message) -> Message:
        stored = dataclasses.replace(message, sender=self._users._users.get(message.sender_id))
        self._reader._messages.append(stored)
        return stored


@dataclass
class FakeConversationReader:
    _participants: FakeParticipantReader
    _messages: FakeMessageReader
    _users: FakeUserRepo
    _store: dict[UUID, Conversation] = field(default_factory=dict)

    def _hydrate(self, conv: Conversation) -> Conversation:
        participants = tuple(
            dataclasses.replace(p, user=self._users._users.get(p.user_id))
            for p in self._participants._participants
            if p.conversation_id == conv.id
        )
        history = [m for m in self._messages._messages if m.conversation_id == conv.id]
        last = max(history, key=lambda m: m.created_at) if history else None
        return dataclasses.replace(conv, participants=participants, last_message=last)

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        conv = self._store.get(conversation_id)
        return self._hydrate(conv) if conv else None

    async def find_direct(self, user_a: str, user_b: str) -> Conversation | None:
        for conv in self._store.values():
            members = {p.user_id for p in self._participants._participants if p.conversation_id == conv.id}
            if not conv.is_group and {user_a, user_b} <= members:
                return self._hydrate(conv)
        return None

    async def list_for_user(self, user_id: str) -> list[Conversation]:
        mine = [
            c for c in self._store.values()
            if any(p.conversation_id == c.id and p.user_id == user_id for p in self._participants._participants)
        ]
        mine.sort(key=lambda c: c.updated_at, reverse=True)
        return [self._hydrate(c) for c in mine]


@dataclass
class FakeConversationWriter:
    _reader: FakeConversationReader

    async def create(self, conversation: Conversation) -> Conversation:
        self._reader._store[conversation.id] = conversation
        return conversation

    async def touch_updated_at(self, conversation_id: UUID, ts: datetime) -> None:
        conv = self._reader._store[conversation_id]
        self._reader._store[conversation_id] = dataclasses.replace(conv, updated_at=ts)


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    users: FakeUserRepo = field(default_factory=FakeUserRepo)
    participants: FakeParticipantReader = field(default_factory=FakeParticipantReader)
    messages: FakeMessageReader = field(default_factory=FakeMessageReader)
    conversations: FakeConversationReader = field(init=False)
    conversations_w: FakeConversationWriter = field(init=False)
    participants_w: FakeParticipantWriter = field(init=False)
    messages_w: FakeMessageWriter = field(init=False)
    _committed: bool = False

    def __post_init__(self) -> None:
        self.conversations = FakeConversationReader(self.participants, self.messages, self.users)
        self.conversations_w = FakeConversationWriter(self.conversations)
        self.participants_w = FakeParticipantWriter(self.participants)
        self.messages_w = FakeMessageWriter(self.messages, self.users)

    def add_conversation(self, conv: Conversation, member_ids: list[str]) -> Conversation:
        self.conversations._store[conv.id] = conv
        for user_id in member_ids:
            self.users._users.setdefault(user_id, make_user(user_id))
            self.participants._participants.append(
                Participant(conversation_id=conv.id, user_id=user_id, joined_at=conv.created_at)
            )
        return conv

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self._committed = True

    async def rollback(self) -> None:
        pass


# live-channel fakes


class FakeSocket:
    """Stands in for a Starlette WebSocket."""

    def __init__(self, *, fail_on_send: bool = False) -> None:
        self.sent: list[str] = []
        self.closed_with: tuple[int, str | None] | None = None
        self.fail_on_send = fail_on_send

    async def send_text(self, data: str) -> None:
        if self.fail_on_send or self.closed_with is not None:
            raise RuntimeError("socket is closed")
        self.sent.append(data)

    async def close(self, code: int = 1000, reason: str | None = None) -> None:
        self.closed_with = (code, reason)


class FakeHandle:
    """Minimal registry entry."""

    def __init__(self, name: str, *, live: bool = True, fail_on_send: bool = False) -> None:
        self.name = name
        self.live = live
        self.fail_on_send = fail_on_send
        self.sent: list[str] = []
        self.closed_with: tuple[int, str] | None = None

    def __repr__(self) -> str:
        return f"<FakeHandle {self.name}>"

    @property
    def is_live(self) -> bool:
        return self.live and self.closed_with is None

    async def send_text(self, data: str) -> None:
        if self.fail_on_send:
            raise ConnectionResetError("peer went away")
        self.sent.append(data)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.closed_with = (code, reason)


@dataclass
class FakeParticipantDirectory:
    members: dict[UUID, list[str]] = field(default_factory=dict)
    fail_with: Exception | None = None
    lookups: int = 0

    async def list_participant_ids(self, conversation_id: UUID) -> list[str]:
        self.lookups += 1
        if self.fail_with is not None:
            raise self.fail_with
        return list(self.members.get(conversation_id, []))


class FakeTimer:
    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Records scheduled callbacks instead of running them; tests fire them."""

    def __init__(self) -> None:
        self.timers: list[FakeTimer] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled]

    def fire(self, timer: FakeTimer) -> None:
        assert not timer.cancelled
        timer.cancelled = True
        timer.callback()


class FakeClock:
    def __init__(self, now: datetime = T0) -> None:
        self._now = now

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def live_tokens(clock: FakeClock) -> LiveTokenIssuer:
    return LiveTokenIssuer("unit-test-live-secret-0123456789abcdef", ttl_seconds=60, clock=clock)


@pytest.fixture
def registry() -> ConnectionRegistry:
    return ConnectionRegistry()


@pytest.fixture
def dispatcher(registry: ConnectionRegistry) -> BroadcastDispatcher:
    return BroadcastDispatcher(registry)


@pytest.fixture
def directory() -> FakeParticipantDirectory:
    return FakeParticipantDirectory()


@pytest.fixture
def relay(dispatcher: BroadcastDispatcher, directory: FakeParticipantDirectory) -> TypingRelay:
    return TypingRelay(dispatcher, directory)


def frames(sent: list[str]) -> list[dict[str, Any]]:
    return [json.loads(raw) for raw in sent]
