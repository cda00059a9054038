"""Live-channel wire events.

Every frame is a flat camelCase JSON object tagged by ``type``. Receivers
ignore types they do not know.
"""
from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from pulse_chat.domain.entities.message import Message
from pulse_chat.domain.entities.user import User


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True,
    )

    def to_wire(self) -> str:
        return self.model_dump_json(by_alias=True)


# Client -> Server


class AuthEvent(WireModel):
    type: Literal["auth"] = "auth"
    token: str
    user_id: str | None = None


class TypingEvent(WireModel):
    type: Literal["typing"] = "typing"
    conversation_id: UUID
    is_typing: bool


# Server -> Client


class SenderProfile(WireModel):
    id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None

    @classmethod
    def from_user(cls, user: User) -> SenderProfile:
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            profile_image_url=user.profile_image_url,
        )


class MessageRecord(WireModel):
    id: UUID
    conversation_id: UUID
    sender_id: str
    content: str
    created_at: datetime
    sender: SenderProfile | None = None

    @classmethod
    def from_message(cls, message: Message) -> MessageRecord:
        return cls(
            id=message.id,
            conversation_id=message.conversation_id,
            sender_id=message.sender_id,
            content=message.content,
            created_at=message.created_at,
            sender=SenderProfile.from_user(message.sender) if message.sender else None,
        )


class NewMessageEvent(WireModel):
    type: Literal["new_message"] = "new_message"
    conversation_id: UUID
    message: MessageRecord


class TypingNotice(WireModel):
    type: Literal["typing"] = "typing"
    conversation_id: UUID
    user_id: str
    is_typing: bool


class AuthOkEvent(WireModel):
    type: Literal["auth_ok"] = "auth_ok"
    user_id: str


class HeartbeatEvent(WireModel):
    type: Literal["heartbeat"] = "heartbeat"


OutboundEvent = NewMessageEvent | TypingNotice | AuthOkEvent | HeartbeatEvent

INBOUND_TYPES: dict[str, type[WireModel]] = {
    "auth": AuthEvent,
    "typing": TypingEvent,
}


class MalformedFrame(ValueError):
    """Frame is not a JSON object of a known event's shape."""


def parse_inbound(raw: str | bytes) -> AuthEvent | TypingEvent | None:
    """Parse a client frame.

    Returns None for well-formed frames of an unknown type; raises
    MalformedFrame for anything that cannot be read.
    """
    try:
        data: Any = json.loads(raw)
    except ValueError as exc:
        raise MalformedFrame(f"invalid json: {exc}") from exc
    if not isinstance(data, dict) or not isinstance(data.get("type"), str):
        raise MalformedFrame("frame must be an object with a string 'type'")

    model = INBOUND_TYPES.get(data["type"])
    if model is None:
        return None
    try:
        return model.model_validate(data)  # type: ignore[return-value]
    except ValidationError as exc:
        raise MalformedFrame(str(exc)) from exc
