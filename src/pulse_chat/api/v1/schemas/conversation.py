from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field

from pulse_chat.api.v1.schemas.message import MessageResponse
from pulse_chat.api.v1.schemas.user import ApiModel, UserResponse


class ParticipantResponse(ApiModel):
    user_id: str
    joined_at: datetime
    user: UserResponse | None = None


class ConversationResponse(ApiModel):
    id: UUID
    name: str | None
    is_group: bool
    created_by: str | None
    created_at: datetime
    updated_at: datetime
    participants: list[ParticipantResponse] = []
    last_message: MessageResponse | None = None


class CreateDirectRequest(ApiModel):
    user_id: str = Field(min_length=1)


class CreateGroupRequest(ApiModel):
    name: str = Field(min_length=1, max_length=200)
    participant_ids: list[str] = []
