from __future__ import annotations

from pydantic import Field

from pulse_chat.api.v1.schemas.user import ApiModel
from pulse_chat.infrastructure.ws.protocol import MessageRecord

# REST and the live channel share one message shape so clients can merge both.
MessageResponse = MessageRecord


class SendMessageRequest(ApiModel):
    content: str = Field(min_length=1, max_length=10_000)
