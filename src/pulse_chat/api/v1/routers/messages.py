from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query

from pulse_chat.api.deps import CurrentPrincipal, DispatcherDep, UoWDep
from pulse_chat.api.v1.schemas.message import MessageResponse, SendMessageRequest
from pulse_chat.application.dto.message import SendMessageDTO
from pulse_chat.services import message_service

router = APIRouter(prefix="/api/conversations", tags=["messages"])


@router.get("/{conversation_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
) -> list[MessageResponse]:
    messages = await message_service.list_messages(
        conversation_id, principal, limit, offset, uow,
    )
    return [MessageResponse.from_message(m) for m in messages]


@router.post("/{conversation_id}/messages", response_model=MessageResponse, status_code=201)
async def send_message(
    conversation_id: UUID,
    body: SendMessageRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    dispatcher: DispatcherDep,
) -> MessageResponse:
    msg = await message_service.send_message(
        SendMessageDTO(conversation_id=conversation_id, content=body.content),
        principal,
        uow,
        dispatcher,
    )
    return MessageResponse.from_message(msg)
