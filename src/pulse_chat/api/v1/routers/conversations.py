from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter

from pulse_chat.api.deps import CurrentPrincipal, UoWDep
from pulse_chat.api.v1.schemas.conversation import (
    ConversationResponse,
    CreateDirectRequest,
    CreateGroupRequest,
)
from pulse_chat.application.dto.conversation import CreateGroupDTO
from pulse_chat.services import conversation_service

router = APIRouter(prefix="/api/conversations", tags=["conversations"])


@router.get("", response_model=list[ConversationResponse])
async def list_conversations(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[ConversationResponse]:
    convs = await conversation_service.list_user_conversations(principal, uow)
    return [ConversationResponse.model_validate(c) for c in convs]


@router.post("/direct", response_model=ConversationResponse)
async def create_direct_conversation(
    body: CreateDirectRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> ConversationResponse:
    conv, _created = await conversation_service.get_or_create_direct_conversation(
        principal, body.user_id, uow,
    )
    return ConversationResponse.model_validate(conv)


@router.post("/group", response_model=ConversationResponse, status_code=201)
async def create_group_conversation(
    body: CreateGroupRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> ConversationResponse:
    conv = await conversation_service.create_group_conversation(
        principal,
        CreateGroupDTO(name=body.name, participant_ids=body.participant_ids),
        uow,
    )
    return ConversationResponse.model_validate(conv)


@router.get("/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> ConversationResponse:
    conv = await conversation_service.get_conversation(conversation_id, principal, uow)
    return ConversationResponse.model_validate(conv)
