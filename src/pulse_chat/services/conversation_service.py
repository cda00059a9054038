from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pulse_chat.application.dto.conversation import CreateGroupDTO
from pulse_chat.application.dto.principal import Principal
from pulse_chat.application.exceptions import NotFoundError, ValidationError
from pulse_chat.application.policies.permissions import assert_conversation_access
from pulse_chat.application.uow import UnitOfWork
from pulse_chat.domain.entities.conversation import Conversation
from pulse_chat.domain.entities.participant import Participant


async def get_or_create_direct_conversation(
    principal: Principal,
    other_user_id: str,
    uow: UnitOfWork,
) -> tuple[Conversation, bool]:
    """Return the 1:1 conversation between the caller and another user.

    Returns (conversation, created) where created=True if a new conversation was made.
    """
    if other_user_id == principal.user_id:
        raise ValidationError("Cannot start a direct conversation with yourself")
    if await uow.users.get_by_id(other_user_id) is None:
        raise NotFoundError("User not found")

    existing = await uow.conversations.find_direct(principal.user_id, other_user_id)
    if existing is not None:
        return existing, False

    conversation = await _create(
        uow,
        name=None,
        is_group=False,
        creator_id=principal.user_id,
        member_ids=[principal.user_id, other_user_id],
    )
    await uow.commit()
    return await _reload(conversation, uow), True


async def create_group_conversation(
    principal: Principal,
    dto: CreateGroupDTO,
    uow: UnitOfWork,
) -> Conversation:
    name = dto.name.strip()
    if not name:
        raise ValidationError("Group name is required")

    member_ids = list(dict.fromkeys([principal.user_id, *dto.participant_ids]))
    for user_id in member_ids[1:]:
        if await uow.users.get_by_id(user_id) is None:
            raise NotFoundError(f"User {user_id} not found")

    conversation = await _create(
        uow,
        name=name,
        is_group=True,
        creator_id=principal.user_id,
        member_ids=member_ids,
    )
    await uow.commit()
    return await _reload(conversation, uow)


async def _create(
    uow: UnitOfWork,
    *,
    name: str | None,
    is_group: bool,
    creator_id: str,
    member_ids: list[str],
) -> Conversation:
    now = datetime.now(timezone.utc)
    conversation = await uow.conversations_w.create(
        Conversation(
            id=uuid.uuid4(),
            name=name,
            is_group=is_group,
            created_by=creator_id,
            created_at=now,
            updated_at=now,
        )
    )
    for user_id in member_ids:
        await uow.participants_w.add(
            Participant(conversation_id=conversation.id, user_id=user_id, joined_at=now)
        )
    return conversation


async def list_user_conversations(
    principal: Principal,
    uow: UnitOfWork,
) -> list[Conversation]:
    return await uow.conversations.list_for_user(principal.user_id)


async def get_conversation(
    conversation_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> Conversation:
    conversation = await uow.conversations.get_by_id(conversation_id)
    return await assert_conversation_access(principal, conversation, uow.participants)


async def _reload(conversation: Conversation, uow: UnitOfWork) -> Conversation:
    """Re-read a new conversation so its participants are populated."""
    return await uow.conversations.get_by_id(conversation.id) or conversation
