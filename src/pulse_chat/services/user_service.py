from __future__ import annotations

from pulse_chat.application.dto.principal import Principal
from pulse_chat.application.exceptions import ValidationError
from pulse_chat.application.uow import UnitOfWork
from pulse_chat.domain.entities.user import User

SEARCH_LIMIT = 10


async def sync_current_user(principal: Principal, uow: UnitOfWork) -> User:
    """Upsert the caller's profile from the identity-token claims."""
    user = await uow.users.upsert(
        User(
            id=principal.user_id,
            email=principal.email,
            first_name=principal.first_name,
            last_name=principal.last_name,
            profile_image_url=principal.profile_image_url,
        )
    )
    await uow.commit()
    return user


async def search_users(
    query: str,
    principal: Principal,
    uow: UnitOfWork,
) -> list[User]:
    query = query.strip()
    if not query:
        raise ValidationError("Query parameter 'q' is required")
    return await uow.users.search(
        query, exclude_user_id=principal.user_id, limit=SEARCH_LIMIT,
    )
