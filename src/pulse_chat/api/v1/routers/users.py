from __future__ import annotations

from fastapi import APIRouter, Query

from pulse_chat.api.deps import CurrentPrincipal, UoWDep
from pulse_chat.api.v1.schemas.user import UserResponse
from pulse_chat.services import user_service

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/search", response_model=list[UserResponse])
async def search_users(
    principal: CurrentPrincipal,
    uow: UoWDep,
    q: str = Query(..., min_length=1, max_length=100),
) -> list[UserResponse]:
    users = await user_service.search_users(q, principal, uow)
    return [UserResponse.model_validate(u) for u in users]
