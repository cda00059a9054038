from __future__ import annotations

from fastapi import APIRouter

from pulse_chat.api.deps import CurrentPrincipal, LiveTokensDep, UoWDep
from pulse_chat.api.v1.schemas.user import LiveTokenResponse, UserResponse
from pulse_chat.services import user_service

router = APIRouter(prefix="/api", tags=["auth"])


@router.get("/auth/user", response_model=UserResponse)
async def get_current_user(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> UserResponse:
    user = await user_service.sync_current_user(principal, uow)
    return UserResponse.model_validate(user)


@router.post("/ws/token", response_model=LiveTokenResponse)
async def issue_live_token(
    principal: CurrentPrincipal,
    live_tokens: LiveTokensDep,
) -> LiveTokenResponse:
    """Trade the bearer identity for a short-lived live-channel token."""
    return LiveTokenResponse(
        token=live_tokens.issue(principal.user_id),
        expires_in=live_tokens.ttl_seconds,
    )
