"""FastAPI dependency injection helpers."""
from __future__ import annotations

from typing import Annotated, AsyncIterator

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from pulse_chat.application.dto.principal import Principal
from pulse_chat.application.ports.auth import TokenVerifier
from pulse_chat.config import settings
from pulse_chat.infrastructure.auth.hs256_verifier import HS256Verifier
from pulse_chat.infrastructure.auth.jwks_verifier import JWKSVerifier
from pulse_chat.infrastructure.auth.ws_tokens import LiveTokenIssuer
from pulse_chat.infrastructure.db.session import AsyncSessionLocal
from pulse_chat.infrastructure.db.uow import SqlAlchemyUoW
from pulse_chat.infrastructure.ws.dispatcher import BroadcastDispatcher

_bearer_scheme = HTTPBearer()


async def get_uow() -> AsyncIterator[SqlAlchemyUoW]:
    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        try:
            yield uow
        finally:
            await session.close()


UoWDep = Annotated[SqlAlchemyUoW, Depends(get_uow)]


def _get_verifier() -> TokenVerifier:
    if settings.JWT_VERIFY_MODE == "jwks":
        assert settings.JWKS_URL, "JWKS_URL must be set when JWT_VERIFY_MODE=jwks"
        return JWKSVerifier(settings.JWKS_URL)
    return HS256Verifier(settings.JWT_SECRET, settings.JWT_ALGORITHM)


_verifier: TokenVerifier | None = None


def get_verifier() -> TokenVerifier:
    global _verifier  # noqa: PLW0603
    if _verifier is None:
        _verifier = _get_verifier()
    return _verifier


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(_bearer_scheme)],
) -> Principal:
    verifier = get_verifier()
    try:
        return await verifier.verify(credentials.credentials)
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


def get_dispatcher(request: Request) -> BroadcastDispatcher:
    return request.app.state.dispatcher


DispatcherDep = Annotated[BroadcastDispatcher, Depends(get_dispatcher)]


def get_live_tokens(request: Request) -> LiveTokenIssuer:
    return request.app.state.live_tokens


LiveTokensDep = Annotated[LiveTokenIssuer, Depends(get_live_tokens)]
