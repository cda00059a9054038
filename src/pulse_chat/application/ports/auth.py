from __future__ import annotations

from typing import Protocol

from pulse_chat.application.dto.principal import Principal


class TokenVerifier(Protocol):
    async def verify(self, token: str) -> Principal: ...


class LiveTokenVerifier(Protocol):
    """Verifies the short-lived token presented on the live channel."""

    def verify(self, token: str) -> str:
        """Return the user id bound to the token or raise."""
        ...
