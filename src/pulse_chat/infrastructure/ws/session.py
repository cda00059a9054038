"""Per-socket state machine: connecting -> authenticated -> closed."""
from __future__ import annotations

import logging
from typing import Protocol

from pulse_chat.application.exceptions import AuthenticationError
from pulse_chat.application.ports.auth import LiveTokenVerifier
from pulse_chat.domain.value_objects.enums import SessionState
from pulse_chat.infrastructure.ws.protocol import (
    AuthEvent,
    AuthOkEvent,
    MalformedFrame,
    TypingEvent,
    parse_inbound,
)
from pulse_chat.infrastructure.ws.registry import ConnectionRegistry
from pulse_chat.infrastructure.ws.typing_relay import TypingRelay

logger = logging.getLogger(__name__)

AUTH_FAILED_CLOSE_CODE = 4001


class Socket(Protocol):
    async def send_text(self, data: str) -> None: ...

    async def close(self, code: int = 1000, reason: str | None = None) -> None: ...


class TransportSession:
    """One physical connection, owned by the task reading its socket."""

    def __init__(
        self,
        socket: Socket,
        registry: ConnectionRegistry,
        relay: TypingRelay,
        verifier: LiveTokenVerifier,
    ) -> None:
        self._socket = socket
        self._registry = registry
        self._relay = relay
        self._verifier = verifier
        self.state = SessionState.CONNECTING
        self.user_id: str | None = None

    def __repr__(self) -> str:
        return f"<TransportSession user={self.user_id} state={self.state}>"

    @property
    def is_live(self) -> bool:
        return self.state is SessionState.AUTHENTICATED

    async def handle_frame(self, raw: str | bytes) -> None:
        if self.state is SessionState.CLOSED:
            return
        try:
            event = parse_inbound(raw)
        except MalformedFrame as exc:
            logger.warning("Dropping malformed frame from %s: %s", self.user_id or "anonymous", exc)
            return
        if event is None:
            logger.debug("Ignoring frame of unknown type from %s", self.user_id or "anonymous")
            return

        if isinstance(event, AuthEvent):
            await self._authenticate(event)
        elif self.state is not SessionState.AUTHENTICATED or self.user_id is None:
            logger.debug("Ignoring %s before auth", event.type)
        elif isinstance(event, TypingEvent):
            await self._relay.relay(self.user_id, event.conversation_id, event.is_typing)

    async def _authenticate(self, event: AuthEvent) -> None:
        try:
            user_id = self._verifier.verify(event.token)
        except AuthenticationError as exc:
            logger.warning("Live-channel auth rejected: %s", exc.detail)
            await self.close(AUTH_FAILED_CLOSE_CODE, "Authentication failed")
            return
        if event.user_id is not None and event.user_id != user_id:
            logger.warning("Live-channel auth claimed %s with a token for %s", event.user_id, user_id)
            await self.close(AUTH_FAILED_CLOSE_CODE, "Authentication failed")
            return

        if self.user_id is not None and self.user_id != user_id:
            self._registry.unregister(self.user_id, self)
        self.user_id = user_id
        self.state = SessionState.AUTHENTICATED
        await self._registry.register(user_id, self)

        try:
            await self.send_text(AuthOkEvent(user_id=user_id).to_wire())
        except Exception:
            logger.debug("Could not acknowledge auth for %s", user_id, exc_info=True)
            self.mark_closed()

    async def send_text(self, data: str) -> None:
        await self._socket.send_text(data)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        was_closed = self.state is SessionState.CLOSED
        self.mark_closed()
        if was_closed:
            return
        try:
            await self._socket.close(code=code, reason=reason)
        except Exception:
            logger.debug("Socket for %s already gone", self.user_id, exc_info=True)

    def mark_closed(self) -> None:
        """Enter the terminal state and release the identity if still current."""
        if self.state is SessionState.CLOSED:
            return
        self.state = SessionState.CLOSED
        if self.user_id is not None:
            self._registry.unregister(self.user_id, self)
