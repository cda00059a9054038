"""Client side of the live channel.

Keeps one logical connection alive across transient network failures:
re-authenticates on every reconnect, backs off exponentially between
attempts and gives up after a fixed ceiling, or at once when the server
replaces the connection or rejects its credentials.
"""
from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any, AsyncContextManager, Protocol

import websockets
from pydantic import ValidationError
from websockets.exceptions import ConnectionClosed

from pulse_chat.client.store import MessageStore
from pulse_chat.client.timers import Scheduler, Timer, loop_scheduler
from pulse_chat.domain.value_objects.enums import ConnectionState
from pulse_chat.infrastructure.ws.protocol import (
    AuthEvent,
    NewMessageEvent,
    TypingNotice,
    WireModel,
)
from pulse_chat.infrastructure.ws.registry import REPLACED_CLOSE_CODE
from pulse_chat.infrastructure.ws.session import AUTH_FAILED_CLOSE_CODE

logger = logging.getLogger(__name__)

BASE_DELAY_SECONDS = 1.0
MAX_RECONNECT_ATTEMPTS = 5

# Server closes that another attempt cannot fix.
TERMINAL_CLOSE_CODES = frozenset({REPLACED_CLOSE_CODE, AUTH_FAILED_CLOSE_CODE})


class Transport(Protocol):
    async def send(self, message: str) -> None: ...

    def __aiter__(self) -> Any: ...


Connector = Callable[[str], AsyncContextManager[Transport]]
TokenProvider = Callable[[], Awaitable[str]]


def _default_connector(url: str) -> AsyncContextManager[Transport]:
    return websockets.connect(url)


class ReconnectionManager:
    def __init__(
        self,
        url: str,
        user_id: str,
        token_provider: TokenProvider,
        *,
        store: MessageStore | None = None,
        base_delay: float = BASE_DELAY_SECONDS,
        max_attempts: int = MAX_RECONNECT_ATTEMPTS,
        connector: Connector = _default_connector,
        scheduler: Scheduler = loop_scheduler,
    ) -> None:
        self._url = url
        self._user_id = user_id
        self._token_provider = token_provider
        self.store = store or MessageStore()
        self._base_delay = base_delay
        self._max_attempts = max_attempts
        self._connector = connector
        self._schedule = scheduler

        self.state = ConnectionState.DISCONNECTED
        self.attempts = 0
        self._timer: Timer | None = None
        self._task: asyncio.Task[None] | None = None
        self._outbox: asyncio.Queue[str] | None = None
        self._stopped = True
        self._gave_up = False

        self._message_listeners: list[Callable[[NewMessageEvent], None]] = []
        self._typing_listeners: list[Callable[[TypingNotice], None]] = []
        self._state_listeners: list[Callable[[ConnectionState], None]] = []
        self._give_up_listeners: list[Callable[[int | None], None]] = []

    @property
    def exhausted(self) -> bool:
        """True once automatic reconnection has given up."""
        return self._gave_up and not self._stopped

    def on_message(self, listener: Callable[[NewMessageEvent], None]) -> None:
        """Called for each pushed message that was not already cached."""
        self._message_listeners.append(listener)

    def on_typing(self, listener: Callable[[TypingNotice], None]) -> None:
        self._typing_listeners.append(listener)

    def on_state_change(self, listener: Callable[[ConnectionState], None]) -> None:
        self._state_listeners.append(listener)

    def on_give_up(self, listener: Callable[[int | None], None]) -> None:
        """Called once reconnection stops for good.

        The argument is the server close code that ended it, or None when the
        attempt ceiling was reached.
        """
        self._give_up_listeners.append(listener)

    # lifecycle

    def start(self) -> None:
        if not self._stopped and not self._gave_up:
            return
        self._stopped = False
        self._gave_up = False
        self.attempts = 0
        self._open()

    async def stop(self) -> None:
        self._stopped = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._set_state(ConnectionState.DISCONNECTED)

    async def join(self) -> None:
        """Wait for the current connection attempt to end."""
        if self._task is not None:
            await self._task

    def send(self, event: WireModel) -> bool:
        if self.state is not ConnectionState.CONNECTED or self._outbox is None:
            logger.warning("Live connection is not open, dropping %s", getattr(event, "type", event))
            return False
        self._outbox.put_nowait(event.to_wire())
        return True

    # connection

    def _open(self) -> None:
        self._timer = None
        self._set_state(ConnectionState.CONNECTING)
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name=f"live-connection-{self._user_id}",
        )

    async def _run(self) -> None:
        close_code: int | None = None
        try:
            token = await self._token_provider()
            async with self._connector(self._url) as transport:
                await self._serve(transport, token)
        except asyncio.CancelledError:
            raise
        except ConnectionClosed as exc:
            close_code = exc.rcvd.code if exc.rcvd is not None else None
            logger.warning("Live connection to %s closed by server (code %s)", self._url, close_code)
        except Exception as exc:
            logger.warning("Live connection to %s failed: %s", self._url, exc)
        finally:
            self._closed(close_code)

    async def _serve(self, transport: Transport, token: str) -> None:
        await transport.send(AuthEvent(token=token, user_id=self._user_id).to_wire())
        outbox: asyncio.Queue[str] = asyncio.Queue()
        writer = asyncio.create_task(self._drain(transport, outbox))
        self._outbox = outbox
        try:
            async for raw in transport:
                self._dispatch(raw)
        finally:
            self._outbox = None
            writer.cancel()

    async def _drain(self, transport: Transport, outbox: asyncio.Queue[str]) -> None:
        while True:
            raw = await outbox.get()
            try:
                await transport.send(raw)
            except Exception:
                logger.debug("Write to live connection failed", exc_info=True)
                return

    def _closed(self, close_code: int | None = None) -> None:
        self._set_state(ConnectionState.DISCONNECTED)
        if self._stopped:
            return
        if close_code in TERMINAL_CLOSE_CODES:
            logger.warning("Live connection closed with %d, not reconnecting", close_code)
            self._give_up(close_code)
            return
        if self.attempts >= self._max_attempts:
            logger.warning(
                "Live connection lost, giving up after %d reconnect attempts", self.attempts,
            )
            self._give_up(None)
            return
        delay = self._base_delay * 2 ** self.attempts
        logger.info(
            "Reconnecting in %.1fs (attempt %d/%d)", delay, self.attempts + 1, self._max_attempts,
        )
        self._timer = self._schedule(delay, self._reconnect)

    def _reconnect(self) -> None:
        if self._stopped:
            return
        self.attempts += 1
        self._open()

    def _give_up(self, close_code: int | None) -> None:
        self._gave_up = True
        self._emit(self._give_up_listeners, close_code)

    # inbound frames

    def _dispatch(self, raw: str | bytes) -> None:
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Failed to parse live frame")
            return
        if not isinstance(data, dict):
            return

        kind = data.get("type")
        try:
            if kind == "new_message":
                self._on_new_message(NewMessageEvent.model_validate(data))
            elif kind == "typing":
                notice = TypingNotice.model_validate(data)
                self._emit(self._typing_listeners, notice)
            elif kind == "auth_ok":
                self._on_authenticated()
            else:
                logger.debug("Ignoring live frame of type %s", kind)
        except ValidationError as exc:
            logger.warning("Dropping malformed %s frame: %s", kind, exc)

    def _on_authenticated(self) -> None:
        self.attempts = 0
        self._set_state(ConnectionState.CONNECTED)

    def _on_new_message(self, event: NewMessageEvent) -> None:
        if self.store.merge(event.conversation_id, event.message):
            self._emit(self._message_listeners, event)

    def _set_state(self, state: ConnectionState) -> None:
        if state is self.state:
            return
        self.state = state
        self._emit(self._state_listeners, state)

    @staticmethod
    def _emit(listeners: list[Callable[[Any], None]], payload: Any) -> None:
        for listener in listeners:
            try:
                listener(payload)
            except Exception:
                logger.exception("Live-channel listener failed")
