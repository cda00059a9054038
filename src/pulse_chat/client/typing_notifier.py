from __future__ import annotations

from collections.abc import Callable
from functools import partial
from uuid import UUID

from pulse_chat.client.timers import Scheduler, Timer, loop_scheduler
from pulse_chat.infrastructure.ws.protocol import TypingEvent

IDLE_TIMEOUT_SECONDS = 1.0


class TypingNotifier:
    """Debounces local keystrokes into typing on/off frames.

    The first keystroke after an idle period sends ``isTyping: true``; every
    keystroke pushes the ``isTyping: false`` deadline ``idle_timeout`` seconds
    into the future.
    """

    def __init__(
        self,
        send: Callable[[TypingEvent], object],
        *,
        idle_timeout: float = IDLE_TIMEOUT_SECONDS,
        scheduler: Scheduler = loop_scheduler,
    ) -> None:
        self._send = send
        self._idle_timeout = idle_timeout
        self._schedule = scheduler
        self._timers: dict[UUID, Timer] = {}

    def is_typing(self, conversation_id: UUID) -> bool:
        return conversation_id in self._timers

    def keystroke(self, conversation_id: UUID) -> None:
        timer = self._timers.pop(conversation_id, None)
        if timer is None:
            self._send(TypingEvent(conversation_id=conversation_id, is_typing=True))
        else:
            timer.cancel()
        self._timers[conversation_id] = self._schedule(
            self._idle_timeout, partial(self._went_idle, conversation_id),
        )

    def stop(self, conversation_id: UUID) -> None:
        """End typing now, e.g. once the message has been sent."""
        timer = self._timers.pop(conversation_id, None)
        if timer is not None:
            timer.cancel()
            self._send(TypingEvent(conversation_id=conversation_id, is_typing=False))

    def cancel_all(self) -> None:
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()

    def _went_idle(self, conversation_id: UUID) -> None:
        if self._timers.pop(conversation_id, None) is not None:
            self._send(TypingEvent(conversation_id=conversation_id, is_typing=False))
