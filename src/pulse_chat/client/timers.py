from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Protocol


class Timer(Protocol):
    def cancel(self) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], Timer]


def loop_scheduler(delay: float, callback: Callable[[], None]) -> Timer:
    """Run ``callback`` on the running event loop after ``delay`` seconds."""
    return asyncio.get_running_loop().call_later(delay, callback)
