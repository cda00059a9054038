"""In-process registry of live, authenticated connections."""
from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class TransportHandle(Protocol):
    @property
    def is_live(self) -> bool: ...

    async def send_text(self, data: str) -> None: ...

    async def close(self, code: int = 1000, reason: str = "") -> None: ...


REPLACED_CLOSE_CODE = 4000


class ConnectionRegistry:
    """Maps a user id to at most one live transport handle.

    All methods run on the server's event loop. The mapping is updated
    before any await, so ``register`` / ``unregister`` stay consistent when a
    dying connection and a newly authenticated one for the same user
    interleave.
    """

    def __init__(self) -> None:
        self._handles: dict[str, TransportHandle] = {}

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._handles

    async def register(self, user_id: str, handle: TransportHandle) -> None:
        """Bind ``handle`` to ``user_id``, closing any handle it replaces."""
        previous = self._handles.get(user_id)
        self._handles[user_id] = handle
        logger.info("User %s connected (online=%d)", user_id, len(self._handles))

        if previous is None or previous is handle:
            return
        logger.info("Replacing previous connection of user %s", user_id)
        try:
            await previous.close(REPLACED_CLOSE_CODE, "Replaced by a newer connection")
        except Exception:
            logger.debug("Closing replaced connection of %s failed", user_id, exc_info=True)

    def unregister(self, user_id: str, handle: TransportHandle) -> bool:
        """Remove the entry only if it still points at ``handle``."""
        if self._handles.get(user_id) is not handle:
            return False
        del self._handles[user_id]
        logger.info("User %s disconnected (online=%d)", user_id, len(self._handles))
        return True

    def lookup(self, user_id: str) -> TransportHandle | None:
        return self._handles.get(user_id)

    def online_user_ids(self) -> list[str]:
        return list(self._handles)
