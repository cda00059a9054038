from __future__ import annotations

import logging
from types import TracebackType
from typing import Any, Self
from uuid import UUID

import httpx

from pulse_chat.client.connection import ReconnectionManager
from pulse_chat.client.store import MessageStore
from pulse_chat.infrastructure.ws.protocol import MessageRecord

logger = logging.getLogger(__name__)


class ChatApiClient:
    """REST side of the chat service.

    History pages and the records returned for our own sends are merged into
    the same store the live channel writes to.
    """

    def __init__(
        self,
        base_url: str,
        access_token: str,
        *,
        store: MessageStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self.store = store or MessageStore()
        self._http = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Authorization": f"Bearer {access_token}"},
            transport=transport,
            timeout=timeout,
        )

    @property
    def ws_url(self) -> str:
        url = self._base_url.replace("https://", "wss://").replace("http://", "ws://")
        return f"{url}/ws"

    def live_connection(self, user_id: str, **kwargs: Any) -> ReconnectionManager:
        """Live channel sharing this client's store and minting a fresh token per connect."""
        return ReconnectionManager(
            self.ws_url, user_id, self.fetch_live_token, store=self.store, **kwargs,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = await self._http.request(method, path, **kwargs)
        response.raise_for_status()
        return response.json()

    async def fetch_live_token(self) -> str:
        data = await self._request("POST", "/api/ws/token")
        return data["token"]

    async def current_user(self) -> dict[str, Any]:
        return await self._request("GET", "/api/auth/user")

    async def search_users(self, query: str) -> list[dict[str, Any]]:
        return await self._request("GET", "/api/users/search", params={"q": query})

    async def list_conversations(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/api/conversations")

    async def open_direct(self, user_id: str) -> dict[str, Any]:
        return await self._request("POST", "/api/conversations/direct", json={"userId": user_id})

    async def create_group(self, name: str, participant_ids: list[str]) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/api/conversations/group",
            json={"name": name, "participantIds": participant_ids},
        )

    async def fetch_history(
        self,
        conversation_id: UUID,
        *,
        limit: int = 50,
        offset: int = 0,
    ) -> list[MessageRecord]:
        """Fetch a page of history and return the merged local view."""
        data = await self._request(
            "GET",
            f"/api/conversations/{conversation_id}/messages",
            params={"limit": limit, "offset": offset},
        )
        added = self.store.merge_history(
            conversation_id, (MessageRecord.model_validate(m) for m in data),
        )
        logger.debug("History for %s: %d new message(s)", conversation_id, added)
        return self.store.messages(conversation_id)

    async def send_message(self, conversation_id: UUID, content: str) -> MessageRecord:
        data = await self._request(
            "POST",
            f"/api/conversations/{conversation_id}/messages",
            json={"content": content},
        )
        record = MessageRecord.model_validate(data)
        self.store.merge(conversation_id, record)
        return record
