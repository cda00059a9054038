from __future__ import annotations

from typing import Protocol

from pulse_chat.domain.entities.user import User


class UserRepository(Protocol):
    async def get_by_id(self, user_id: str) -> User | None: ...

    async def upsert(self, user: User) -> User:
        """Insert the user or refresh the profile fields of an existing one."""
        ...

    async def search(
        self, query: str, *, exclude_user_id: str, limit: int = 10
    ) -> list[User]: ...
