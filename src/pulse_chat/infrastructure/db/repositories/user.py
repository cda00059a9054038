from __future__ import annotations

from sqlalchemy import func, or_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from pulse_chat.domain.entities.user import User
from pulse_chat.infrastructure.db.mappers import user as mapper
from pulse_chat.infrastructure.db.models.user import UserModel


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: str) -> User | None:
        result = await self._session.get(UserModel, user_id)
        return mapper.model_to_entity(result) if result else None

    async def upsert(self, user: User) -> User:
        values = mapper.entity_to_values(user)
        profile = {k: v for k, v in values.items() if k != "id"}
        stmt = (
            pg_insert(UserModel)
            .values(**values)
            .on_conflict_do_update(
                index_elements=[UserModel.id],
                set_={**profile, "updated_at": func.now()},
            )
            .returning(UserModel)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return mapper.model_to_entity(result.scalar_one())

    async def search(
        self,
        query: str,
        *,
        exclude_user_id: str,
        limit: int = 10,
    ) -> list[User]:
        pattern = f"%{query}%"
        stmt = (
            select(UserModel)
            .where(
                or_(
                    UserModel.first_name.ilike(pattern),
                    UserModel.last_name.ilike(pattern),
                    UserModel.email.ilike(pattern),
                ),
                UserModel.id != exclude_user_id,
            )
            .order_by(UserModel.first_name, UserModel.id)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]
