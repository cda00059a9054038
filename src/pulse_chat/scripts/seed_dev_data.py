"""Seed development data: creates the schema, sample users, a group and messages."""
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone

from pulse_chat.config import settings
from pulse_chat.domain.entities.conversation import Conversation
from pulse_chat.domain.entities.message import Message
from pulse_chat.domain.entities.participant import Participant
from pulse_chat.domain.entities.user import User
from pulse_chat.infrastructure.db import models  # noqa: F401
from pulse_chat.infrastructure.db.base import Base
from pulse_chat.infrastructure.db.session import AsyncSessionLocal, engine
from pulse_chat.infrastructure.db.uow import SqlAlchemyUoW
from pulse_chat.logging_config import configure_logging

logger = logging.getLogger(__name__)

USERS = [
    User(id="alice", email="alice@example.com", first_name="Alice", last_name="Kim", profile_image_url=None),
    User(id="bob", email="bob@example.com", first_name="Bob", last_name="Lee", profile_image_url=None),
    User(id="carol", email="carol@example.com", first_name="Carol", last_name="Park", profile_image_url=None),
]


async def seed() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        for user in USERS:
            await uow.users.upsert(user)

        now = datetime.now(timezone.utc)
        conv_id = uuid.uuid4()
        await uow.conversations_w.create(
            Conversation(
                id=conv_id,
                name="Weekend plans",
                is_group=True,
                created_by="alice",
                created_at=now,
                updated_at=now,
            )
        )
        for user in USERS:
            await uow.participants_w.add(
                Participant(conversation_id=conv_id, user_id=user.id, joined_at=now)
            )

        messages_data = [
            ("alice", "Anyone up for hiking on Saturday?"),
            ("bob", "Count me in."),
            ("carol", "Only if we start after 9."),
        ]
        for offset, (sender_id, content) in enumerate(messages_data):
            await uow.messages_w.create(
                Message(
                    id=uuid.uuid4(),
                    conversation_id=conv_id,
                    sender_id=sender_id,
                    content=content,
                    created_at=now + timedelta(seconds=offset),
                )
            )

        await uow.commit()
        logger.info("Seeded conversation %s with %d messages", conv_id, len(messages_data))

    await engine.dispose()


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
