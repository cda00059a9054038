from __future__ import annotations

from pulse_chat.domain.entities.user import User
from pulse_chat.infrastructure.db.models.user import UserModel


def model_to_entity(model: UserModel) -> User:
    return User(
        id=model.id,
        email=model.email,
        first_name=model.first_name,
        last_name=model.last_name,
        profile_image_url=model.profile_image_url,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def entity_to_values(entity: User) -> dict[str, str | None]:
    """Column values for an upsert; timestamps are left to the database."""
    return {
        "id": entity.id,
        "email": entity.email,
        "first_name": entity.first_name,
        "last_name": entity.last_name,
        "profile_image_url": entity.profile_image_url,
    }
