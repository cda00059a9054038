from __future__ import annotations

from typing import Any

from pulse_chat.application.dto.principal import Principal


def principal_from_claims(payload: dict[str, Any]) -> Principal:
    """Build a Principal from standard OIDC claims."""
    return Principal(
        user_id=str(payload["sub"]),
        email=payload.get("email"),
        first_name=payload.get("given_name", payload.get("first_name")),
        last_name=payload.get("family_name", payload.get("last_name")),
        profile_image_url=payload.get("picture", payload.get("profile_image_url")),
    )
