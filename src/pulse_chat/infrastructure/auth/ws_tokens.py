"""Short-lived tokens binding a live-channel connection to an HTTP identity.

A client trades its bearer identity for one of these over REST and presents
it in the ``auth`` frame, so the socket identity is never a bare claim.
"""
from __future__ import annotations

import logging
from datetime import timedelta

import jwt

from pulse_chat.application.exceptions import AuthenticationError
from pulse_chat.application.ports.clock import Clock, SystemClock

logger = logging.getLogger(__name__)

AUDIENCE = "pulse-chat:ws"
ALGORITHM = "HS256"


class LiveTokenIssuer:
    def __init__(
        self,
        secret: str,
        ttl_seconds: int = 60,
        clock: Clock | None = None,
    ) -> None:
        if not secret:
            raise ValueError("a signing secret is required for live-channel tokens")
        self._secret = secret
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock or SystemClock()

    @property
    def ttl_seconds(self) -> int:
        return int(self._ttl.total_seconds())

    def issue(self, user_id: str) -> str:
        now = self._clock.now()
        return jwt.encode(
            {"sub": user_id, "aud": AUDIENCE, "iat": now, "exp": now + self._ttl},
            self._secret,
            algorithm=ALGORITHM,
        )

    def verify(self, token: str) -> str:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                audience=AUDIENCE,
                options={"require": ["sub", "exp", "aud"], "verify_exp": False},
            )
        except jwt.PyJWTError as exc:
            raise AuthenticationError(f"invalid live token: {exc}") from exc

        # Expiry is checked against the injected clock, not the wall clock.
        if payload["exp"] <= self._clock.now().timestamp():
            raise AuthenticationError("live token expired")
        return str(payload["sub"])
