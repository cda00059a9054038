from __future__ import annotations

from enum import StrEnum


class SessionState(StrEnum):
    """Lifecycle of one server-side live connection."""

    CONNECTING = "connecting"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


class ConnectionState(StrEnum):
    """Lifecycle of the client's logical connection."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
