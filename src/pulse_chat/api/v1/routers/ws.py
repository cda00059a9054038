from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from pulse_chat.config import settings
from pulse_chat.domain.value_objects.enums import SessionState
from pulse_chat.infrastructure.ws.protocol import HeartbeatEvent
from pulse_chat.infrastructure.ws.session import TransportSession

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])


@router.websocket("/ws")
async def ws_live(websocket: WebSocket) -> None:
    await websocket.accept()
    state = websocket.app.state
    session = TransportSession(
        websocket,
        state.registry,
        state.typing_relay,
        state.live_tokens,
    )

    heartbeat_task: asyncio.Task[None] | None = None
    if settings.WS_HEARTBEAT_SECONDS > 0:
        heartbeat_task = asyncio.create_task(
            _heartbeat(session, settings.WS_HEARTBEAT_SECONDS), name="ws-heartbeat",
        )
    try:
        while session.state is not SessionState.CLOSED:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes")
            if raw is not None:
                await session.handle_frame(raw)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %s", session.user_id or "anonymous")
    finally:
        if heartbeat_task is not None:
            heartbeat_task.cancel()
        session.mark_closed()


async def _heartbeat(session: TransportSession, interval: int) -> None:
    raw = HeartbeatEvent().to_wire()
    try:
        while True:
            await asyncio.sleep(interval)
            await session.send_text(raw)
    except asyncio.CancelledError:
        pass
    except Exception:
        logger.debug("Heartbeat stopped for %s", session.user_id, exc_info=True)
        await session.close()
