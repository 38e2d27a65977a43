"""WebSocket stream of committed changes for live views."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status

from confession_board.api.v1.dependencies import ChangeFeedDep
from confession_board.services.realtime import ChangeEvent

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


async def _forward(websocket: WebSocket, queue: asyncio.Queue[ChangeEvent]) -> None:
    while True:
        event = await queue.get()
        await websocket.send_json(event.as_dict())


@router.websocket("/realtime")
async def realtime(
    websocket: WebSocket,
    change_feed: ChangeFeedDep,
    tables: str = Query(..., description="Comma-separated table names"),
) -> None:
    """Push a JSON message for every change to the requested tables.

    Clients re-fetch whatever they render when a message arrives. Anything
    the client sends is ignored; the subscription ends with the socket.
    """
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue[ChangeEvent] = asyncio.Queue()

    def deliver(event: ChangeEvent) -> None:
        loop.call_soon_threadsafe(queue.put_nowait, event)

    wanted = [name.strip() for name in tables.split(",") if name.strip()]
    try:
        subscription = change_feed.subscribe(wanted, deliver)
    except ValueError as err:
        logger.info("Rejected realtime subscription: %s", err)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=str(err))
        return

    await websocket.accept()
    sender = asyncio.create_task(_forward(websocket, queue))
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug("Realtime client disconnected")
    finally:
        sender.cancel()
        subscription.unsubscribe()
