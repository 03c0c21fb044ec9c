from __future__ import annotations

import asyncio
import logging
import uuid

from fastapi import APIRouter, Depends, Query, WebSocket, status

from app.config import Settings, get_settings
from services.broadcaster import Broadcaster
from services.connection_handler import ConnectionHandler
from services.session_store import SessionStore, get_session_store

router = APIRouter(tags=["voting"])
logger = logging.getLogger(__name__)


@router.websocket("/ws")
@router.websocket("/wss")
async def ws_voting(
    websocket: WebSocket,
    session: str | None = Query(None),
    name: str | None = Query(None),
    participant_id: str | None = Query(None, alias="id"),
    admin: bool = Query(False),
    store: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_settings),
) -> None:
    """
    Join a voting session and stay connected.

    Query: ``session`` and ``name`` (required), ``id`` (reuse an identity),
    ``admin`` (bool). Inbound frames are JSON commands; outbound frames are
    session snapshots ``{"id", "participants", "revealed"}`` plus direct
    replies (pong, name/role change confirmations).
    """
    if not session or not name:
        logger.warning("[voting_ws] Missing session or name: session=%r name=%r", session, name)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    try:
        await asyncio.wait_for(websocket.accept(), timeout=settings.handshake_timeout_seconds)
    except Exception as e:
        logger.warning("[voting_ws] accept() failed session_id=%r: %r", session, e)
        return

    participant_id = participant_id or str(uuid.uuid4())
    logger.info(
        "[voting_ws] New connection session_id=%r name=%r participant_id=%r admin=%s",
        session,
        name,
        participant_id,
        admin,
    )
    voting_session = await store.get_or_create(session)
    handler = ConnectionHandler(
        websocket,
        voting_session,
        participant_id,
        name,
        is_admin=admin,
        broadcaster=Broadcaster(send_timeout=settings.send_timeout_seconds),
        max_message_bytes=settings.max_message_bytes,
    )
    await handler.run()
