"""Read-only session REST API. Reads never create sessions."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from services.session_store import SessionStore, get_session_store

router = APIRouter(tags=["sessions"])
logger = logging.getLogger(__name__)


class SessionSummaryResponse(BaseModel):
    """Vote tally for GET /api/sessions/{id}/summary. ``average`` is null until revealed."""

    session_id: str
    revealed: bool
    participants: int
    active: int
    voted: int
    abstained: int
    average: float | None = None


@router.get("/sessions/{session_id}", status_code=200)
async def get_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
) -> dict[str, Any]:
    """Current snapshot, same shape as the WebSocket broadcast."""
    logger.info("[sessions] GET /api/sessions/%s called", session_id)
    session = store.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    async with session.lock:
        return session.to_dict()


@router.get(
    "/sessions/{session_id}/summary",
    response_model=SessionSummaryResponse,
    status_code=200,
)
async def get_session_summary(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
) -> SessionSummaryResponse:
    session = store.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    async with session.lock:
        tally = session.tally()
        revealed = session.revealed
    return SessionSummaryResponse(
        session_id=session_id,
        revealed=revealed,
        participants=tally.participants,
        active=tally.active,
        voted=tally.voted,
        abstained=tally.abstained,
        average=tally.average,
    )
