from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from models.session import Connection, Session

logger = logging.getLogger(__name__)

DEFAULT_SEND_TIMEOUT_SECONDS = 5.0


def encode(payload: dict[str, Any]) -> str:
    return json.dumps(payload, separators=(",", ":"))


class Broadcaster:
    """
    Writes session snapshots and targeted messages to client connections.

    - Every write to a session's connections happens under ``session.lock``,
      so a connection never sees two writes interleave and a snapshot is
      never serialized mid-mutation.
    - ``publish`` keeps the lock across the per-connection writes: mutators
      wait for a broadcast to finish (strict consistency over latency). Each
      write is bounded by ``send_timeout`` so one stalled client caps that wait.
    - A failed write prunes that connection only; the rest still get the update.
    """

    def __init__(self, *, send_timeout: float = DEFAULT_SEND_TIMEOUT_SECONDS) -> None:
        self._send_timeout = send_timeout

    async def _write(self, connection: Connection, data: str) -> None:
        await asyncio.wait_for(connection.send_text(data), timeout=self._send_timeout)

    async def publish(self, session: Session) -> int:
        """Send the current snapshot to every registered connection. Returns deliveries."""
        delivered = 0
        async with session.lock:
            data = encode(session.to_dict())
            dead: list[Connection] = []
            for connection in list(session.connections):
                try:
                    await self._write(connection, data)
                except Exception as e:
                    logger.warning(
                        "[broadcaster] Write failed session_id=%r participant_id=%r: %r",
                        session.id,
                        session.connections.get(connection),
                        e,
                    )
                    dead.append(connection)
                else:
                    delivered += 1
            for connection in dead:
                session.connections.pop(connection, None)
                await close_quietly(connection)
        logger.debug(
            "[broadcaster] Published session_id=%r delivered=%d pruned=%d",
            session.id,
            delivered,
            len(dead),
        )
        return delivered

    async def send_snapshot(self, session: Session, connection: Connection) -> None:
        """Snapshot to a single connection. Raises if the write fails."""
        async with session.lock:
            await self._write(connection, encode(session.to_dict()))

    async def send_direct(
        self, session: Session, connection: Connection, payload: dict[str, Any]
    ) -> None:
        """Targeted message (pong, confirmations). Raises if the write fails."""
        async with session.lock:
            await self._write(connection, encode(payload))


async def close_quietly(connection: Connection, code: int = 1000) -> None:
    try:
        await connection.close(code=code)
    except Exception as e:
        # already closed by the peer or the server
        logger.debug("[broadcaster] close() ignored: %r", e)
