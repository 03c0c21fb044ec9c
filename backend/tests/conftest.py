from __future__ import annotations

import asyncio
import json
from typing import Any, Callable

import pytest


class FakeConnection:
    """In-memory stand-in for a Starlette WebSocket (send_text / close / receive)."""

    def __init__(self, *, fail: bool = False) -> None:
        self.sent: list[str] = []
        self.fail = fail
        self.closed = False
        self.close_code: int | None = None
        self.close_calls = 0
        self._inbound: asyncio.Queue[dict[str, Any]] = asyncio.Queue()

    async def send_text(self, data: str) -> None:
        if self.fail:
            raise RuntimeError("socket write failed")
        if self.closed:
            raise RuntimeError("socket is closed")
        self.sent.append(data)

    async def close(self, code: int = 1000) -> None:
        self.close_calls += 1
        if not self.closed:
            self.closed = True
            self.close_code = code
            self._inbound.put_nowait({"type": "websocket.disconnect", "code": code})

    async def receive(self) -> dict[str, Any]:
        return await self._inbound.get()

    def push_text(self, text: str) -> None:
        self._inbound.put_nowait({"type": "websocket.receive", "text": text})

    def push_json(self, payload: dict[str, Any]) -> None:
        self.push_text(json.dumps(payload))

    def push_bytes(self, data: bytes) -> None:
        self._inbound.put_nowait({"type": "websocket.receive", "bytes": data})

    def push_disconnect(self) -> None:
        self._inbound.put_nowait({"type": "websocket.disconnect", "code": 1000})

    @property
    def messages(self) -> list[dict[str, Any]]:
        return [json.loads(m) for m in self.sent]

    @property
    def snapshots(self) -> list[dict[str, Any]]:
        return [m for m in self.messages if "participants" in m]


@pytest.fixture
def make_connection() -> Callable[..., FakeConnection]:
    return FakeConnection
