from __future__ import annotations

import asyncio

import pytest

from services.session_store import SessionStore


@pytest.mark.asyncio
async def test_concurrent_get_or_create_yields_single_session() -> None:
    store = SessionStore()

    sessions = await asyncio.gather(*(store.get_or_create("new-room") for _ in range(20)))

    assert len(store) == 1
    assert all(s is sessions[0] for s in sessions)
    assert sessions[0].id == "new-room"


@pytest.mark.asyncio
async def test_distinct_ids_get_distinct_sessions() -> None:
    store = SessionStore()

    first, second = await asyncio.gather(store.get_or_create("a"), store.get_or_create("b"))

    assert first is not second
    assert len(store) == 2
    assert "a" in store and "b" in store


@pytest.mark.asyncio
async def test_get_never_creates() -> None:
    store = SessionStore()
    assert store.get("missing") is None
    assert len(store) == 0

    created = await store.get_or_create("present")
    assert store.get("present") is created
