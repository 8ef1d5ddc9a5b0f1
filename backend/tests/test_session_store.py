"""Tests for the Redis-backed session store."""

import json

import pytest

from services.auth import SessionData, SessionStore, hash_session_id


@pytest.mark.asyncio
async def test_create_and_load_round_trip(redis_stub):
    store = SessionStore(redis_stub, ttl_seconds=60)

    session_id = await store.create(user_id="u-1", username="alice")

    assert len(session_id) >= 40
    assert await store.load(session_id) == SessionData(user_id="u-1", username="alice")
    assert redis_stub.ttls[f"session:{hash_session_id(session_id)}"] == 60


@pytest.mark.asyncio
async def test_session_ids_are_unique(redis_stub):
    store = SessionStore(redis_stub, ttl_seconds=60)
    ids = {await store.create(user_id="u-1", username="alice") for _ in range(20)}
    assert len(ids) == 20


@pytest.mark.asyncio
async def test_load_ignores_missing_and_unreadable_records(redis_stub):
    store = SessionStore(redis_stub, ttl_seconds=60)

    assert await store.load(None) is None
    assert await store.load("unknown") is None

    redis_stub.data[f"session:{hash_session_id('broken')}"] = "{not json"
    assert await store.load("broken") is None

    redis_stub.data[f"session:{hash_session_id('anon')}"] = json.dumps({"username": "x"})
    assert await store.load("anon") is None


@pytest.mark.asyncio
async def test_load_decodes_bytes_payloads(redis_stub):
    store = SessionStore(redis_stub, ttl_seconds=60)
    payload = json.dumps({"user_id": "u-2", "username": "bob"}).encode("utf-8")
    redis_stub.data[f"session:{hash_session_id('raw')}"] = payload

    assert await store.load("raw") == SessionData(user_id="u-2", username="bob")


@pytest.mark.asyncio
async def test_destroy(redis_stub):
    store = SessionStore(redis_stub, ttl_seconds=60)
    session_id = await store.create(user_id="u-1", username="alice")

    await store.destroy(session_id)
    assert await store.load(session_id) is None
    # Destroying twice, or with no id, is harmless.
    await store.destroy(session_id)
    await store.destroy(None)


def test_ttl_is_at_least_one_second(redis_stub):
    assert SessionStore(redis_stub, ttl_seconds=0).ttl_seconds == 1
