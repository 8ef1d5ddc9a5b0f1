"""Tests for following, unfollowing and explore."""

from typing import Any, cast

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from core import hash_password
from models import Follow, User
from services import follow_graph


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


async def seed_users(db_session: AsyncSession, *usernames: str) -> dict[str, User]:
    password_hash = hash_password("pw123", rounds=4)
    users = {name: User(username=name, password_hash=password_hash) for name in usernames}
    db_session.add_all(users.values())
    await db_session.commit()
    return users


async def login(client: AsyncClient, username: str) -> None:
    response = await client.post("/login", data={"username": username, "password": "pw123"})
    assert response.status_code == 200


async def count_edges(db_session: AsyncSession, follower_id: str, following_id: str) -> int:
    result = await db_session.execute(
        select(func.count())
        .select_from(Follow)
        .where(_eq(Follow.follower_id, follower_id), _eq(Follow.following_id, following_id))
    )
    return int(result.scalar_one())


@pytest.mark.asyncio
async def test_follow_and_unfollow_round_trip_counts(
    async_client: AsyncClient,
    db_session: AsyncSession,
):
    users = await seed_users(db_session, "alice", "bob")
    await login(async_client, "alice")

    before_bob = await async_client.get("/profile/bob")
    before_alice = await async_client.get("/profile/alice")
    assert before_bob.json()["follower_count"] == 0
    assert before_alice.json()["following_count"] == 0

    follow_response = await async_client.post("/follow/bob")
    assert follow_response.status_code == 200
    assert follow_response.json() == {"detail": "Followed", "is_following": True}

    bob_profile = (await async_client.get("/profile/bob")).json()
    alice_profile = (await async_client.get("/profile/alice")).json()
    assert bob_profile["follower_count"] == 1
    assert bob_profile["following_count"] == 0
    assert alice_profile["following_count"] == 1

    unfollow_response = await async_client.post("/unfollow/bob")
    assert unfollow_response.status_code == 200
    assert unfollow_response.json() == {"detail": "Unfollowed", "is_following": False}

    after_bob = (await async_client.get("/profile/bob")).json()
    after_alice = (await async_client.get("/profile/alice")).json()
    assert after_bob["follower_count"] == before_bob.json()["follower_count"]
    assert after_alice["following_count"] == before_alice.json()["following_count"]
    assert await count_edges(db_session, users["alice"].id, users["bob"].id) == 0


@pytest.mark.asyncio
async def test_follow_twice_keeps_single_edge(
    async_client: AsyncClient,
    db_session: AsyncSession,
):
    users = await seed_users(db_session, "alice", "bob")
    await login(async_client, "alice")

    await async_client.post("/follow/bob")
    second = await async_client.post("/follow/bob")

    assert second.status_code == 200
    assert second.json() == {"detail": "Already following", "is_following": True}
    assert await count_edges(db_session, users["alice"].id, users["bob"].id) == 1


@pytest.mark.asyncio
async def test_unfollow_without_edge_is_noop(async_client: AsyncClient, db_session: AsyncSession):
    await seed_users(db_session, "alice", "bob")
    await login(async_client, "alice")

    response = await async_client.post("/unfollow/bob")

    assert response.status_code == 200
    assert response.json() == {"detail": "Not following", "is_following": False}


@pytest.mark.asyncio
async def test_follow_unknown_user_is_not_found(async_client: AsyncClient, db_session: AsyncSession):
    await seed_users(db_session, "alice")
    await login(async_client, "alice")

    follow_response = await async_client.post("/follow/nobody")
    unfollow_response = await async_client.post("/unfollow/nobody")

    assert follow_response.status_code == 404
    assert follow_response.json()["detail"] == "User not found"
    assert unfollow_response.status_code == 404


@pytest.mark.asyncio
async def test_follow_edges_are_directed(async_client: AsyncClient, db_session: AsyncSession):
    users = await seed_users(db_session, "alice", "bob")
    await login(async_client, "alice")
    await async_client.post("/follow/bob")

    assert await count_edges(db_session, users["alice"].id, users["bob"].id) == 1
    assert await count_edges(db_session, users["bob"].id, users["alice"].id) == 0


@pytest.mark.asyncio
async def test_explore_lists_other_users_with_follow_state(
    async_client: AsyncClient,
    db_session: AsyncSession,
):
    await seed_users(db_session, "carol", "alice", "bob")
    await login(async_client, "alice")
    await async_client.post("/follow/bob")

    response = await async_client.get("/explore")

    assert response.status_code == 200
    body = response.json()
    assert [(user["username"], user["is_following"]) for user in body["users"]] == [
        ("bob", True),
        ("carol", False),
    ]
    assert body["viewer"]["username"] == "alice"
    assert [item["username"] for item in body["followed_users"]] == ["bob"]


@pytest.mark.asyncio
async def test_followed_preview_is_capped(db_session: AsyncSession):
    names = [f"user{index:02d}" for index in range(12)]
    users = await seed_users(db_session, "viewer", *names)
    db_session.add_all(
        Follow(follower_id=users["viewer"].id, following_id=users[name].id) for name in names
    )
    await db_session.commit()

    preview = await follow_graph.list_followed_preview(db_session, users["viewer"].id)

    assert len(preview) == follow_graph.FOLLOWED_PREVIEW_LIMIT
    assert [item.username for item in preview] == names[: follow_graph.FOLLOWED_PREVIEW_LIMIT]
