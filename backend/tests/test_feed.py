"""Tests for the home feed."""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from core import hash_password
from models import Follow, Like, Post, User


async def seed_users(db_session: AsyncSession, *usernames: str) -> dict[str, User]:
    password_hash = hash_password("pw123", rounds=4)
    users = {name: User(username=name, password_hash=password_hash) for name in usernames}
    db_session.add_all(users.values())
    await db_session.commit()
    return users


async def login(client: AsyncClient, username: str) -> None:
    response = await client.post("/login", data={"username": username, "password": "pw123"})
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_feed_lists_all_posts_newest_first(
    async_client: AsyncClient,
    db_session: AsyncSession,
):
    users = await seed_users(db_session, "alice", "bob")
    now = datetime.now(timezone.utc)
    oldest = Post(
        user_id=users["bob"].id,
        username="bob",
        image_url="/uploads/oldest.jpg",
        created_at=now - timedelta(minutes=5),
    )
    middle = Post(
        user_id=users["alice"].id,
        username="alice",
        caption="hello",
        image_url="/uploads/middle.jpg",
        created_at=now - timedelta(minutes=1),
    )
    newest = Post(
        user_id=users["bob"].id,
        username="bob",
        image_url="/uploads/newest.jpg",
        created_at=now,
    )
    db_session.add_all([oldest, middle, newest])
    await db_session.commit()
    await login(async_client, "alice")

    response = await async_client.get("/")

    assert response.status_code == 200
    body = response.json()
    assert [post["image_url"] for post in body["posts"]] == [
        "/uploads/newest.jpg",
        "/uploads/middle.jpg",
        "/uploads/oldest.jpg",
    ]
    assert body["viewer"]["username"] == "alice"


@pytest.mark.asyncio
async def test_feed_breaks_timestamp_ties_by_id(
    async_client: AsyncClient,
    db_session: AsyncSession,
):
    users = await seed_users(db_session, "alice")
    created_at = datetime.now(timezone.utc)
    first = Post(user_id=users["alice"].id, username="alice", image_url="/uploads/a.jpg", created_at=created_at)
    db_session.add(first)
    await db_session.commit()
    second = Post(user_id=users["alice"].id, username="alice", image_url="/uploads/b.jpg", created_at=created_at)
    db_session.add(second)
    await db_session.commit()

    response = await async_client.get("/")

    assert [post["id"] for post in response.json()["posts"]] == [second.id, first.id]


@pytest.mark.asyncio
async def test_feed_reports_like_counts_and_viewer_state(
    async_client: AsyncClient,
    db_session: AsyncSession,
):
    users = await seed_users(db_session, "alice", "bob", "carol")
    liked = Post(user_id=users["bob"].id, username="bob", image_url="/uploads/liked.jpg")
    unliked = Post(user_id=users["bob"].id, username="bob", image_url="/uploads/unliked.jpg")
    db_session.add_all([liked, unliked])
    await db_session.commit()
    db_session.add_all(
        [
            Like(user_id=users["alice"].id, post_id=liked.id),
            Like(user_id=users["carol"].id, post_id=liked.id),
            Like(user_id=users["carol"].id, post_id=unliked.id),
        ]
    )
    await db_session.commit()
    await login(async_client, "alice")

    response = await async_client.get("/")

    posts = {post["id"]: post for post in response.json()["posts"]}
    assert posts[liked.id]["like_count"] == 2
    assert posts[liked.id]["user_liked"] is True
    assert posts[unliked.id]["like_count"] == 1
    assert posts[unliked.id]["user_liked"] is False


@pytest.mark.asyncio
async def test_feed_includes_author_avatar(
    async_client: AsyncClient,
    db_session: AsyncSession,
):
    users = await seed_users(db_session, "bob")
    users["bob"].profile_pic_url = "/avatars/bob.jpg"
    db_session.add(Post(user_id=users["bob"].id, username="bob", image_url="/uploads/x.jpg"))
    await db_session.commit()

    response = await async_client.get("/")

    [post] = response.json()["posts"]
    assert post["profile_pic_url"] == "/avatars/bob.jpg"
    assert post["username"] == "bob"


@pytest.mark.asyncio
async def test_anonymous_feed(async_client: AsyncClient, db_session: AsyncSession):
    users = await seed_users(db_session, "bob")
    post = Post(user_id=users["bob"].id, username="bob", image_url="/uploads/x.jpg")
    db_session.add(post)
    await db_session.commit()
    db_session.add(Like(user_id=users["bob"].id, post_id=post.id))
    await db_session.commit()

    response = await async_client.get("/")

    assert response.status_code == 200
    body = response.json()
    assert body["viewer"] is None
    assert body["followed_users"] == []
    assert body["posts"][0]["like_count"] == 1
    assert body["posts"][0]["user_liked"] is False


@pytest.mark.asyncio
async def test_empty_feed(async_client: AsyncClient):
    response = await async_client.get("/")
    assert response.status_code == 200
    assert response.json()["posts"] == []


@pytest.mark.asyncio
async def test_feed_page_carries_followed_users(
    async_client: AsyncClient,
    db_session: AsyncSession,
):
    users = await seed_users(db_session, "alice", "bob", "carol")
    db_session.add_all(
        [
            Follow(follower_id=users["alice"].id, following_id=users["bob"].id),
            Follow(follower_id=users["carol"].id, following_id=users["alice"].id),
        ]
    )
    await db_session.commit()
    await login(async_client, "alice")

    response = await async_client.get("/")

    assert [item["username"] for item in response.json()["followed_users"]] == ["bob"]
