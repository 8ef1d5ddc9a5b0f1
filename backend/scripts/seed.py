"""Database seed script for local development.

Usage:
    python scripts/seed.py

Optional media directory override:
    SEED_MEDIA_DIR=/absolute/path/to/media python scripts/seed.py

Media directory layout:
    <seed-media-dir>/<username>/<image-file>

Users without a media directory get solid-colour placeholder images.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Any, cast

from PIL import Image
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql import ColumnElement

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from core.security import hash_password  # noqa: E402
from db.session import AsyncSessionMaker  # noqa: E402
from models import Follow, Post, User  # noqa: E402
from services.images import process_image_bytes  # noqa: E402
from services.storage import UPLOADS_FOLDER, save_media  # noqa: E402

logger = logging.getLogger("seed")


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


@dataclass(frozen=True)
class SeedUser:
    username: str
    bio: str


@dataclass(frozen=True)
class SeedPost:
    username: str
    caption: str
    source_path: Path | None = None


@dataclass(frozen=True)
class SeedSummary:
    users_created: int
    posts_created: int
    follows_created: int


BASE_USERS: Sequence[SeedUser] = [
    SeedUser(username="alex", bio="Trying out photofeed!"),
    SeedUser(username="bella", bio="Coffee and city walks."),
    SeedUser(username="cara", bio="Photographer in training."),
    SeedUser(username="dan", bio="Weekend cyclist."),
    SeedUser(username="ella", bio="Design and travel."),
]

BASE_POSTS: Sequence[SeedPost] = [
    SeedPost(username="alex", caption="Sunny day snapshots."),
    SeedPost(username="alex", caption="Morning run before work."),
    SeedPost(username="bella", caption="First latte art attempt!"),
    SeedPost(username="cara", caption="Golden hour on the way home."),
    SeedPost(username="dan", caption="Sunday hill climb complete."),
    SeedPost(username="ella", caption="Tiny museum with huge energy."),
]

DEFAULT_PASSWORD = "password123"
DEFAULT_MEDIA_DIR = ROOT_DIR / "scripts" / "seed_media"
SEED_MEDIA_DIR_ENV = "SEED_MEDIA_DIR"
SUPPORTED_IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".webp"}
PLACEHOLDER_COLORS: Sequence[tuple[int, int, int]] = [
    (243, 189, 80),
    (109, 163, 224),
    (170, 128, 215),
    (90, 170, 120),
    (219, 121, 146),
]


def _caption_from_filename(path: Path) -> str:
    label = re.sub(r"[_-]+", " ", path.stem).strip()
    if not label:
        return "New post."
    return f"{label.capitalize()}."


def build_seed_follows(usernames: Sequence[str]) -> list[tuple[str, str]]:
    """Each user follows the next one or two users in a ring."""
    if len(usernames) < 2:
        return []

    relationships: set[tuple[str, str]] = set()
    total_users = len(usernames)
    for index, follower in enumerate(usernames):
        relationships.add((follower, usernames[(index + 1) % total_users]))
        if total_users > 3:
            relationships.add((follower, usernames[(index + 2) % total_users]))
    return sorted(relationships)


def discover_media_posts(media_dir: Path, usernames: Sequence[str]) -> list[SeedPost]:
    if not media_dir.is_dir():
        return []

    discovered: list[SeedPost] = []
    for username in usernames:
        user_dir = media_dir / username
        if not user_dir.is_dir():
            continue
        for image_path in sorted(user_dir.iterdir()):
            if image_path.is_file() and image_path.suffix.lower() in SUPPORTED_IMAGE_SUFFIXES:
                discovered.append(
                    SeedPost(
                        username=username,
                        caption=_caption_from_filename(image_path),
                        source_path=image_path,
                    )
                )
    return discovered


def _build_placeholder_image(seed_index: int) -> bytes:
    color = PLACEHOLDER_COLORS[seed_index % len(PLACEHOLDER_COLORS)]
    image = Image.new("RGB", (1080, 1080), color)
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def _store_post_image(post: SeedPost, seed_index: int) -> str:
    if post.source_path is not None:
        raw = post.source_path.read_bytes()
    else:
        raw = _build_placeholder_image(seed_index)
    processed, content_type = process_image_bytes(raw)
    return save_media(UPLOADS_FOLDER, processed, content_type=content_type)


async def get_or_create_user(session: AsyncSession, payload: SeedUser) -> tuple[User, bool]:
    result = await session.execute(select(User).where(_eq(User.username, payload.username)))
    user = result.scalar_one_or_none()
    if user is not None:
        return user, False

    user = User(
        username=payload.username,
        bio=payload.bio,
        password_hash=hash_password(DEFAULT_PASSWORD),
    )
    session.add(user)
    await session.flush()
    return user, True


async def ensure_posts(
    session: AsyncSession,
    users: dict[str, User],
    posts: Sequence[SeedPost],
) -> int:
    created = 0
    for index, post in enumerate(posts):
        author = users[post.username]
        result = await session.execute(
            select(Post.id).where(
                _eq(Post.user_id, author.id),
                _eq(Post.caption, post.caption),
            )
        )
        if result.first() is not None:
            continue

        image_url = await asyncio.to_thread(_store_post_image, post, index)
        session.add(
            Post(
                user_id=author.id,
                username=author.username,
                caption=post.caption,
                image_url=image_url,
            )
        )
        created += 1
    return created


async def ensure_follows(
    session: AsyncSession,
    users: dict[str, User],
    follows: Sequence[tuple[str, str]],
) -> int:
    created = 0
    for follower_username, following_username in follows:
        follower = users[follower_username]
        following = users[following_username]
        existing = await session.get(Follow, (follower.id, following.id))
        if existing is not None:
            continue
        session.add(Follow(follower_id=follower.id, following_id=following.id))
        created += 1
    return created


async def seed(
    session_maker: async_sessionmaker[AsyncSession] = AsyncSessionMaker,
    media_dir: Path | None = None,
) -> SeedSummary:
    media_dir = media_dir or Path(os.getenv(SEED_MEDIA_DIR_ENV, str(DEFAULT_MEDIA_DIR)))
    usernames = [user.username for user in BASE_USERS]
    posts = [*BASE_POSTS, *discover_media_posts(media_dir, usernames)]
    follows = build_seed_follows(usernames)

    async with session_maker() as session:
        users: dict[str, User] = {}
        users_created = 0
        for payload in BASE_USERS:
            user, created = await get_or_create_user(session, payload)
            users[user.username] = user
            users_created += int(created)

        posts_created = await ensure_posts(session, users, posts)
        follows_created = await ensure_follows(session, users, follows)
        await session.commit()

    return SeedSummary(
        users_created=users_created,
        posts_created=posts_created,
        follows_created=follows_created,
    )


async def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    summary = await seed()
    logger.info("Seed data inserted.")
    logger.info("   Users: %s", ", ".join(user.username for user in BASE_USERS))
    logger.info("   Default password: %s", DEFAULT_PASSWORD)
    logger.info("   New users: %d", summary.users_created)
    logger.info("   New posts: %d", summary.posts_created)
    logger.info("   New follows: %d", summary.follows_created)


if __name__ == "__main__":
    asyncio.run(main())
