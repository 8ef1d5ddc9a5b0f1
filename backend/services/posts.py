"""Post lifecycle and like toggling."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, cast

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from db.errors import is_unique_violation
from models import Like, Post, User
from .storage import UPLOADS_FOLDER, delete_media, save_media

logger = logging.getLogger(__name__)


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


async def create_post(
    session: AsyncSession,
    *,
    owner: User,
    caption: str | None,
    image_bytes: bytes,
    content_type: str,
) -> Post:
    """Store the image, then insert the post row that references it."""
    image_url = await asyncio.to_thread(
        save_media,
        UPLOADS_FOLDER,
        image_bytes,
        content_type=content_type,
    )
    post = Post(
        user_id=owner.id,
        username=owner.username,
        caption=caption,
        image_url=image_url,
    )
    session.add(post)
    try:
        await session.commit()
    except Exception:
        await session.rollback()
        try:
            await asyncio.to_thread(delete_media, image_url)
        except OSError as cleanup_error:
            logger.warning(
                "Failed to cleanup uploaded image after post commit failure",
                extra={"image_url": image_url},
                exc_info=cleanup_error,
            )
        raise
    await session.refresh(post)
    return post


async def delete_post(
    session: AsyncSession,
    *,
    owner_id: str,
    post_id: int,
) -> bool:
    """Remove a post owned by ``owner_id`` together with its likes.

    Unknown ids and posts owned by someone else are a no-op; returns whether
    anything was deleted.
    """
    result = await session.execute(
        select(Post).where(_eq(Post.id, post_id), _eq(Post.user_id, owner_id)).limit(1)
    )
    post = result.scalar_one_or_none()
    if post is None:
        return False

    image_url = post.image_url
    await session.execute(delete(Like).where(_eq(Like.post_id, post_id)))
    await session.execute(delete(Post).where(_eq(Post.id, post_id)))
    try:
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    try:
        await asyncio.to_thread(delete_media, image_url)
    except OSError as cleanup_error:
        logger.warning(
            "Failed to cleanup image of deleted post",
            extra={"post_id": post_id, "image_url": image_url},
            exc_info=cleanup_error,
        )
    return True


async def toggle_like(
    session: AsyncSession,
    *,
    user_id: str,
    post_id: int,
) -> bool:
    """Unlike if the pair exists, like otherwise. Returns the resulting state."""
    removed = await session.execute(
        delete(Like).where(_eq(Like.user_id, user_id), _eq(Like.post_id, post_id))
    )
    if getattr(removed, "rowcount", 0):
        await session.commit()
        return False

    session.add(Like(user_id=user_id, post_id=post_id))
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if not is_unique_violation(exc):
            raise
    return True


async def count_likes(session: AsyncSession, post_id: int) -> int:
    post_id_column = cast(ColumnElement[int], Like.post_id)
    result = await session.execute(
        select(func.count()).select_from(Like).where(_eq(post_id_column, post_id))
    )
    return int(result.scalar_one() or 0)
