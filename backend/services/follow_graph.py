"""Follow edges, counts and follow-related listings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, cast

from sqlalchemy import delete, exists, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from db.errors import is_unique_violation
from models import Follow, User

FOLLOWED_PREVIEW_LIMIT = 8


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def _ne(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column != value)


@dataclass(frozen=True)
class FollowCounts:
    follower_count: int
    following_count: int


@dataclass(frozen=True)
class UserPreview:
    username: str
    profile_pic_url: str | None


@dataclass(frozen=True)
class ExploreEntry:
    id: str
    username: str
    profile_pic_url: str | None
    is_following: bool


async def follow(
    session: AsyncSession,
    *,
    follower_id: str,
    following_id: str,
) -> bool:
    """Insert the edge; returns False when it already existed."""
    session.add(Follow(follower_id=follower_id, following_id=following_id))
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if is_unique_violation(exc):
            return False
        raise
    return True


async def unfollow(
    session: AsyncSession,
    *,
    follower_id: str,
    following_id: str,
) -> bool:
    """Delete the edge; returns False when there was nothing to delete."""
    result = await session.execute(
        delete(Follow).where(
            _eq(Follow.follower_id, follower_id),
            _eq(Follow.following_id, following_id),
        )
    )
    await session.commit()
    return bool(getattr(result, "rowcount", 0))


async def get_follow_counts(session: AsyncSession, user_id: str) -> FollowCounts:
    follower_count = select(func.count()).select_from(Follow).where(
        _eq(Follow.following_id, user_id)
    ).scalar_subquery()
    following_count = select(func.count()).select_from(Follow).where(
        _eq(Follow.follower_id, user_id)
    ).scalar_subquery()
    result = await session.execute(select(follower_count, following_count))
    followers, following = result.one()
    return FollowCounts(
        follower_count=int(followers or 0),
        following_count=int(following or 0),
    )


async def list_followed_preview(
    session: AsyncSession,
    user_id: str,
    *,
    limit: int = FOLLOWED_PREVIEW_LIMIT,
) -> list[UserPreview]:
    """Users that ``user_id`` follows, ordered by username."""
    username_column = cast(ColumnElement[str], User.username)
    avatar_column = cast(ColumnElement[str | None], User.profile_pic_url)
    result = await session.execute(
        select(username_column, avatar_column)
        .join(Follow, _eq(Follow.following_id, User.id))
        .where(_eq(Follow.follower_id, user_id))
        .order_by(username_column)
        .limit(limit)
    )
    return [
        UserPreview(username=username, profile_pic_url=avatar)
        for username, avatar in result.all()
    ]


async def list_explore_users(session: AsyncSession, viewer_id: str) -> list[ExploreEntry]:
    """Every other user, ordered by username, flagged with the viewer's follow state."""
    following_flag = exists().where(
        _eq(Follow.follower_id, viewer_id),
        _eq(Follow.following_id, User.id),
    )
    result = await session.execute(
        select(
            cast(ColumnElement[str], User.id),
            cast(ColumnElement[str], User.username),
            cast(ColumnElement[str | None], User.profile_pic_url),
            following_flag.label("is_following"),
        )
        .where(_ne(User.id, viewer_id))
        .order_by(cast(Any, User.username))
    )
    return [
        ExploreEntry(
            id=user_id,
            username=username,
            profile_pic_url=avatar,
            is_following=bool(flag),
        )
        for user_id, username, avatar, flag in result.all()
    ]
