"""Shared post/feed view models and query helpers."""

from __future__ import annotations

from datetime import datetime
from typing import Any, cast

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from models import Like, Post, User
from services.auth import SessionData
from services.follow_graph import UserPreview


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def _desc(column: Any) -> Any:
    return cast(Any, column).desc()


class ViewerResponse(BaseModel):
    id: str
    username: str


class FollowedUserResponse(BaseModel):
    username: str
    profile_pic_url: str | None = None


class PageResponse(BaseModel):
    """Fields every page view carries: who is looking and whom they follow."""

    viewer: ViewerResponse | None = None
    followed_users: list[FollowedUserResponse] = []


class PostResponse(BaseModel):
    id: int
    user_id: str
    username: str
    caption: str | None = None
    image_url: str
    created_at: datetime
    profile_pic_url: str | None = None
    like_count: int = 0
    user_liked: bool = False

    @classmethod
    def from_post(
        cls,
        post: Post,
        profile_pic_url: str | None = None,
        *,
        like_count: int = 0,
        user_liked: bool = False,
    ) -> "PostResponse":
        if post.id is None:
            raise ValueError("Post record missing identifier")
        return cls(
            id=post.id,
            user_id=post.user_id,
            username=post.username,
            caption=post.caption,
            image_url=post.image_url,
            created_at=post.created_at,
            profile_pic_url=profile_pic_url,
            like_count=like_count,
            user_liked=user_liked,
        )


class FeedPage(PageResponse):
    posts: list[PostResponse]


PostRow = tuple[Post, str | None]


def build_page(
    session_data: SessionData | None,
    followed: list[UserPreview],
) -> dict[str, Any]:
    viewer = (
        ViewerResponse(id=session_data.user_id, username=session_data.username)
        if session_data is not None
        else None
    )
    return {
        "viewer": viewer,
        "followed_users": [
            FollowedUserResponse(username=item.username, profile_pic_url=item.profile_pic_url)
            for item in followed
        ],
    }


async def collect_like_meta(
    session: AsyncSession,
    post_ids: list[int],
    viewer_id: str | None,
) -> tuple[dict[int, int], set[int]]:
    if not post_ids:
        return {}, set()

    post_id_column = cast(ColumnElement[int], Like.post_id)
    user_id_column = cast(ColumnElement[str], Like.user_id)
    count_column = cast(Any, func.count(user_id_column))
    count_result = await session.execute(
        select(post_id_column, count_column)
        .where(post_id_column.in_(post_ids))
        .group_by(post_id_column)
    )
    count_map = {post_id: int(total) for post_id, total in count_result.all()}

    if viewer_id is None:
        return count_map, set()

    viewer_result = await session.execute(
        select(post_id_column).where(
            _eq(user_id_column, viewer_id),
            post_id_column.in_(post_ids),
        )
    )
    liked_set = {row[0] for row in viewer_result.all()}
    return count_map, liked_set


async def build_post_responses(
    session: AsyncSession,
    rows: list[PostRow],
    viewer_id: str | None,
) -> list[PostResponse]:
    post_ids = [post.id for post, _avatar in rows if post.id is not None]
    count_map, liked_set = await collect_like_meta(session, post_ids, viewer_id)
    return [
        PostResponse.from_post(
            post,
            avatar,
            like_count=count_map.get(post.id, 0) if post.id is not None else 0,
            user_liked=post.id in liked_set if post.id is not None else False,
        )
        for post, avatar in rows
    ]


def _post_with_avatar_query() -> Any:
    post_entity = cast(Any, Post)
    avatar_column = cast(ColumnElement[str | None], User.profile_pic_url)
    return (
        select(post_entity, avatar_column)
        .join(User, _eq(User.id, Post.user_id))
        .order_by(
            _desc(Post.created_at),
            _desc(Post.id),
        )
    )


async def list_feed_posts(
    session: AsyncSession,
    viewer_id: str | None,
) -> list[PostResponse]:
    """Every post, newest first, annotated for ``viewer_id`` (None for anonymous)."""
    result = await session.execute(_post_with_avatar_query())
    rows = cast(list[PostRow], list(result.all()))
    return await build_post_responses(session, rows, viewer_id)


async def list_owner_posts(
    session: AsyncSession,
    owner_id: str,
) -> list[PostResponse]:
    result = await session.execute(
        _post_with_avatar_query().where(_eq(Post.user_id, owner_id))
    )
    rows = cast(list[PostRow], list(result.all()))
    return await build_post_responses(session, rows, owner_id)


async def list_liked_posts(
    session: AsyncSession,
    viewer_id: str,
) -> list[PostResponse]:
    result = await session.execute(
        _post_with_avatar_query()
        .join(Like, _eq(Like.post_id, Post.id))
        .where(_eq(Like.user_id, viewer_id))
    )
    rows = cast(list[PostRow], list(result.all()))
    return await build_post_responses(session, rows, viewer_id)
