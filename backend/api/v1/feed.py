"""Global feed endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_db, get_followed_preview, get_optional_session
from services.auth import SessionData
from services.follow_graph import UserPreview
from .post_views import FeedPage, build_page, list_feed_posts

router = APIRouter(tags=["feed"])


@router.get("/", response_model=FeedPage)
async def home_feed(
    session: AsyncSession = Depends(get_db),
    session_data: SessionData | None = Depends(get_optional_session),
    followed: list[UserPreview] = Depends(get_followed_preview),
) -> FeedPage:
    """All posts, newest first. Anonymous viewers see no like state."""
    viewer_id = session_data.user_id if session_data is not None else None
    posts = await list_feed_posts(session, viewer_id)
    return FeedPage(posts=posts, **build_page(session_data, followed))
