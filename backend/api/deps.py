"""Request-scoped dependencies: database session, session store and identity."""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from core import Unauthorized
from db.session import get_session
from models import User
from services.auth import SessionData, SessionStore, session_cookie_name
from services.follow_graph import UserPreview, list_followed_preview


async def get_db() -> AsyncIterator[AsyncSession]:
    async for session in get_session():
        yield session


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_session_id(request: Request) -> str | None:
    return request.cookies.get(session_cookie_name())


async def get_optional_session(
    session_id: str | None = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
) -> SessionData | None:
    return await store.load(session_id)


async def require_session(
    session_data: SessionData | None = Depends(get_optional_session),
) -> SessionData:
    """Allow the request only when it carries a live session."""
    if session_data is None or not session_data.user_id:
        raise Unauthorized("Login required")
    return session_data


async def get_current_user(
    session_data: SessionData = Depends(require_session),
    session: AsyncSession = Depends(get_db),
) -> User:
    user = await session.get(User, session_data.user_id)
    if user is None:
        # The account behind a still-live session no longer exists.
        raise Unauthorized("Login required")
    return user


async def get_followed_preview(
    session_data: SessionData | None = Depends(get_optional_session),
    session: AsyncSession = Depends(get_db),
) -> list[UserPreview]:
    if session_data is None:
        return []
    return await list_followed_preview(session, session_data.user_id)
