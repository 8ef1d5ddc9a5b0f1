"""Local credential checks and Google identity find-or-create."""

from __future__ import annotations

import logging
from typing import Any, cast

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from core import Conflict, hash_password, needs_rehash, settings, verify_password
from db.errors import is_unique_violation
from models import User

logger = logging.getLogger(__name__)


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


async def find_user_by_username(session: AsyncSession, username: str) -> User | None:
    result = await session.execute(select(User).where(_eq(User.username, username)).limit(1))
    return result.scalar_one_or_none()


async def find_user_by_google_id(session: AsyncSession, google_id: str) -> User | None:
    result = await session.execute(select(User).where(_eq(User.google_id, google_id)).limit(1))
    return result.scalar_one_or_none()


async def register_local_user(
    session: AsyncSession,
    *,
    username: str,
    password: str,
) -> User:
    """Insert a username/password account. Raises Conflict on a taken username."""
    user = User(username=username, password_hash=hash_password(password))
    session.add(user)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if is_unique_violation(exc):
            raise Conflict("Username already taken") from exc
        raise
    return user


async def resolve_login_user(
    session: AsyncSession,
    *,
    username: str,
    password: str,
) -> User | None:
    """Return the user when the password matches, else None.

    Unknown usernames, OAuth-only accounts and wrong passwords all return None.
    """
    user = await find_user_by_username(session, username)
    if user is None or not verify_password(password, user.password_hash):
        return None

    if needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        session.add(user)
        await session.commit()
    return user


def _fallback_username(google_id: str) -> str:
    return f"google_{google_id}"


async def resolve_oauth_user(
    session: AsyncSession,
    *,
    google_id: str,
    display_name: str | None,
    avatar_url: str | None = None,
    merge_on_username_conflict: bool | None = None,
) -> User:
    """Find the user bound to ``google_id`` or create one.

    When the display name is already taken by another row, the Google id is
    attached to that row if merging is enabled, otherwise Conflict is raised.
    """
    existing = await find_user_by_google_id(session, google_id)
    if existing is not None:
        return existing

    merge = (
        settings.oauth_merge_on_username_conflict
        if merge_on_username_conflict is None
        else merge_on_username_conflict
    )
    username = (display_name or "").strip() or _fallback_username(google_id)
    user = User(username=username, google_id=google_id, profile_pic_url=avatar_url)
    session.add(user)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if not is_unique_violation(exc):
            raise

        # A concurrent callback for the same Google account may have won.
        existing = await find_user_by_google_id(session, google_id)
        if existing is not None:
            return existing
        if not merge:
            raise Conflict("Username already taken") from exc

        namesake = await find_user_by_username(session, username)
        if namesake is None:
            raise
        namesake.google_id = google_id
        if avatar_url is not None:
            namesake.profile_pic_url = avatar_url
        session.add(namesake)
        await session.commit()
        logger.warning(
            "Attached Google identity to existing account sharing its display name",
            extra={"user_id": namesake.id, "username": namesake.username},
        )
        return namesake

    logger.info("Created user from Google sign-in", extra={"user_id": user.id})
    return user
