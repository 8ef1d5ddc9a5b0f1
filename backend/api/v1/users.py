"""Profile, explore and follow endpoints."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, ConfigDict
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_db, get_followed_preview, require_session
from core import NotFound
from models import Post, User
from services import AVATARS_FOLDER, delete_media, save_media
from services import follow_graph
from services.auth import SessionData, find_user_by_username
from services.follow_graph import UserPreview
from .auth import profile_path
from .post_views import PageResponse, build_page
from .posts import read_image_upload

router = APIRouter(tags=["users"])
logger = logging.getLogger(__name__)


class UserProfile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    bio: str | None = None
    profile_pic_url: str | None = None


class ProfilePostSummary(BaseModel):
    id: int
    image_url: str


class ProfilePage(PageResponse):
    user: UserProfile
    posts: list[ProfilePostSummary]
    is_owner: bool
    follower_count: int
    following_count: int


class ExploreUser(BaseModel):
    id: str
    username: str
    profile_pic_url: str | None = None
    is_following: bool


class ExplorePage(PageResponse):
    users: list[ExploreUser]


class FollowMutationResponse(BaseModel):
    detail: str
    is_following: bool


async def _require_user(session: AsyncSession, username: str) -> User:
    user = await find_user_by_username(session, username)
    if user is None:
        raise NotFound("User not found")
    return user


@router.get("/profile")
async def my_profile(session_data: SessionData = Depends(require_session)) -> RedirectResponse:
    return RedirectResponse(profile_path(session_data.username), status_code=status.HTTP_303_SEE_OTHER)


@router.get("/profile/{username}", response_model=ProfilePage)
async def get_profile(
    username: str,
    session: AsyncSession = Depends(get_db),
    session_data: SessionData = Depends(require_session),
    followed: list[UserPreview] = Depends(get_followed_preview),
) -> ProfilePage:
    user = await _require_user(session, username)

    post_result = await session.execute(
        select(Post.id, Post.image_url)
        .where(Post.user_id == user.id)
        .order_by(Post.created_at.desc(), Post.id.desc())  # type: ignore[attr-defined]
    )
    posts = [
        ProfilePostSummary(id=post_id, image_url=image_url)
        for post_id, image_url in post_result.all()
    ]
    counts = await follow_graph.get_follow_counts(session, user.id)

    return ProfilePage(
        user=UserProfile.model_validate(user),
        posts=posts,
        is_owner=session_data.user_id == user.id,
        follower_count=counts.follower_count,
        following_count=counts.following_count,
        **build_page(session_data, followed),
    )


@router.post("/profile/edit", response_model=UserProfile)
async def edit_profile(
    request: Request,
    bio: str | None = Form(default=None),
    avatar: UploadFile | None = File(default=None),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UserProfile:
    """Partially update bio and avatar; fields left out are untouched."""
    updated = False
    uploaded_avatar_url: str | None = None
    previous_avatar_url = current_user.profile_pic_url

    # An empty form value arrives as None, so presence is read from the raw form.
    form = await request.form()
    if "bio" in form:
        current_user.bio = (bio or "").strip()
        updated = True

    if avatar is not None and avatar.filename:
        processed_bytes, content_type = await read_image_upload(avatar)
        uploaded_avatar_url = await asyncio.to_thread(
            save_media,
            AVATARS_FOLDER,
            processed_bytes,
            content_type=content_type,
        )
        current_user.profile_pic_url = uploaded_avatar_url
        updated = True

    if not updated:
        return UserProfile.model_validate(current_user)

    session.add(current_user)
    try:
        await session.commit()
    except Exception:
        await session.rollback()
        if uploaded_avatar_url is not None:
            try:
                await asyncio.to_thread(delete_media, uploaded_avatar_url)
            except OSError as cleanup_error:
                logger.warning(
                    "Failed to cleanup uploaded avatar after profile update commit failure",
                    extra={"avatar_url": uploaded_avatar_url},
                    exc_info=cleanup_error,
                )
        raise
    await session.refresh(current_user)

    if (
        uploaded_avatar_url is not None
        and previous_avatar_url is not None
        and previous_avatar_url != uploaded_avatar_url
    ):
        try:
            await asyncio.to_thread(delete_media, previous_avatar_url)
        except OSError as cleanup_error:
            logger.warning(
                "Failed to cleanup replaced avatar after profile update",
                extra={"avatar_url": previous_avatar_url},
                exc_info=cleanup_error,
            )

    return UserProfile.model_validate(current_user)


@router.get("/explore", response_model=ExplorePage)
async def explore(
    session: AsyncSession = Depends(get_db),
    session_data: SessionData = Depends(require_session),
    followed: list[UserPreview] = Depends(get_followed_preview),
) -> ExplorePage:
    entries = await follow_graph.list_explore_users(session, session_data.user_id)
    return ExplorePage(
        users=[
            ExploreUser(
                id=entry.id,
                username=entry.username,
                profile_pic_url=entry.profile_pic_url,
                is_following=entry.is_following,
            )
            for entry in entries
        ],
        **build_page(session_data, followed),
    )


@router.post("/follow/{username}", response_model=FollowMutationResponse)
async def follow_user(
    username: str,
    session: AsyncSession = Depends(get_db),
    session_data: SessionData = Depends(require_session),
) -> FollowMutationResponse:
    target = await _require_user(session, username)
    created = await follow_graph.follow(
        session,
        follower_id=session_data.user_id,
        following_id=target.id,
    )
    return FollowMutationResponse(
        detail="Followed" if created else "Already following",
        is_following=True,
    )


@router.post("/unfollow/{username}", response_model=FollowMutationResponse)
async def unfollow_user(
    username: str,
    session: AsyncSession = Depends(get_db),
    session_data: SessionData = Depends(require_session),
) -> FollowMutationResponse:
    target = await _require_user(session, username)
    removed = await follow_graph.unfollow(
        session,
        follower_id=session_data.user_id,
        following_id=target.id,
    )
    return FollowMutationResponse(
        detail="Unfollowed" if removed else "Not following",
        is_following=False,
    )
