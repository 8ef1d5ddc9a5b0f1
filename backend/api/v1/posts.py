"""Post creation, listing, deletion and like endpoints."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_db, get_followed_preview, require_session
from core import PayloadTooLarge, ValidationFailure, settings
from models import User
from services import UploadTooLargeError, process_image_bytes, read_upload_file
from services import posts as post_service
from services.auth import SessionData
from services.follow_graph import UserPreview
from .post_views import (
    PageResponse,
    PostResponse,
    build_page,
    list_liked_posts,
    list_owner_posts,
)

router = APIRouter(tags=["posts"])


class PostListPage(PageResponse):
    posts: list[PostResponse]


class DeleteResponse(BaseModel):
    detail: str


async def read_image_upload(upload: UploadFile) -> tuple[bytes, str]:
    """Read and normalize an uploaded image, mapping failures to client errors."""
    try:
        data = await read_upload_file(upload, settings.upload_max_bytes)
        return await asyncio.to_thread(process_image_bytes, data)
    except UploadTooLargeError as exc:
        raise PayloadTooLarge(str(exc)) from exc
    except ValueError as exc:
        raise ValidationFailure(str(exc)) from exc


def _normalize_caption(caption: str | None) -> str | None:
    if caption is None:
        return None
    return caption.strip() or None


@router.post("/posts", status_code=status.HTTP_201_CREATED, response_model=PostResponse)
async def create_post(
    image: UploadFile = File(...),
    caption: str | None = Form(default=None),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> PostResponse:
    processed_bytes, content_type = await read_image_upload(image)
    post = await post_service.create_post(
        session,
        owner=current_user,
        caption=_normalize_caption(caption),
        image_bytes=processed_bytes,
        content_type=content_type,
    )
    return PostResponse.from_post(post, current_user.profile_pic_url)


@router.get("/myposts", response_model=PostListPage)
async def my_posts(
    session: AsyncSession = Depends(get_db),
    session_data: SessionData = Depends(require_session),
    followed: list[UserPreview] = Depends(get_followed_preview),
) -> PostListPage:
    posts = await list_owner_posts(session, session_data.user_id)
    return PostListPage(posts=posts, **build_page(session_data, followed))


@router.post("/posts/{post_id}/delete", response_model=DeleteResponse)
async def delete_post(
    post_id: int,
    session: AsyncSession = Depends(get_db),
    session_data: SessionData = Depends(require_session),
) -> DeleteResponse:
    deleted = await post_service.delete_post(
        session,
        owner_id=session_data.user_id,
        post_id=post_id,
    )
    return DeleteResponse(detail="Deleted" if deleted else "Nothing to delete")


@router.post("/posts/{post_id}/like", status_code=status.HTTP_200_OK)
async def toggle_like(
    post_id: int,
    session: AsyncSession = Depends(get_db),
    session_data: SessionData = Depends(require_session),
) -> Response:
    await post_service.toggle_like(session, user_id=session_data.user_id, post_id=post_id)
    return Response(status_code=status.HTTP_200_OK)


@router.get("/liked", response_model=PostListPage)
async def liked_posts(
    session: AsyncSession = Depends(get_db),
    session_data: SessionData = Depends(require_session),
    followed: list[UserPreview] = Depends(get_followed_preview),
) -> PostListPage:
    posts = await list_liked_posts(session, session_data.user_id)
    return PostListPage(posts=posts, **build_page(session_data, followed))
