"""Signup, login, logout and Google sign-in endpoints."""

from __future__ import annotations

import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, Form, Request, Response, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_db, get_session_id, get_session_store
from core import InvalidCredentials
from models import User
from services.auth import (
    OAuthExchangeError,
    SessionStore,
    authorize_redirect,
    clear_session_cookie,
    fetch_google_identity,
    register_local_user,
    resolve_login_user,
    resolve_oauth_user,
    set_session_cookie,
)

router = APIRouter(tags=["auth"])
logger = logging.getLogger(__name__)

MAX_USERNAME_LENGTH = 255
MAX_PASSWORD_LENGTH = 128


class AuthUserResponse(BaseModel):
    id: str
    username: str


class FormHint(BaseModel):
    detail: str
    fields: list[str]


def profile_path(username: str) -> str:
    return f"/profile/{quote(username, safe='')}"


async def _start_session(
    response: Response,
    store: SessionStore,
    user: User,
    *,
    previous_session_id: str | None,
) -> None:
    # Never reuse a pre-login session id.
    await store.destroy(previous_session_id)
    session_id = await store.create(user_id=user.id, username=user.username)
    set_session_cookie(response, session_id)


@router.get("/signup", response_model=FormHint)
async def signup_form() -> FormHint:
    return FormHint(detail="POST username and password to sign up", fields=["username", "password"])


@router.post("/signup", status_code=status.HTTP_201_CREATED, response_model=AuthUserResponse)
async def signup(
    username: str = Form(..., min_length=1, max_length=MAX_USERNAME_LENGTH),
    password: str = Form(..., min_length=1, max_length=MAX_PASSWORD_LENGTH),
    session: AsyncSession = Depends(get_db),
) -> AuthUserResponse:
    user = await register_local_user(session, username=username.strip(), password=password)
    logger.info("User signed up", extra={"user_id": user.id})
    return AuthUserResponse(id=user.id, username=user.username)


@router.get("/login", response_model=FormHint)
async def login_form() -> FormHint:
    return FormHint(detail="POST username and password to log in", fields=["username", "password"])


@router.post("/login", response_model=AuthUserResponse)
async def login(
    response: Response,
    username: str = Form(..., min_length=1, max_length=MAX_USERNAME_LENGTH),
    password: str = Form(..., min_length=1, max_length=MAX_PASSWORD_LENGTH),
    session: AsyncSession = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
    previous_session_id: str | None = Depends(get_session_id),
) -> AuthUserResponse:
    user = await resolve_login_user(session, username=username.strip(), password=password)
    if user is None:
        logger.info("Rejected login attempt")
        raise InvalidCredentials()

    await _start_session(response, store, user, previous_session_id=previous_session_id)
    logger.info("User logged in", extra={"user_id": user.id})
    return AuthUserResponse(id=user.id, username=user.username)


@router.get("/logout")
async def logout(
    store: SessionStore = Depends(get_session_store),
    session_id: str | None = Depends(get_session_id),
) -> RedirectResponse:
    await store.destroy(session_id)
    redirect = RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)
    clear_session_cookie(redirect)
    return redirect


@router.get("/auth/google")
async def google_login(request: Request) -> Response:
    redirect_uri = request.url_for("google_callback")
    return await authorize_redirect(request, str(redirect_uri))


@router.get("/auth/google/callback", name="google_callback")
async def google_callback(
    request: Request,
    session: AsyncSession = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
    previous_session_id: str | None = Depends(get_session_id),
) -> RedirectResponse:
    try:
        identity = await fetch_google_identity(request)
    except OAuthExchangeError as exc:
        logger.warning("Google sign-in failed", exc_info=exc)
        return RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)

    user = await resolve_oauth_user(
        session,
        google_id=identity.google_id,
        display_name=identity.display_name,
        avatar_url=identity.avatar_url,
    )
    redirect = RedirectResponse(profile_path(user.username), status_code=status.HTTP_303_SEE_OTHER)
    await _start_session(redirect, store, user, previous_session_id=previous_session_id)
    return redirect
