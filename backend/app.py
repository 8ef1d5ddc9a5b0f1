"""FastAPI application factory."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse, Response
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.sessions import SessionMiddleware

from api.v1 import api_router
from core import AppError, InternalError, Unauthorized, settings
from services import AVATARS_FOLDER, UPLOADS_FOLDER
from services.auth import SessionStore, build_session_store
from services.auth.cookies import COOKIE_SECURE

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
OAUTH_STATE_COOKIE = "oauth_state"
REDIRECTABLE_METHODS = frozenset({"GET", "HEAD"})


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _ensure_media_dirs() -> None:
    if settings.storage_backend != "local":
        return
    for folder in (AVATARS_FOLDER, UPLOADS_FOLDER):
        (Path(settings.media_root) / folder).mkdir(parents=True, exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    _ensure_media_dirs()
    logger.info("photofeed started", extra={"app_env": settings.app_env})
    yield


async def handle_app_error(request: Request, exc: Exception) -> Response:
    if not isinstance(exc, AppError):  # pragma: no cover - registered for AppError only
        raise exc
    if isinstance(exc, Unauthorized) and request.method in REDIRECTABLE_METHODS:
        return RedirectResponse(LOGIN_PATH, status_code=status.HTTP_303_SEE_OTHER)
    if isinstance(exc, InternalError):
        logger.error("Request failed: %s", exc.detail, extra={"path": request.url.path})
    return JSONResponse({"detail": exc.detail}, status_code=exc.status_code)


async def handle_unexpected_error(request: Request, exc: Exception) -> Response:
    logger.exception(
        "Unhandled error while serving request",
        extra={"path": request.url.path, "method": request.method},
        exc_info=exc,
    )
    return JSONResponse(
        {"detail": InternalError.default_detail},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def create_app(session_store: SessionStore | None = None) -> FastAPI:
    configure_logging()
    application = FastAPI(title=settings.app_name, lifespan=lifespan)

    application.state.session_store = session_store or build_session_store()

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # Only carries OAuth state between /auth/google and its callback; identity
    # lives in the server-side session store.
    application.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=OAUTH_STATE_COOKIE,
        same_site="lax",
        https_only=COOKIE_SECURE,
    )

    application.add_exception_handler(AppError, handle_app_error)
    application.add_exception_handler(SQLAlchemyError, handle_unexpected_error)
    application.add_exception_handler(OSError, handle_unexpected_error)
    application.add_exception_handler(Exception, handle_unexpected_error)

    application.include_router(api_router)

    @application.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return application
