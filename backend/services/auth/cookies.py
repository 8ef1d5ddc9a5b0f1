"""HTTP cookie helpers for the session id."""

from __future__ import annotations

from typing import Literal

from fastapi import Response

from core import settings

COOKIE_PATH = "/"
COOKIE_SAMESITE: Literal["lax", "strict", "none"] = "lax"
COOKIE_SECURE = (
    settings.app_env.strip().lower() not in {"local", "test"}
    and not settings.allow_insecure_http_cookies
)


def session_cookie_name() -> str:
    return settings.session_cookie_name


def set_session_cookie(response: Response, session_id: str) -> None:
    response.set_cookie(
        key=session_cookie_name(),
        value=session_id,
        httponly=True,
        secure=COOKIE_SECURE,
        samesite=COOKIE_SAMESITE,
        max_age=settings.session_ttl_seconds,
        path=COOKIE_PATH,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=session_cookie_name(),
        path=COOKIE_PATH,
        secure=COOKIE_SECURE,
        samesite=COOKIE_SAMESITE,
    )
