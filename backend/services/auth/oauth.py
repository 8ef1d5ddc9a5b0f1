"""Google OAuth client and identity extraction."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from authlib.integrations.starlette_client import OAuth
from starlette.requests import Request

from core import settings

GOOGLE_SCOPE = "openid profile"

oauth = OAuth()
oauth.register(
    name="google",
    server_metadata_url=settings.google_server_metadata_url,
    client_id=settings.google_client_id,
    client_secret=settings.google_client_secret,
    client_kwargs={"scope": GOOGLE_SCOPE},
)


class OAuthExchangeError(Exception):
    """The provider handshake failed or returned no usable identity."""


@dataclass(frozen=True)
class GoogleIdentity:
    google_id: str
    display_name: str | None
    avatar_url: str | None


def identity_from_userinfo(userinfo: dict[str, Any]) -> GoogleIdentity:
    subject = userinfo.get("sub")
    if not subject:
        raise OAuthExchangeError("Provider response is missing a subject")
    return GoogleIdentity(
        google_id=str(subject),
        display_name=userinfo.get("name"),
        avatar_url=userinfo.get("picture"),
    )


async def authorize_redirect(request: Request, redirect_uri: str) -> Any:
    return await oauth.google.authorize_redirect(request, redirect_uri)


async def fetch_google_identity(request: Request) -> GoogleIdentity:
    """Exchange the callback code for tokens and read the OpenID userinfo."""
    try:
        token = await oauth.google.authorize_access_token(request)
    except Exception as exc:
        raise OAuthExchangeError("Google token exchange failed") from exc

    userinfo = token.get("userinfo")
    if not userinfo:
        try:
            userinfo = await oauth.google.userinfo(token=token)
        except Exception as exc:
            raise OAuthExchangeError("Google userinfo request failed") from exc
    return identity_from_userinfo(dict(userinfo))
