"""Authentication domain services."""

from .cookies import (
    clear_session_cookie,
    session_cookie_name,
    set_session_cookie,
)
from .identity_resolution import (
    find_user_by_google_id,
    find_user_by_username,
    register_local_user,
    resolve_login_user,
    resolve_oauth_user,
)
from .oauth import (
    GoogleIdentity,
    OAuthExchangeError,
    authorize_redirect,
    fetch_google_identity,
    identity_from_userinfo,
)
from .session_store import (
    SessionData,
    SessionStore,
    build_session_store,
    get_redis_client,
    hash_session_id,
)

__all__ = [
    "clear_session_cookie",
    "session_cookie_name",
    "set_session_cookie",
    "find_user_by_google_id",
    "find_user_by_username",
    "register_local_user",
    "resolve_login_user",
    "resolve_oauth_user",
    "GoogleIdentity",
    "OAuthExchangeError",
    "authorize_redirect",
    "fetch_google_identity",
    "identity_from_userinfo",
    "SessionData",
    "SessionStore",
    "build_session_store",
    "get_redis_client",
    "hash_session_id",
]
