"""Server-side session records kept in Redis and keyed by an opaque cookie id."""

from __future__ import annotations

import hashlib
import json
import logging
import secrets
from dataclasses import asdict, dataclass
from functools import lru_cache
from typing import Protocol, runtime_checkable

from redis.asyncio import Redis

from core import settings

logger = logging.getLogger(__name__)

SESSION_ID_BYTES = 32


@runtime_checkable
class SupportsSessionClient(Protocol):
    async def get(self, key: str) -> str | bytes | None: ...

    async def set(self, key: str, value: str, ex: int | None = None) -> object: ...

    async def delete(self, *keys: str) -> int: ...


@dataclass(frozen=True)
class SessionData:
    """Identity carried by a logged-in session."""

    user_id: str
    username: str


def hash_session_id(session_id: str) -> str:
    return hashlib.sha256(session_id.encode("utf-8")).hexdigest()


class SessionStore:
    """Create, load and destroy sessions.

    Only the SHA-256 of the cookie value is used as the Redis key, so a
    leaked keyspace dump cannot be replayed as cookies.
    """

    def __init__(
        self,
        redis_client: SupportsSessionClient,
        ttl_seconds: int,
        prefix: str = "session",
    ) -> None:
        self.redis = redis_client
        self.ttl_seconds = max(ttl_seconds, 1)
        self.prefix = prefix

    def _key(self, session_id: str) -> str:
        return f"{self.prefix}:{hash_session_id(session_id)}"

    async def create(self, *, user_id: str, username: str) -> str:
        session_id = secrets.token_urlsafe(SESSION_ID_BYTES)
        payload = json.dumps(asdict(SessionData(user_id=user_id, username=username)))
        await self.redis.set(self._key(session_id), payload, ex=self.ttl_seconds)
        return session_id

    async def load(self, session_id: str | None) -> SessionData | None:
        if not session_id:
            return None
        raw = await self.redis.get(self._key(session_id))
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable session record")
            return None
        user_id = payload.get("user_id")
        if not user_id:
            return None
        return SessionData(user_id=str(user_id), username=str(payload.get("username") or ""))

    async def destroy(self, session_id: str | None) -> None:
        if not session_id:
            return
        await self.redis.delete(self._key(session_id))


@lru_cache
def get_redis_client() -> Redis:
    """Return a cached async Redis client."""
    return Redis.from_url(settings.redis_url, decode_responses=True)


def build_session_store() -> SessionStore:
    return SessionStore(
        redis_client=get_redis_client(),
        ttl_seconds=settings.session_ttl_seconds,
    )
