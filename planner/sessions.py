"""Cookie sessions backed by Redis.

The cookie carries an opaque random token; Redis maps ``session:<token>`` to
the user id and expires it after the configured TTL.
"""

import logging
import secrets

import redis.asyncio as redis

logger = logging.getLogger("planner.sessions")

KEY_PREFIX = "session:"


class SessionStore:
    def __init__(self, client: redis.Redis, ttl_sec: int) -> None:
        self._redis = client
        self._ttl = ttl_sec

    async def create(self, user_id: int) -> str:
        token = secrets.token_urlsafe(32)
        await self._redis.set(f"{KEY_PREFIX}{token}", str(user_id), ex=self._ttl)
        logger.debug("Started session for user=%s", user_id)
        return token

    async def get(self, token: str | None) -> int | None:
        if not token:
            return None
        value = await self._redis.get(f"{KEY_PREFIX}{token}")
        if value is None:
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning("Discarding malformed session value")
            await self.delete(token)
            return None

    async def delete(self, token: str | None) -> None:
        if token:
            await self._redis.delete(f"{KEY_PREFIX}{token}")
