"""Redis-backed message store.

Placeholders are stored as empty strings; attached records hold the payload
text, which is never empty. Redis executes each command and Lua script
atomically, which gives the per-code guarantees of the storage contract
without any locking on our side.
"""

from __future__ import annotations

import redis.asyncio as redis
from redis.exceptions import RedisError

from app.core.config import Settings
from app.core.errors import StorageError
from app.core.logger import logger

PLACEHOLDER = ""

# KEYS[1] = code key, ARGV[1] = payload, ARGV[2] = ttl in ms, ARGV[3] = placeholder
ATTACH_SCRIPT = """
local current = redis.call('GET', KEYS[1])
if current ~= ARGV[3] then
    return 0
end
redis.call('SET', KEYS[1], ARGV[1], 'PX', ARGV[2])
return 1
"""

# KEYS[1] = code key, ARGV[1] = placeholder
GET_AND_DELETE_SCRIPT = """
local current = redis.call('GET', KEYS[1])
if not current or current == ARGV[1] then
    return false
end
redis.call('DEL', KEYS[1])
return current
"""


def _ttl_ms(ttl: float) -> int:
    return max(1, int(ttl * 1000))


class RedisMessageStore:
    def __init__(self, client: redis.Redis, key_prefix: str = "msg:"):
        self._client = client
        self._prefix = key_prefix
        self._attach = client.register_script(ATTACH_SCRIPT)
        self._get_and_delete = client.register_script(GET_AND_DELETE_SCRIPT)

    @classmethod
    def from_settings(cls, settings: Settings) -> RedisMessageStore:
        client = redis.from_url(settings.REDIS_URL, decode_responses=True)
        return cls(client, key_prefix=settings.REDIS_KEY_PREFIX)

    def _key(self, code: str) -> str:
        return self._prefix + code

    async def reserve_code(self, code: str, ttl: float) -> bool:
        try:
            created = await self._client.set(
                self._key(code), PLACEHOLDER, nx=True, px=_ttl_ms(ttl)
            )
        except RedisError as exc:
            raise StorageError(f"reserve failed: {exc}") from exc
        return bool(created)

    async def attach_cipher(self, code: str, payload: str, ttl: float) -> bool:
        try:
            attached = await self._attach(
                keys=[self._key(code)], args=[payload, _ttl_ms(ttl), PLACEHOLDER]
            )
        except RedisError as exc:
            raise StorageError(f"attach failed: {exc}") from exc
        return int(attached) == 1

    async def get_and_delete(self, code: str) -> str | None:
        try:
            payload = await self._get_and_delete(
                keys=[self._key(code)], args=[PLACEHOLDER]
            )
        except RedisError as exc:
            raise StorageError(f"get_and_delete failed: {exc}") from exc
        if payload is None:
            return None
        if isinstance(payload, bytes):
            payload = payload.decode()
        return payload

    async def ping(self) -> None:
        try:
            await self._client.ping()
        except RedisError as exc:
            raise StorageError(f"ping failed: {exc}") from exc

    async def close(self) -> None:
        try:
            await self._client.aclose()
        except RedisError as exc:
            logger.warning("Redis close failed", extra={"error": str(exc)})
