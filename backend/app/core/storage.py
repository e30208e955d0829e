"""Storage contract for the code lifecycle.

Every operation must be atomic per code. The relay holds no locks of its
own, so the placeholder -> attached -> deleted transitions are only race-free
if the backend honours these guarantees.
"""

from typing import Protocol

from app.core.config import Settings
from app.core.errors import StorageError

__all__ = ["MessageStore", "StorageError", "build_store"]


class MessageStore(Protocol):
    async def reserve_code(self, code: str, ttl: float) -> bool:
        """Create a placeholder iff no record exists. False on collision."""

    async def attach_cipher(self, code: str, payload: str, ttl: float) -> bool:
        """Turn a placeholder into an attached record with a fresh TTL.

        False, without mutating anything, if the code is unknown or already
        attached.
        """

    async def get_and_delete(self, code: str) -> str | None:
        """Remove and return an attached payload, None if absent or placeholder."""

    async def ping(self) -> None:
        """Raise StorageError if the backend is unreachable."""

    async def close(self) -> None:
        """Release backend resources."""


def build_store(settings: Settings) -> MessageStore:
    """Construct the backend selected by ``STORAGE_BACKEND``."""
    backend = settings.STORAGE_BACKEND.lower()
    if backend == "memory":
        from app.core.memory_store import InMemoryMessageStore

        return InMemoryMessageStore()
    if backend == "redis":
        from app.core.redis_store import RedisMessageStore

        return RedisMessageStore.from_settings(settings)
    raise ValueError(f"Unknown storage backend: {settings.STORAGE_BACKEND}")
