"""In-process message store.

Records live in a dict guarded by a lock, which serializes every transition
the same way Redis' single-threaded execution does. Expired records are
dropped when touched, and every reservation sweeps the ones whose deadline
has passed, using a heap of expiry times.
"""

import heapq
import threading
import time
from collections.abc import Callable

from app.models.message import MessageRecord


class InMemoryMessageStore:
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._records: dict[str, MessageRecord] = {}
        # (expires_at, code); entries go stale when a record is attached or deleted
        self._expiries: list[tuple[float, str]] = []
        self._lock = threading.Lock()

    def _live(self, code: str, now: float) -> MessageRecord | None:
        record = self._records.get(code)
        if record is not None and record.is_expired(now):
            del self._records[code]
            return None
        return record

    def _track(self, code: str, record: MessageRecord) -> None:
        heapq.heappush(self._expiries, (record.expires_at, code))

    def _purge_expired(self, now: float) -> None:
        while self._expiries and self._expiries[0][0] <= now:
            _, code = heapq.heappop(self._expiries)
            record = self._records.get(code)
            if record is not None and record.is_expired(now):
                del self._records[code]

    async def reserve_code(self, code: str, ttl: float) -> bool:
        with self._lock:
            now = self._clock()
            self._purge_expired(now)
            if self._live(code, now) is not None:
                return False
            record = MessageRecord.placeholder(now, ttl)
            self._records[code] = record
            self._track(code, record)
            return True

    async def attach_cipher(self, code: str, payload: str, ttl: float) -> bool:
        with self._lock:
            now = self._clock()
            record = self._live(code, now)
            if record is None or not record.is_placeholder:
                return False
            record.attach(payload, now, ttl)
            self._track(code, record)
            return True

    async def get_and_delete(self, code: str) -> str | None:
        with self._lock:
            record = self._live(code, self._clock())
            if record is None or record.is_placeholder:
                return None
            del self._records[code]
            return record.payload

    async def ping(self) -> None:
        return None

    async def close(self) -> None:
        with self._lock:
            self._records.clear()
            self._expiries.clear()

    def __len__(self) -> int:
        with self._lock:
            now = self._clock()
            return sum(1 for r in self._records.values() if not r.is_expired(now))
