"""Token-bucket admission control."""

import asyncio
import contextlib

from app.core.logger import logger


class TokenBucket:
    """
    Token bucket backed by a bounded queue.

    The queue holds at most ``burst`` tokens and starts full. A background
    task adds one token every ``1 / rate`` seconds; tokens produced while the
    bucket is full are dropped. ``try_acquire`` never waits.

    A non-positive ``rate`` disables limiting entirely.
    """

    def __init__(self, rate: float, burst: int):
        self.rate = rate
        self.burst = max(1, burst)
        self._tokens: asyncio.Queue[None] = asyncio.Queue(maxsize=self.burst)
        self._refill_task: asyncio.Task | None = None
        if self.enabled:
            for _ in range(self.burst):
                self._tokens.put_nowait(None)

    @property
    def enabled(self) -> bool:
        return self.rate > 0

    @property
    def available(self) -> int:
        return self._tokens.qsize()

    def try_acquire(self) -> bool:
        """Take one token if available."""
        if not self.enabled:
            return True
        try:
            self._tokens.get_nowait()
        except asyncio.QueueEmpty:
            return False
        return True

    def refill(self) -> None:
        """Add a single token, dropping it if the bucket is full."""
        with contextlib.suppress(asyncio.QueueFull):
            self._tokens.put_nowait(None)

    async def _run(self) -> None:
        interval = 1.0 / self.rate
        while True:
            await asyncio.sleep(interval)
            self.refill()

    def start(self) -> None:
        """Start the refill task on the running loop."""
        if not self.enabled or self._refill_task is not None:
            return
        self._refill_task = asyncio.create_task(self._run(), name="token-bucket-refill")
        logger.debug(
            "Rate limiter started", extra={"rate": self.rate, "burst": self.burst}
        )

    async def stop(self) -> None:
        task, self._refill_task = self._refill_task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
