from __future__ import annotations

from dataclasses import dataclass


@dataclass
class MessageRecord:
    """Storage-side record for one code.

    A record without payload is a placeholder (code reserved, nothing attached
    yet). ``expires_at`` is an absolute timestamp on the store's clock.
    """

    expires_at: float
    payload: str | None = None

    @property
    def is_placeholder(self) -> bool:
        return self.payload is None

    def is_expired(self, now: float) -> bool:
        """Check if record has expired."""
        return now >= self.expires_at

    @staticmethod
    def placeholder(now: float, ttl: float) -> MessageRecord:
        return MessageRecord(expires_at=now + ttl)

    def attach(self, payload: str, now: float, ttl: float) -> None:
        """Store the payload and restart the TTL from ``now``."""
        self.payload = payload
        self.expires_at = now + ttl
