"""Code lifecycle: reserve -> attach -> retrieve once."""

from dataclasses import dataclass

from app.core.codes import DEFAULT_CODE_LENGTH, generate_code, is_well_formed_code
from app.core.errors import (
    AttachConflictError,
    CodeSpaceExhaustedError,
    MessageNotFoundError,
)
from app.core.logger import logger
from app.core.security import validate_payload
from app.core.storage import MessageStore


@dataclass
class RelayPolicy:
    placeholder_ttl: float
    message_ttl: float
    code_length: int = DEFAULT_CODE_LENGTH
    max_attempts: int = 10
    require_nonce_prefix: bool = False
    nonce_bytes: int = 12


class RelayService:
    """
    Protocol logic on top of a ``MessageStore``.

    Holds no state of its own: every transition is a single atomic store
    call, so concurrent requests for the same code are serialized by the
    store. ``StorageError`` from the store is never retried here.
    """

    def __init__(self, store: MessageStore, policy: RelayPolicy, code_factory=generate_code):
        self.store = store
        self.policy = policy
        self._code_factory = code_factory

    async def issue_code(self) -> str:
        """Reserve a fresh code, retrying on collision up to ``max_attempts`` times."""
        attempts = max(1, self.policy.max_attempts)
        for attempt in range(1, attempts + 1):
            code = self._code_factory(self.policy.code_length)
            if await self.store.reserve_code(code, self.policy.placeholder_ttl):
                return code
            logger.debug("code_collision", extra={"endpoint": "code", "attempt": attempt})
        raise CodeSpaceExhaustedError(f"No free code after {attempts} attempts")

    async def submit_payload(self, code: str, raw_body: bytes) -> None:
        payload = validate_payload(
            raw_body,
            require_nonce_prefix=self.policy.require_nonce_prefix,
            nonce_bytes=self.policy.nonce_bytes,
        )
        # Malformed codes cannot exist in storage; skip the round trip.
        if not is_well_formed_code(code, self.policy.code_length):
            raise AttachConflictError("Code is unknown or already has a message")
        if not await self.store.attach_cipher(code, payload, self.policy.message_ttl):
            raise AttachConflictError("Code is unknown or already has a message")

    async def fetch_payload(self, code: str) -> str:
        if not is_well_formed_code(code, self.policy.code_length):
            raise MessageNotFoundError("Message not found")
        payload = await self.store.get_and_delete(code)
        if payload is None:
            raise MessageNotFoundError("Message not found")
        return payload
