"""Domain errors raised by the relay core and mapped to HTTP status codes by the routes."""


class RelayError(Exception):
    """Base class for relay errors."""


class StorageError(RelayError):
    """The storage backend failed (connectivity, protocol, timeout)."""


class CodeSpaceExhaustedError(RelayError):
    """No free code could be reserved within the configured number of attempts."""


class InvalidPayloadError(RelayError):
    """Request payload is empty, oversized or malformed."""


class AttachConflictError(RelayError):
    """Code is unknown, expired or already carries a payload."""


class MessageNotFoundError(RelayError):
    """No attached payload exists for the code."""
