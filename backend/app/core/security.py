"""Payload checks and defensive response headers.

The relay never decrypts anything. Clients send the ciphertext as
base64(nonce || ciphertext); the server only looks at the envelope.
"""

import base64
import binascii

from app.core.errors import InvalidPayloadError

SECURITY_HEADERS = {
    "Cache-Control": "no-store",
    "Pragma": "no-cache",
    "Referrer-Policy": "no-referrer",
    "X-Content-Type-Options": "nosniff",
}


def decode_body(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidPayloadError("Payload must be UTF-8 text") from exc


def validate_payload(
    raw: bytes,
    require_nonce_prefix: bool = False,
    nonce_bytes: int = 12,
) -> str:
    """Return the trimmed payload text or raise ``InvalidPayloadError``.

    With ``require_nonce_prefix`` the payload must be standard base64 that
    decodes to a ``nonce_bytes`` nonce followed by at least one ciphertext byte.
    """
    payload = decode_body(raw).strip()
    if not payload:
        raise InvalidPayloadError("Payload is empty")

    if require_nonce_prefix:
        try:
            decoded = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise InvalidPayloadError("Payload is not valid base64") from exc
        if len(decoded) <= nonce_bytes:
            raise InvalidPayloadError("Payload is shorter than the nonce prefix")

    return payload
