import base64

import pytest

from app.core.errors import InvalidPayloadError
from app.core.security import validate_payload


@pytest.mark.parametrize("raw", [b"", b"   ", b"\n\t \r\n"])
def test_empty_or_whitespace_rejected(raw):
    with pytest.raises(InvalidPayloadError):
        validate_payload(raw)


def test_payload_is_trimmed():
    assert validate_payload(b"  hello \n") == "hello"


def test_non_utf8_rejected():
    with pytest.raises(InvalidPayloadError):
        validate_payload(b"\xff\xfe\x00")


def test_lenient_mode_accepts_any_text():
    assert validate_payload(b"%%%") == "%%%"


def test_strict_mode_accepts_nonce_plus_ciphertext():
    body = base64.b64encode(bytes(12) + b"abc")
    assert validate_payload(body, require_nonce_prefix=True) == body.decode()


def test_strict_mode_rejects_bad_base64():
    with pytest.raises(InvalidPayloadError):
        validate_payload(b"%%%", require_nonce_prefix=True)


def test_strict_mode_rejects_payload_without_ciphertext():
    body = base64.b64encode(b"short")
    with pytest.raises(InvalidPayloadError):
        validate_payload(body, require_nonce_prefix=True)
    with pytest.raises(InvalidPayloadError):
        validate_payload(base64.b64encode(bytes(12)), require_nonce_prefix=True)


def test_strict_mode_honours_custom_nonce_size():
    body = base64.b64encode(bytes(24) + b"x")
    assert validate_payload(body, require_nonce_prefix=True, nonce_bytes=24)
    with pytest.raises(InvalidPayloadError):
        validate_payload(body, require_nonce_prefix=True, nonce_bytes=25)
