"""Access code generation."""

import secrets

import regex

# No 0/O, 1/l/I so codes survive being read aloud or copied by hand.
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz23456789"
DEFAULT_CODE_LENGTH = 8

_CODE_CHARS = regex.compile(r"[A-HJ-NP-Za-km-z2-9]+")


def generate_code(length: int = DEFAULT_CODE_LENGTH) -> str:
    """Return a random code drawn uniformly from ``CODE_ALPHABET``.

    ``secrets.choice`` uses the OS CSPRNG and rejection sampling, so every
    character is unbiased and independent of previous outputs.
    """
    if length < 1:
        raise ValueError("Code length must be positive")
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def is_well_formed_code(code: str, length: int = DEFAULT_CODE_LENGTH) -> bool:
    """Check that ``code`` could have been produced by :func:`generate_code`."""
    return len(code) == length and bool(_CODE_CHARS.fullmatch(code))
