"""Random token generation for the CSRF cookie."""

from __future__ import annotations

import hashlib
import secrets
import string

DEFAULT_TOKEN_LENGTH = 32
MAX_TOKEN_LENGTH = 128
FALLBACK_ALPHABET = string.ascii_lowercase + string.digits


def resolve_length(length) -> int:
    """Coerce *length* to an int in 1..128, falling back to 32."""
    try:
        value = int(length)
    except (TypeError, ValueError):
        return DEFAULT_TOKEN_LENGTH
    if value <= 0:
        return DEFAULT_TOKEN_LENGTH
    return min(value, MAX_TOKEN_LENGTH)


def generate_token(length=DEFAULT_TOKEN_LENGTH) -> str:
    """Return a fresh token of the resolved *length*.

    Prefers a truncated sha512 hex digest of a random seed; without sha512
    the token is sampled from ``[a-z0-9]``.
    """
    size = resolve_length(length)
    if "sha512" in hashlib.algorithms_available:
        seed = secrets.token_bytes(64)
        return hashlib.sha512(seed).hexdigest()[:size]
    return "".join(secrets.choice(FALLBACK_ALPHABET) for _ in range(size))
