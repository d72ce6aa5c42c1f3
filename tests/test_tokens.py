"""Tests for token generation."""

from __future__ import annotations

import hashlib
import string
from unittest.mock import patch

from csrf_protector.tokens import (
    DEFAULT_TOKEN_LENGTH,
    FALLBACK_ALPHABET,
    MAX_TOKEN_LENGTH,
    generate_token,
    resolve_length,
)

HEX = set(string.hexdigits.lower())


def test_every_length_is_honoured():
    for length in range(1, MAX_TOKEN_LENGTH + 1):
        token = generate_token(length)
        assert len(token) == length
        assert set(token) <= HEX


def test_non_positive_length_falls_back_to_default():
    assert len(generate_token(0)) == DEFAULT_TOKEN_LENGTH
    assert len(generate_token(-1)) == DEFAULT_TOKEN_LENGTH
    assert resolve_length(0) == resolve_length(-1) == resolve_length(32)


def test_non_numeric_length_falls_back_to_default():
    assert resolve_length("abc") == DEFAULT_TOKEN_LENGTH
    assert resolve_length(None) == DEFAULT_TOKEN_LENGTH
    assert resolve_length("12") == 12


def test_length_is_clipped_to_digest_size():
    assert len(generate_token(500)) == MAX_TOKEN_LENGTH


def test_tokens_are_not_repeated():
    tokens = {generate_token(32) for _ in range(50)}
    assert len(tokens) == 50


def test_fallback_without_sha512():
    with patch.object(hashlib, "algorithms_available", set()):
        token = generate_token(100)
        short = generate_token(0)
    assert len(token) == 100
    assert set(token) <= set(FALLBACK_ALPHABET)
    assert len(short) == DEFAULT_TOKEN_LENGTH
