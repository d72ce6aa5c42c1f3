"""Tests for the request authorizer and its cookie rotation."""

from __future__ import annotations

import pytest

from csrf_protector.authorizer import RequestAuthorizer, RequestContext, Verdict, tokens_match
from csrf_protector.config import ProtectorConfig


class RecordingCookieStore:
    def __init__(self, token: str | None = None) -> None:
        self.token = token
        self.calls: list[tuple[str, int]] = []

    def get(self) -> str | None:
        return self.token

    def set(self, token: str, max_age: int = 300) -> None:
        self.calls.append((token, max_age))


def _authorize(config, method, submitted=None, cookie=None):
    store = RecordingCookieStore(cookie)
    context = RequestContext(method=method, submitted_token=submitted, cookie_token=cookie)
    return RequestAuthorizer(config).authorize(context, store), store


@pytest.fixture
def get_protected():
    return ProtectorConfig(get_requests_protected=True, token_length=20)


def test_post_with_matching_token_is_allowed():
    verdict, _ = _authorize(ProtectorConfig(), "POST", "abc123", "abc123")
    assert verdict is Verdict.ALLOWED


@pytest.mark.parametrize(
    "submitted, cookie",
    [
        (None, "abc123"),
        ("abc123", None),
        (None, None),
        ("", ""),
        ("abc124", "abc123"),
        ("ABC123", "abc123"),
        ("abc12", "abc123"),
    ],
)
def test_post_without_exact_match_is_denied(submitted, cookie):
    verdict, _ = _authorize(ProtectorConfig(), "POST", submitted, cookie)
    assert verdict is Verdict.DENIED


def test_get_is_allowed_when_unprotected():
    assert _authorize(ProtectorConfig(), "GET")[0] is Verdict.ALLOWED
    assert _authorize(ProtectorConfig(), "GET", "x", "y")[0] is Verdict.ALLOWED


def test_get_is_validated_when_protected(get_protected):
    assert _authorize(get_protected, "GET", "tok", "tok")[0] is Verdict.ALLOWED
    assert _authorize(get_protected, "GET", "tok", "other")[0] is Verdict.DENIED
    assert _authorize(get_protected, "GET")[0] is Verdict.DENIED


def test_other_methods_are_treated_as_get():
    assert RequestContext(method="PUT").request_type == "GET"
    assert RequestContext(method="post").request_type == "POST"
    assert _authorize(ProtectorConfig(), "DELETE")[0] is Verdict.ALLOWED


@pytest.mark.parametrize("submitted, cookie", [("tok", "tok"), ("tok", "bad"), (None, None)])
def test_cookie_rotated_once_per_request(get_protected, submitted, cookie):
    _, store = _authorize(get_protected, "POST", submitted, cookie)
    assert len(store.calls) == 1
    token, max_age = store.calls[0]
    assert len(token) == 20
    assert token != cookie
    assert max_age == 300


def test_cookie_expiry_comes_from_config():
    _, store = _authorize(ProtectorConfig(cookie_expiry_time=60), "GET")
    assert store.calls[0][1] == 60


def test_tokens_match():
    assert tokens_match("a", "a")
    assert not tokens_match("a", "b")
    assert not tokens_match(None, "a")
    assert not tokens_match("", "")
