"""Access to the client's token cookie."""

from __future__ import annotations

from typing import Mapping, Protocol

from starlette.responses import Response

from csrf_protector.config import DEFAULT_COOKIE_EXPIRY

TOKEN_COOKIE = "CSRF_AUTH_TOKEN"


class CookieStore(Protocol):
    def get(self) -> str | None: ...

    def set(self, token: str, max_age: int = DEFAULT_COOKIE_EXPIRY) -> None: ...


class RequestCookieStore:
    """Reads the token from request cookies and holds the rotated one.

    The pending token is written onto a response with :meth:`apply` or as a
    raw header with :meth:`header`.
    """

    def __init__(self, cookies: Mapping[str, str], *, secure: bool = False) -> None:
        self._cookies = cookies
        self._secure = secure
        self.token: str | None = None
        self.max_age = DEFAULT_COOKIE_EXPIRY

    def get(self) -> str | None:
        return self._cookies.get(TOKEN_COOKIE)

    def set(self, token: str, max_age: int = DEFAULT_COOKIE_EXPIRY) -> None:
        self.token = token
        self.max_age = max_age

    def apply(self, response: Response) -> Response:
        if self.token is not None:
            response.set_cookie(
                TOKEN_COOKIE,
                self.token,
                max_age=self.max_age,
                httponly=False,  # the client script reads it to fill forms
                samesite="strict",
                secure=self._secure,
            )
        return response

    def header(self) -> tuple[bytes, bytes] | None:
        """Return the ``Set-Cookie`` header for the pending token, if any."""
        if self.token is None:
            return None
        carrier = self.apply(Response())
        for name, value in carrier.raw_headers:
            if name == b"set-cookie":
                return name, value
        return None
