"""Token validation for incoming requests."""

from __future__ import annotations

import enum
import hmac
import logging
from dataclasses import dataclass, field
from typing import Any

from csrf_protector.config import ProtectorConfig
from csrf_protector.cookies import CookieStore
from csrf_protector.tokens import generate_token

logger = logging.getLogger(__name__)

TOKEN_FIELD = "CSRFPROTECTOR_AUTH_TOKEN"


class Verdict(enum.Enum):
    ALLOWED = "allowed"
    DENIED = "denied"


@dataclass
class RequestContext:
    """Everything the protector needs to know about one request.

    ``params`` holds the parameters of the request type: the query string
    for GET, the form body for POST.
    """

    method: str
    submitted_token: str | None = None
    cookie_token: str | None = None
    host: str = ""
    request_uri: str = ""
    params: dict[str, Any] = field(default_factory=dict)
    cookies: dict[str, str] = field(default_factory=dict)

    @property
    def request_type(self) -> str:
        return "POST" if self.method.upper() == "POST" else "GET"


def tokens_match(submitted: str | None, cookie: str | None) -> bool:
    if not submitted or not cookie:
        return False
    return hmac.compare_digest(submitted.encode(), cookie.encode())


class RequestAuthorizer:
    def __init__(self, config: ProtectorConfig) -> None:
        self.config = config

    def requires_validation(self, context: RequestContext) -> bool:
        if context.request_type == "POST":
            return True
        return self.config.get_requests_protected

    def authorize(self, context: RequestContext, cookies: CookieStore) -> Verdict:
        """Decide on *context* and rotate the token cookie.

        The cookie is set exactly once per call, before the verdict is
        returned, so any failure action sees the rotated token.
        """
        if self.requires_validation(context) and not tokens_match(
            context.submitted_token, context.cookie_token
        ):
            verdict = Verdict.DENIED
        else:
            verdict = Verdict.ALLOWED

        cookies.set(generate_token(self.config.token_length), self.config.cookie_expiry_time)

        if verdict is Verdict.DENIED:
            logger.info(
                "CSRF validation failed for %s %s",
                context.method,
                context.request_uri,
                extra={"request_type": context.request_type, "host": context.host},
            )
        return verdict
