"""CSRF protection layer for ASGI applications."""

from csrf_protector.actions import ActionResult, FailureAction
from csrf_protector.authorizer import TOKEN_FIELD, RequestContext, Verdict
from csrf_protector.config import ProtectorConfig, load_config
from csrf_protector.cookies import TOKEN_COOKIE
from csrf_protector.middleware import CSRFProtectorMiddleware
from csrf_protector.protector import CSRFProtector

__all__ = [
    "TOKEN_COOKIE",
    "TOKEN_FIELD",
    "ActionResult",
    "CSRFProtector",
    "CSRFProtectorMiddleware",
    "FailureAction",
    "ProtectorConfig",
    "RequestContext",
    "Verdict",
    "load_config",
]
