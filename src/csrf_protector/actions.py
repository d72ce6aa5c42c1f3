"""What happens to a request that failed token validation.

Every denial is logged first, then exactly one policy is chosen by the
configured action code for the request type:

    0  403 Forbidden (also the default)
    1  strip the request's parameters and let it continue
    2  redirect to the configured error page
    3  send the configured custom message as the body
    4  500 Internal Server Error

Unknown codes behave like 1.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from starlette.responses import HTMLResponse, RedirectResponse, Response

from csrf_protector.attack_log import AttackLog, AttackLogRecord
from csrf_protector.authorizer import RequestContext
from csrf_protector.config import ProtectorConfig

FORBIDDEN_BODY = "<h2>403 Access Forbidden by CSRF Protector!</h2>"
SERVER_ERROR_BODY = "<h2>500 Internal Server Error!</h2>"


class FailureAction(enum.IntEnum):
    FORBIDDEN = 0
    STRIP_PARAMS = 1
    REDIRECT = 2
    CUSTOM_MESSAGE = 3
    SERVER_ERROR = 4

    @classmethod
    def from_code(cls, code: int) -> FailureAction:
        try:
            return cls(code)
        except ValueError:
            return cls.STRIP_PARAMS


@dataclass(frozen=True)
class ActionResult:
    action: FailureAction
    response: Response | None = None
    strip_params: bool = False

    @property
    def terminates(self) -> bool:
        return self.response is not None


class FailureActionDispatcher:
    def __init__(self, config: ProtectorConfig, attack_log: AttackLog) -> None:
        self.config = config
        self.attack_log = attack_log

    def dispatch(self, context: RequestContext) -> ActionResult:
        self.attack_log.append(AttackLogRecord.from_context(context))

        action = FailureAction.from_code(self.config.action_for(context.request_type))
        if action is FailureAction.FORBIDDEN:
            return ActionResult(action, HTMLResponse(FORBIDDEN_BODY, status_code=403))
        if action is FailureAction.REDIRECT:
            return ActionResult(
                action,
                RedirectResponse(self.config.error_redirection_page, status_code=302),
            )
        if action is FailureAction.CUSTOM_MESSAGE:
            return ActionResult(action, HTMLResponse(self.config.custom_error_message))
        if action is FailureAction.SERVER_ERROR:
            return ActionResult(action, HTMLResponse(SERVER_ERROR_BODY, status_code=500))
        return ActionResult(FailureAction.STRIP_PARAMS, strip_params=True)
