"""Initialization entry point wiring the protector's components together."""

from __future__ import annotations

import logging
from pathlib import Path

from csrf_protector.actions import ActionResult, FailureActionDispatcher
from csrf_protector.attack_log import AttackLog
from csrf_protector.authorizer import RequestAuthorizer, RequestContext, Verdict
from csrf_protector.config import ProtectorConfig, Settings, load_config
from csrf_protector.cookies import CookieStore
from csrf_protector.exceptions import LogDirectoryNotFoundError
from csrf_protector.rewriter import HtmlRewriter

logger = logging.getLogger(__name__)


class CSRFProtector:
    """Holds the frozen config and the components built from it.

    Raises LogDirectoryNotFoundError when the attack log directory is
    missing, so a misconfigured protector never starts serving.
    """

    def __init__(self, config: ProtectorConfig) -> None:
        if not Path(config.log_directory).is_dir():
            raise LogDirectoryNotFoundError(f"log directory not found: {config.log_directory}")
        self.config = config
        self.authorizer = RequestAuthorizer(config)
        self.attack_log = AttackLog(config.log_directory)
        self.dispatcher = FailureActionDispatcher(config, self.attack_log)

    @classmethod
    def init(
        cls,
        config_path: str | Path | None = None,
        *,
        get_enabled: bool = False,
        length: int | None = None,
        action: int | None = None,
    ) -> CSRFProtector:
        """Load the config file, apply call-site overrides and build a protector."""
        path = Path(config_path) if config_path is not None else Settings.require_config()
        config = load_config(path).with_overrides(
            get_enabled=get_enabled, length=length, action=action
        )
        protector = cls(config)
        logger.info(
            "CSRF protector initialised from %s (GET protected: %s)",
            path,
            config.get_requests_protected,
        )
        return protector

    def authorize(self, context: RequestContext, cookies: CookieStore) -> ActionResult | None:
        """Authorize *context*; returns the failure action, or None when allowed."""
        if self.authorizer.authorize(context, cookies) is Verdict.ALLOWED:
            return None
        return self.dispatcher.dispatch(context)

    def rewriter(self) -> HtmlRewriter:
        return HtmlRewriter(self.config)
