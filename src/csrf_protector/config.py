"""Process settings from environment variables and the protector's JSON config."""

from __future__ import annotations

import json
import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from csrf_protector.exceptions import ConfigFileNotFoundError, ConfigurationError
from csrf_protector.tokens import DEFAULT_TOKEN_LENGTH, resolve_length

DEFAULT_COOKIE_EXPIRY = 300


class Settings:
    CONFIG_FILE: str = os.environ.get("CSRFP_CONFIG_FILE", "config.json")
    HOST: str = os.environ.get("HOST", "0.0.0.0")
    PORT: int = int(os.environ.get("PORT", "8000"))
    DEBUG: bool = os.environ.get("DEBUG", "").lower() == "true"

    @classmethod
    def require_config(cls) -> Path:
        path = Path(cls.CONFIG_FILE)
        if not path.is_file():
            raise ConfigFileNotFoundError(
                f"configuration file not found for CSRF protector: {path}"
            )
        return path


class FailedAuthAction(BaseModel):
    """Failure-action codes, one per request type."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    get: int = Field(default=0, alias="GET")
    post: int = Field(default=0, alias="POST")


class ProtectorConfig(BaseModel):
    """Resolved protector configuration.

    JSON keys keep the camelCase names of the config file format
    (``isGETEnabled``, ``jsFile`` ...); attributes are snake_case.
    ``failedAuthAction`` accepts a single int for both request types or a
    ``{"GET": int, "POST": int}`` mapping.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    get_requests_protected: bool = Field(default=False, alias="isGETEnabled")
    log_directory: Path = Field(default=Path("log"), alias="logDirectory")
    failed_auth_action: FailedAuthAction = Field(
        default_factory=FailedAuthAction, alias="failedAuthAction"
    )
    error_redirection_page: str = Field(default="/", alias="errorRedirectionPage")
    custom_error_message: str = Field(default="", alias="customErrorMessage")
    js_resource_url: str = Field(default="/static/csrfprotector.js", alias="jsFile")
    token_length: int = Field(default=DEFAULT_TOKEN_LENGTH, alias="tokenLength")
    disabled_js_message: str = Field(
        default=(
            "This site attempts to protect users against Cross-Site Request "
            "Forgeries attacks. In order to do so, you must have JavaScript "
            "enabled in your web browser otherwise this site will fail to "
            "work correctly for you."
        ),
        alias="disabledJavascriptMessage",
    )
    cookie_expiry_time: int = Field(default=DEFAULT_COOKIE_EXPIRY, alias="cookieExpiryTime")

    @field_validator("failed_auth_action", mode="before")
    @classmethod
    def _expand_action(cls, value):
        if isinstance(value, (int, str)) and not isinstance(value, bool):
            return {"GET": value, "POST": value}
        return value

    @field_validator("token_length", mode="before")
    @classmethod
    def _coerce_length(cls, value) -> int:
        return resolve_length(value)

    def action_for(self, request_type: str) -> int:
        if request_type == "POST":
            return self.failed_auth_action.post
        return self.failed_auth_action.get

    def with_overrides(
        self,
        *,
        get_enabled: bool = False,
        length: int | None = None,
        action: int | None = None,
    ) -> ProtectorConfig:
        """Return a copy with call-site overrides applied.

        GET protection can only be switched on here, never off.
        """
        update: dict = {}
        if get_enabled is True:
            update["get_requests_protected"] = True
        if length is not None:
            update["token_length"] = resolve_length(length)
        if action is not None:
            try:
                code = int(action)
            except (TypeError, ValueError):
                code = 0
            update["failed_auth_action"] = FailedAuthAction(get=code, post=code)
        if not update:
            return self
        return self.model_copy(update=update)


def load_config(path: str | Path) -> ProtectorConfig:
    """Read and validate the JSON config at *path*.

    A relative ``logDirectory`` is resolved against the config file's
    directory.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigFileNotFoundError(f"configuration file not found for CSRF protector: {path}")

    try:
        raw = json.loads(path.read_text())
    except (OSError, ValueError) as exc:
        raise ConfigurationError(f"unreadable configuration file {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigurationError(f"configuration file {path} must contain a JSON object")

    try:
        config = ProtectorConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid configuration in {path}: {exc}") from exc

    if not config.log_directory.is_absolute():
        config = config.model_copy(update={"log_directory": path.parent / config.log_directory})
    return config
