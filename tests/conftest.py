"""Shared fixtures: a protector config writing its attack log under tmp_path."""

from __future__ import annotations

import pytest

from csrf_protector.config import ProtectorConfig
from csrf_protector.protector import CSRFProtector


@pytest.fixture
def log_dir(tmp_path):
    path = tmp_path / "log"
    path.mkdir()
    return path


@pytest.fixture
def config(log_dir) -> ProtectorConfig:
    return ProtectorConfig(
        log_directory=log_dir,
        js_resource_url="/x.js",
        disabled_js_message="M",
        token_length=16,
        error_redirection_page="http://localhost/error",
        custom_error_message="<p>Request blocked</p>",
    )


@pytest.fixture
def make_protector(config):
    """Build a protector from the test config plus init-style overrides."""

    def _make(**overrides) -> CSRFProtector:
        return CSRFProtector(config.with_overrides(**overrides))

    return _make
