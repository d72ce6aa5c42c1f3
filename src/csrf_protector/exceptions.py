"""Exceptions raised by the CSRF protector.

A failed token check is not an exception: it is ``Verdict.DENIED`` and is
handled by the failure-action table. Everything here is fatal.
"""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """The protector cannot start with the configuration it was given."""


class ConfigFileNotFoundError(ConfigurationError):
    """The JSON configuration file does not exist."""


class LogDirectoryNotFoundError(ConfigurationError):
    """The attack log directory does not exist."""


class LogSinkUnavailable(RuntimeError):
    """An attack record could not be written to the log file."""
