"""Append-only NDJSON log of rejected requests, one file per month."""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from csrf_protector.authorizer import RequestContext
from csrf_protector.exceptions import LogSinkUnavailable

logger = logging.getLogger(__name__)


@dataclass
class AttackLogRecord:
    timestamp: int
    host: str
    request_uri: str
    request_type: str
    query: dict[str, Any] = field(default_factory=dict)
    cookie: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_context(cls, context: RequestContext, timestamp: int | None = None) -> AttackLogRecord:
        return cls(
            timestamp=int(time.time()) if timestamp is None else timestamp,
            host=context.host,
            request_uri=context.request_uri,
            request_type=context.request_type,
            query=dict(context.params),
            cookie=dict(context.cookies),
        )

    def to_json(self) -> str:
        return json.dumps(asdict(self), default=str)


def log_file_name(now: datetime | None = None) -> str:
    """Name of the log file for the month of *now*, e.g. ``03-2026.log``."""
    now = now or datetime.now()
    return now.strftime("%m-%Y") + ".log"


class AttackLog:
    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        self._lock = threading.Lock()

    def current_path(self, now: datetime | None = None) -> Path:
        return self.directory / log_file_name(now)

    def append(self, record: AttackLogRecord) -> Path:
        """Write *record* as one line to the current month's file.

        Raises LogSinkUnavailable when the directory is gone or the write
        fails.
        """
        if not self.directory.is_dir():
            raise LogSinkUnavailable(f"log directory not found: {self.directory}")

        path = self.current_path()
        line = record.to_json() + "\n"
        with self._lock:
            try:
                with open(path, "a", encoding="utf-8") as fh:
                    fh.write(line)
            except OSError as exc:
                raise LogSinkUnavailable(f"unable to write to the log file {path}: {exc}") from exc

        logger.warning(
            "CSRF attack logged to %s",
            path.name,
            extra={
                "request_type": record.request_type,
                "host": record.host,
                "request_uri": record.request_uri,
            },
        )
        return path
