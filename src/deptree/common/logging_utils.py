"""Centralized logging helpers.

Every module logs through ``logging.getLogger(__name__)``; these helpers keep
the structured ``extra=`` payloads consistent and make sure credentials in
registry URLs never reach a log line.
"""

from __future__ import annotations

import logging
import os
import re
import time
import urllib.parse
from typing import Any, Dict, Optional

from ..constants import Constants

_SENSITIVE_QUERY_KEYS = {"token", "access_token", "auth", "password", "secret", "key"}
_REDACTED = "[REDACTED]"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure the root logger.

    The level comes from ``level`` when given, otherwise from the
    ``DEPTREE_LOG_LEVEL`` environment variable, otherwise INFO.
    """
    level_name = (level or os.environ.get(Constants.ENV_LOG_LEVEL) or "INFO").upper()
    level_value = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level_value)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records from ``logger`` would be emitted."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra=`` mapping for structured log records.

    ``None`` values are dropped so records only carry meaningful fields.
    """
    return {key: value for key, value in fields.items() if value is not None}


def redact(value: str) -> str:
    """Mask a secret, keeping nothing of the original value."""
    return _REDACTED if value else value


def safe_url(url: str) -> str:
    """Strip userinfo and mask sensitive query parameters in ``url``."""
    try:
        parts = urllib.parse.urlsplit(url)
    except ValueError:
        return _REDACTED

    netloc = parts.netloc
    if "@" in netloc:
        netloc = f"{_REDACTED}@{netloc.rsplit('@', 1)[1]}"

    query = parts.query
    if query:
        pairs = urllib.parse.parse_qsl(query, keep_blank_values=True)
        query = "&".join(
            f"{k}={redact(v) if k.lower() in _SENSITIVE_QUERY_KEYS else v}"
            for k, v in pairs
        )

    return urllib.parse.urlunsplit((parts.scheme, netloc, parts.path, query, parts.fragment))


_TOKEN_RE = re.compile(r"(?i)(bearer\s+)[A-Za-z0-9._\-]+")


def redact_text(text: str) -> str:
    """Mask bearer tokens inside free-form text such as exception messages."""
    return _TOKEN_RE.sub(rf"\1{_REDACTED}", text)


class Timer:
    """Context manager measuring wall-clock duration in milliseconds."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        """Elapsed milliseconds; reads the live clock while still inside the block."""
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
