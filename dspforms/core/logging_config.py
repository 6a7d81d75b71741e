"""JSON logging for the forms service plus a recent-events buffer for admins.

Service code tags its records with ``extra=log_context(...)`` so that both the
JSON stream and the buffer carry the form, submission and status they concern.
"""

from __future__ import annotations

import logging
import os
from collections import deque
from datetime import datetime, timezone
from typing import Any, Optional

from pythonjsonlogger import jsonlogger

CONTEXT_KEYS = ("form_id", "submission_id", "status", "user_id")

_CONFIGURED = False
_LOG_BUFFER: deque[dict[str, Any]] = deque(maxlen=200)


def log_context(**values: Any) -> dict[str, Any]:
    """Build a logging ``extra`` mapping, dropping keys that were not given."""

    unknown = set(values) - set(CONTEXT_KEYS)
    if unknown:
        raise ValueError(f"Unknown log context keys: {sorted(unknown)}")
    return {key: value for key, value in values.items() if value is not None}


class _BufferHandler(logging.Handler):
    """Keeps the newest records first, with whatever form context they carry."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
            entry: dict[str, Any] = {
                "time": timestamp.isoformat().replace("+00:00", "Z"),
                "level": record.levelname,
                "name": record.name,
                "message": record.getMessage(),
            }
            for key in CONTEXT_KEYS:
                value = getattr(record, key, None)
                if value is not None:
                    entry[key] = value
            _LOG_BUFFER.appendleft(entry)
        except Exception:
            self.handleError(record)


def setup_logging(service_name: Optional[str] = None) -> None:
    """Send JSON records to stderr and into the admin log buffer."""

    global _CONFIGURED
    if _CONFIGURED:
        return

    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    service = service_name or os.getenv("SERVICE_NAME", "dspforms")

    handler = logging.StreamHandler()
    handler.setFormatter(
        jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            static_fields={"service": service},
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.addHandler(_BufferHandler())
    root.setLevel(log_level)
    logging.captureWarnings(True)
    _CONFIGURED = True


def get_log_buffer(
    limit: int = 100,
    *,
    form_id: Optional[str] = None,
    submission_id: Optional[str] = None,
    level: Optional[str] = None,
) -> list[dict[str, Any]]:
    entries = list(_LOG_BUFFER)
    if form_id:
        entries = [e for e in entries if e.get("form_id") == form_id]
    if submission_id:
        entries = [e for e in entries if e.get("submission_id") == submission_id]
    if level:
        entries = [e for e in entries if e["level"] == level.upper()]
    return entries[:limit]


def clear_log_buffer() -> None:
    _LOG_BUFFER.clear()


__all__ = ["CONTEXT_KEYS", "clear_log_buffer", "get_log_buffer", "log_context", "setup_logging"]
