"""Structured session events.

Each event is a single record on the ``interview`` logger. The console shows
a ``key=value`` line; when file logs are enabled the same record is written
as one JSON object per line to a rotating file.
"""
from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
import time
from typing import Any

from config.settings import settings

_HUMAN_KEYS = ("event", "from", "to", "pending", "question_id", "score", "step", "ms", "outcome")

_logger = logging.getLogger("interview")
_logger.propagate = False


class _HumanFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__("[%(asctime)s] %(levelname)s %(name)s :: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    def formatMessage(self, record: logging.LogRecord) -> str:
        payload = getattr(record, "payload", None)
        if payload is not None:
            record.message = _format_human(payload)
        return super().formatMessage(record)


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = getattr(record, "payload", None) or {"message": record.getMessage()}
        return json.dumps(payload, ensure_ascii=False, default=str)


def _ensure_handlers() -> None:
    if _logger.handlers:
        return
    _logger.setLevel(settings.LOG_LEVEL.upper())

    console = logging.StreamHandler(stream=sys.stdout)
    console.setFormatter(_HumanFormatter())
    _logger.addHandler(console)

    if not settings.ENABLE_FILE_LOGS:
        return
    log_dir = os.path.dirname(settings.LOG_FILE)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    json_file = logging.handlers.RotatingFileHandler(
        settings.LOG_FILE,
        maxBytes=settings.LOG_MAX_BYTES,
        backupCount=settings.LOG_BACKUP_COUNT,
    )
    json_file.setFormatter(_JsonFormatter())
    _logger.addHandler(json_file)


def _format_human(evt: dict[str, Any]) -> str:
    extras = [f"{key}={evt[key]}" for key in _HUMAN_KEYS if key in evt]
    return " ".join([f"session={evt.get('session_id')} kind={evt.get('kind')}", *extras])


def log_event(kind: str, session_id: str, **fields: Any) -> None:
    """Record one session event on the console and, if enabled, the JSON file."""

    _ensure_handlers()
    payload: dict[str, Any] = {"ts": time.time(), "kind": kind, "session_id": session_id, **fields}
    _logger.info(kind, extra={"payload": payload})


__all__ = ["log_event"]
