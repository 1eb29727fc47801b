"""Structured Logging — JSON records carrying captcha/command context.

Invariants:
    - Every record includes timestamp, level, logger name, and message
    - Store context (captcha_id, command, error_code, operation, response_value) surfaced when present
    - setup_logging installs at most one handler: a repeat call replaces the previous one
    - Only "json" and "text" formats exist

Design Decisions:
    - stdlib logging with a custom formatter (ADR: zero extra dependencies, full control)
    - Called from init_captcha_store, not at import: embedding apps that configure
      logging themselves can use CaptchaStore.connect() directly
"""

import logging
import json
from datetime import datetime, timezone

LOG_FORMATS = ("json", "text")

_CONTEXT_FIELDS = (
    "captcha_id", "command", "error_code", "operation", "response_value",
)

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

_installed: logging.Handler | None = None


class JSONFormatter(logging.Formatter):
    """One JSON object per record; unserializable extras fall back to str()."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log.update({
            key: record.__dict__[key]
            for key in _CONTEXT_FIELDS
            if record.__dict__.get(key) is not None
        })
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install (or replace) the package's root handler."""
    global _installed
    if fmt not in LOG_FORMATS:
        raise ValueError(f"log format must be one of {LOG_FORMATS}, got {fmt!r}")
    handler = logging.StreamHandler()
    handler.setFormatter(
        JSONFormatter() if fmt == "json" else logging.Formatter(_TEXT_FORMAT),
    )
    if _installed is not None:
        logging.root.removeHandler(_installed)
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    _installed = handler
    return handler
