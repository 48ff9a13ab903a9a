"""Structured logging helpers shared by API, domain, and scripts."""

from __future__ import annotations

import json
import logging
import logging.config
from typing import Any, Mapping

__all__ = ["StructuredFormatter", "configure_logging", "get_logger"]

DEFAULT_LEVEL = "INFO"
DEFAULT_FORMAT = "text"
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None)).keys()
) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """Formatter that renders `extra={...}` context next to the event name."""

    def __init__(self, *, as_json: bool = False) -> None:
        super().__init__(fmt="%(asctime)s %(levelname)s %(name)s %(message)s")
        self._as_json = as_json

    def format(self, record: logging.LogRecord) -> str:
        context = _extract_context(record)
        if self._as_json:
            payload: dict[str, Any] = {
                "timestamp": self.formatTime(record),
                "level": record.levelname,
                "logger": record.name,
                "event": record.getMessage(),
            }
            payload.update(context)
            if record.exc_info:
                payload["exc_info"] = self.formatException(record.exc_info)
            return json.dumps(payload, default=str)
        base = super().format(record)
        if not context:
            return base
        rendered = " ".join(f"{key}={value!r}" for key, value in context.items())
        return f"{base} {rendered}"


def get_logger(name: str) -> logging.Logger:
    """Return a module logger; configuration is applied by `configure_logging`."""

    return logging.getLogger(name)


def configure_logging(config: Mapping[str, Any] | None = None) -> None:
    """Install the structured formatter on the `backend` logger tree."""

    config = config or {}
    level = str(config.get("level", DEFAULT_LEVEL)).upper()
    as_json = str(config.get("format", DEFAULT_FORMAT)).lower() == "json"
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structured": {
                    "()": StructuredFormatter,
                    "as_json": as_json,
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "structured",
                }
            },
            "loggers": {
                "backend": {
                    "handlers": ["console"],
                    "level": level,
                    "propagate": False,
                },
                "scripts": {
                    "handlers": ["console"],
                    "level": level,
                    "propagate": False,
                },
            },
        }
    )


def _extract_context(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }
