"""Logging configuration for the command line entry point."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

CONSOLE_FORMAT = "%(levelname)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """One JSON object per line; ``extra`` keys prefixed ``_json_`` are copied."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for key, value in record.__dict__.items():
            if key.startswith("_json_"):
                payload[key[6:]] = value
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: int | str = logging.WARNING, log_file: str | Path | None = None) -> None:
    """Install a console handler and, optionally, a rotating JSON file handler.

    Only the ``studyplan`` logger is touched so embedding applications keep
    their own root configuration.
    """

    logger = logging.getLogger("studyplan")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(path, maxBytes=512_000, backupCount=5, encoding="utf-8")
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)


__all__ = ["JsonFormatter", "configure_logging"]
