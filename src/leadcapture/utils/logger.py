"""JSON-lines logging shared by every service component."""

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

ROOT_LOGGER = "leadcapture"
LOG_FILE = "leadcapture.log"


def resolve_level(name: Optional[str]) -> int:
    """Map a level name such as ``"debug"`` to its number; unknown names give INFO."""
    level = logging.getLevelName((name or "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


class JsonLineFormatter(logging.Formatter):
    """
    Render each record as one JSON object.

    Fields: ``timestamp`` (UTC, milliseconds, ``Z`` suffix), ``level``,
    ``component`` (logger name below ``leadcapture.``), ``event`` and the
    optional ``data`` mapping passed as ``extra={"data": ...}``. A ``data["id"]``
    is copied to a top-level ``submission_id`` so one submission can be
    followed across components.
    """

    def format(self, record: logging.LogRecord) -> str:
        moment = datetime.fromtimestamp(record.created, timezone.utc)
        component = record.name
        if component.startswith(ROOT_LOGGER + "."):
            component = component[len(ROOT_LOGGER) + 1:]

        entry = {
            "timestamp": moment.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "component": component,
            "event": record.getMessage(),
        }

        data = getattr(record, "data", None)
        if isinstance(data, dict) and data.get("id"):
            entry["submission_id"] = data["id"]
        if data is not None:
            entry["data"] = data

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def build_file_handler(log_dir: Union[str, Path]) -> RotatingFileHandler:
    """Rotating ``leadcapture.log`` handler (10MB files, keep 5) in ``log_dir``."""
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        directory / LOG_FILE,
        maxBytes=10_000_000,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setFormatter(JsonLineFormatter())
    return handler


def configure_logging(log_dir: Optional[str] = None, level: Optional[str] = None) -> logging.Logger:
    """
    Attach the JSON file handler to the ``leadcapture`` logger once.

    Component loggers are children of it and share its single handler.
    Later calls return the already configured logger unchanged.

    Args:
        log_dir: Output directory (default: LOG_DIR, else logs/)
        level: Level name (default: LOG_LEVEL, else INFO)
    """
    root = logging.getLogger(ROOT_LOGGER)
    if any(isinstance(h, RotatingFileHandler) for h in root.handlers):
        return root

    root.setLevel(resolve_level(level or os.getenv("LOG_LEVEL")))
    root.addHandler(build_file_handler(log_dir or os.getenv("LOG_DIR", "logs")))
    return root


def get_logger(component: str) -> logging.Logger:
    """Logger for one component: ``get_logger("store")`` is ``leadcapture.store``."""
    configure_logging()
    return logging.getLogger(f"{ROOT_LOGGER}.{component}")
