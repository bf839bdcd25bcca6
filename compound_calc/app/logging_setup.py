"""Root logger configuration with an optional JSON formatter."""

from __future__ import annotations

import json
import logging
from typing import Any


# Attributes set through ``extra=`` by the access log and the API error handlers.
ACCESS_FIELDS = ("method", "path", "status_code", "mode")


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_entry.update(
            {key: getattr(record, key) for key in ACCESS_FIELDS if getattr(record, key, None) is not None}
        )

        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure the root logger. Use json_format=True in production."""
    root = logging.getLogger()
    root.setLevel(level)

    handler = logging.StreamHandler()
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    # avoid duplicate handlers when the factory runs more than once
    root.handlers.clear()
    root.addHandler(handler)

    logging.getLogger("werkzeug").setLevel(logging.WARNING)
