"""
Logging setup for the claim service.

- readable: colored single-line records for local development
- json: one JSON object per line for log aggregation
Level and format come from LOG_LEVEL / LOG_FORMAT.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from .config import LOG_FORMAT, LOG_LEVEL

_EXTRA_KEYS = ("tenant_id", "user_id", "claim_id", "identification_number")


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_KEYS:
            val = getattr(record, key, None)
            if val is not None:
                entry[key] = val
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


class ReadableFormatter(logging.Formatter):
    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        ts = datetime.now().strftime("%H:%M:%S")
        extras = " ".join(
            f"{key}={getattr(record, key)}" for key in _EXTRA_KEYS if getattr(record, key, None) is not None
        )
        base = f"{color}{ts} {record.levelname:<8}{self.RESET} {record.name}: {record.getMessage()}"
        if extras:
            base += f" [{extras}]"
        if record.exc_info and record.exc_info[0] is not None:
            base += "\n" + self.formatException(record.exc_info)
        return base


_HANDLER_NAME = "claimdesk"


def configure_logging(level_name: str | None = None, fmt: str | None = None) -> None:
    level_name = (level_name or LOG_LEVEL).upper()
    level = getattr(logging, level_name, logging.INFO)
    formatter = JSONFormatter() if (fmt or LOG_FORMAT) == "json" else ReadableFormatter()

    root = logging.getLogger()
    # replace only our own handler so reloads don't duplicate output
    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)
    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(formatter)
    root.addHandler(handler)
    root.setLevel(level)

    for noisy in ("urllib3", "sqlalchemy.engine", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
