"""
StayPulse Logging Configuration
===============================

One place to configure logging for the CLI and the API server:
- human-readable lines for local work
- JSON lines for log shipping
- optional rotating log file

Usage:
    from staypulse.orchestrator.logging_config import setup_logging

    setup_logging(level="DEBUG", json_output=True, log_file="logs/staypulse.log")
"""

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from typing import Optional

# Attributes passed through ``extra=`` that the JSON output keeps.
EXTRA_FIELDS = ("review_id", "listing_id", "stage", "duration", "count")

NOISY_LOGGERS = ("urllib3", "requests", "httpx", "uvicorn.access")


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record:
        {"ts": "...", "level": "INFO", "logger": "staypulse.reviews", "msg": "...", "count": 12}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        for key in EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                entry[key] = val

        return json.dumps(entry, default=str)


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[str] = None,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> None:
    """
    Configure the root logger. Safe to call more than once.

    Args:
        level: Root log level name
        json_output: Emit JSON lines instead of plain text
        log_file: Also write to this file, rotated at max_bytes
        max_bytes: Rotation threshold
        backup_count: Rotated files kept
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    if json_output:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)-8s] %(name)-36s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count,
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root.debug(
        "Logging configured: level=%s json=%s file=%s",
        level, json_output, log_file or "none",
    )


def setup_logging_from_settings(settings=None) -> None:
    """Configure logging from the LOG_* environment settings."""
    from ..data.config import get_settings

    cfg = (settings or get_settings()).logging
    setup_logging(level=cfg.level, json_output=cfg.json_logs, log_file=cfg.log_file)
