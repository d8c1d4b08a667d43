"""Structured JSON logging configuration.

One JSON object per line on stdout. Structured context travels through
``extra=``; only the keys in ``STRUCTURED_FIELDS`` are emitted.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional

STRUCTURED_FIELDS = (
    "action",
    "session_id",
    "latency_ms",
    "candidate_count",
    "failed_count",
)


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update({key: getattr(record, key) for key in STRUCTURED_FIELDS if hasattr(record, key)})
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(level: Optional[str] = None) -> None:
    """Install the JSON formatter on the root logger. Level defaults to $LOG_LEVEL."""
    stream = logging.StreamHandler(sys.stdout)
    stream.setFormatter(JSONFormatter())
    logging.basicConfig(
        level=(level or os.getenv("LOG_LEVEL", "INFO")).upper(),
        handlers=[stream],
        force=True,
    )
