"""
Logging configuration.

JSON lines in production (or when LOG_FORMAT=json), plain text otherwise.
Request lines come from the app's own middleware, so uvicorn's access log is
turned down to avoid logging every request twice.
"""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from config import settings

# Loggers silenced below WARNING: uvicorn.access duplicates the request
# middleware, urllib3 logs every connection the evaluation session opens.
QUIET_LOGGERS = ("uvicorn.access", "urllib3")


class JSONFormatter(logging.Formatter):
    """One JSON object per record; ``extra_fields`` are merged at top level."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data.update(getattr(record, "extra_fields", {}))

        return json.dumps(log_data, default=str)


def setup_logging() -> logging.Logger:
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    if settings.LOG_FORMAT == "json" or settings.ENVIRONMENT == "production":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger
