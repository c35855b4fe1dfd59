"""Structured logging for roomstate.

Every record carries timestamp, level, logger and message. The room_id,
user_id, event_id, path, error_code and operation extras that the services
attach are copied to top-level JSON keys, so one room's or one user's
membership history can be filtered straight from the log stream.
"""

import json
import logging
from datetime import datetime, timezone

_EXTRA_FIELDS = (
    "room_id", "user_id", "event_id", "path", "error_code", "operation",
)
_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log.update(
            (key, record.__dict__[key])
            for key in _EXTRA_FIELDS
            if record.__dict__.get(key) is not None
        )
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Attach a stream handler to the root logger ("json" or plain "text")."""
    handler = logging.StreamHandler()
    handler.setFormatter(
        JSONFormatter() if fmt == "json" else logging.Formatter(_TEXT_FORMAT)
    )
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
