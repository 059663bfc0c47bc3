import json
import logging
import sys
from datetime import datetime, timezone

_RESERVED_KEYS = set(logging.makeLogRecord({}).__dict__.keys()) | {"message", "asctime"}
_QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def _jsonable(value):
    if value is None or isinstance(value, (str, int, float, bool, list, dict)):
        return value
    return str(value)


class JsonLogFormatter(logging.Formatter):
    """One JSON object per line, with `extra` fields flattened into the payload."""

    def __init__(self, service: str | None = None):
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.service:
            payload["service"] = self.service
        for key, value in record.__dict__.items():
            if key not in _RESERVED_KEYS:
                payload[key] = _jsonable(value)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True)


def configure_logging(level: str = "INFO", service: str | None = None) -> None:
    root = logging.getLogger()
    root.setLevel(level.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonLogFormatter(service))

    root.handlers.clear()
    root.addHandler(handler)

    # per-request upstream calls are logged by the omdb client itself
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
