"""Record formatters for console and file output."""

import logging
from datetime import datetime, timezone

from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = "rentora-backend"

# LogRecord attributes that only add noise once the JSON fields are set
_DROPPED_FIELDS = ("msg", "args", "created", "msecs", "relativeCreated", "pathname")


class RentoraJsonFormatter(JsonFormatter):
    """One JSON object per record, keyed for log search."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.fromtimestamp(
            record.created, tz=timezone.utc
        ).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["request_id"] = getattr(record, "request_id", "-")
        log_record["actor_id"] = getattr(record, "actor_id", None)
        log_record["source"] = f"{record.module}.{record.funcName}:{record.lineno}"
        log_record["service"] = SERVICE_NAME
        if record.exc_info and record.exc_info[0] is not None:
            log_record["error_type"] = record.exc_info[0].__name__
        for name in _DROPPED_FIELDS:
            log_record.pop(name, None)


PLAIN_FORMAT = (
    "%(asctime)s %(levelname)-7s [%(request_id)s actor=%(actor_id)s] "
    "%(name)s: %(message)s"
)


def build_formatter(log_format: str) -> logging.Formatter:
    if log_format.lower() == "json":
        return RentoraJsonFormatter("%(message)s")
    return logging.Formatter(PLAIN_FORMAT)
