"""Logging configuration for multimime."""

import contextvars
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

# Name of the file currently being validated, stamped onto every log line
upload_filename_context: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "upload_filename", default=None
)

# Attributes every LogRecord carries; anything else arrived through ``extra``
_RECORD_ATTRIBUTES = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

# Extra fields describing the upload decision, grouped under "upload"
UPLOAD_FIELDS = ("extension", "mime_type", "sniffed_type", "expected_type")


class JsonLogFormatter(logging.Formatter):
    """Single-line JSON formatter for upload decisions.

    The file being validated and the decision fields the reconciler and
    plugin log (extension, MIME types) are grouped in an ``upload`` object;
    other ``extra`` fields stay at the top level.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        upload: Dict[str, Any] = {}
        upload_filename = getattr(record, "upload_filename", None) or upload_filename_context.get()
        if upload_filename:
            upload["filename"] = upload_filename

        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRIBUTES or key == "upload_filename":
                continue
            if key in UPLOAD_FIELDS:
                upload[key] = value
            else:
                log_entry[key] = value

        if upload:
            log_entry["upload"] = upload

        if record.exc_info:
            log_entry["error"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str, ensure_ascii=False)


def setup_logging() -> None:
    """Configure logging for the ``multimime`` logger tree.

    Local development gets a plain text format at DEBUG; every other
    environment gets JSON lines at the configured ``LOG_LEVEL``. Only the
    ``multimime`` logger is touched so a host application keeps control
    of the root logger.
    """
    from multimime.core.config import settings

    log_level = logging.DEBUG if settings.ENV == "local" else settings.log_level

    handler = logging.StreamHandler(sys.stdout)

    if settings.ENV == "local":
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
    else:
        formatter = JsonLogFormatter()

    handler.setFormatter(formatter)

    package_logger = logging.getLogger("multimime")
    package_logger.setLevel(log_level)
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.propagate = False
