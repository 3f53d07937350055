"""JSON logging configuration for the Chattalyst webhook API."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any


class JSONFormatter(logging.Formatter):
    """Format log records as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "context") and record.context:
            log_data["context"] = record.context

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO") -> None:
    """Configure JSON logging for the application."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    root_logger.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    return logging.getLogger(f"chattalyst.{name}")


class RequestLogger(logging.LoggerAdapter):
    """Logger adapter that stamps every record with the webhook request context.

    Per-call context, given either as ``extra={"context": {...}}`` or as a
    ``context`` keyword, is merged over the adapter's own ``extra`` so a single
    ``request_id`` follows the message through every processing stage.
    """

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        call_context = extra.pop("context", None) or {}
        context = kwargs.pop("context", None) or {}
        combined_context = {**self.extra, **call_context, **context}
        if combined_context:
            extra["context"] = combined_context
        kwargs["extra"] = extra
        return msg, kwargs


def request_logger(name: str, request_id: str, **context: Any) -> RequestLogger:
    return RequestLogger(get_logger(name), {"request_id": request_id, **context})
