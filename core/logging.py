"""
Structured logging configuration
Supports both JSON and text formats for different environments

Audit code logs through ``get_logger(__name__, domain="dN")`` and binds the
audit it is working on with ``logger.with_context(url=..., state=...)``.
Both formatters put that context on every line: JSON as top-level keys,
text as a trailing ``[url=... state=...]`` block.
"""
import logging
import sys
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from core.config import settings

# Keys bound by the audit pipeline, in the order text lines show them
AUDIT_CONTEXT_FIELDS = ("url", "state", "error_code")


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def audit_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Audit keys bound on a record, skipping empty ones"""
    context = {}
    for key in AUDIT_CONTEXT_FIELDS:
        value = getattr(record, key, None)
        if value not in (None, ""):
            context[key] = _plain(value)
    return context


class AuditJsonFormatter(jsonlogger.JsonFormatter):
    """One JSON object per record with service metadata and audit context"""

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["app"] = settings.app_name
        log_record["environment"] = settings.environment
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record.update(audit_context(record))

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)


class AuditTextFormatter(logging.Formatter):
    """Readable lines for local development; audit context goes at the end"""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = audit_context(record)
        if not context:
            return line
        return line + " [" + " ".join(f"{key}={value}" for key, value in context.items()) + "]"


def setup_logging() -> None:
    """Configure logging based on environment settings"""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)

    if settings.log_format == "json":
        formatter = AuditJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    else:
        formatter = AuditTextFormatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Playwright and httpx log every request at INFO
    for name in ("uvicorn", "httpx", "asyncio", "playwright"):
        logging.getLogger(name).setLevel(logging.WARNING)


class LoggerAdapter(logging.LoggerAdapter):
    """Adds bound context (domain, audit url and state) to every record"""

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = dict(self.extra)
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs

    def with_context(self, **context) -> "LoggerAdapter":
        """Create a new logger with additional context"""
        new_extra = dict(self.extra)
        new_extra.update({key: _plain(value) for key, value in context.items()})
        return LoggerAdapter(self.logger, new_extra)


def get_logger(name: str, **context) -> LoggerAdapter:
    """
    Get a logger instance with optional context

    Example:
        logger = get_logger(__name__, domain="d5")
        logger.with_context(url=run.url, state=run.state).info("Browser launched")
    """
    return LoggerAdapter(logging.getLogger(name), context)


# Initialize logging on import
setup_logging()
