"""
Structured Logging Module using structlog

This module provides structured logging with:
- Message ID correlation while a received message is being processed
- Stage tags for the send / receive flow
- JSON formatting for log aggregation
- Automatic redaction of Service Bus shared access keys

Architectural Decision: structlog for production logging
- Context-aware logging with automatic field injection
- JSON output for log aggregation
"""

import logging
import re
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

import structlog
from structlog.types import EventDict, WrappedLogger

from servicebus_demo.core.config.settings import get_settings

# Context variable for the message currently being processed
message_id_ctx: ContextVar[str | None] = ContextVar("message_id", default=None)

_SECRET_PATTERNS = (
    (re.compile(r"(SharedAccessKey=)[^;\s]+", re.IGNORECASE), r"\1[REDACTED]"),
    (re.compile(r"(SharedAccessSignature=?\s*)[^;\s]+", re.IGNORECASE), r"\1[REDACTED]"),
    (re.compile(r"(\bsig=)[^&;\s]+", re.IGNORECASE), r"\1[REDACTED]"),
)


def add_message_id(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add message ID to log event from context variable.

    STAGE-L.1: Message ID injection
    """
    message_id = message_id_ctx.get()
    if message_id:
        event_dict.setdefault("message_id", message_id)
    return event_dict


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add ISO timestamp to log event.

    STAGE-L.2: Timestamp injection
    """
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    return event_dict


def redact_text(text: str) -> str:
    """Mask shared access keys and signatures in ``text``."""
    for pattern, replacement in _SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def _redact_value(value: Any) -> Any:
    if isinstance(value, str):
        return redact_text(value)
    if isinstance(value, dict):
        return {key: _redact_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_redact_value(item) for item in value]
    if isinstance(value, tuple):
        return tuple(_redact_value(item) for item in value)
    return value


def redact_secrets(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Redact Service Bus credentials from log events.

    STAGE-L.3: Secret redaction

    Connection strings carry ``SharedAccessKey=...`` and SAS tokens carry
    ``SharedAccessSignature ...&sig=...``; both are masked in the event
    message and in every string field, including strings nested in dicts,
    lists and tuples (e.g. exception ``details``).
    """
    for key, value in event_dict.items():
        event_dict[key] = _redact_value(value)
    return event_dict


def add_log_level_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add log level name to event dict.

    STAGE-L.4: Log level injection
    """
    if "level" in event_dict:
        event_dict["level"] = event_dict["level"].upper()
    return event_dict


def setup_logging(log_level: str | None = None, log_format: str | None = None) -> None:
    """
    Setup structured logging with structlog.

    STAGE-L: Logging initialization

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format ('json' or 'console')
    """
    settings = get_settings()

    log_level = log_level or settings.logging.LOG_LEVEL
    log_format = log_format or settings.logging.LOG_FORMAT

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s", stream=sys.stdout, level=getattr(logging, log_level.upper())
    )

    # The Azure SDK and its AMQP transport are chatty at INFO
    logging.getLogger("azure").setLevel(logging.WARNING)

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_message_id,
            add_timestamp,
            structlog.stdlib.add_log_level,
            add_log_level_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            redact_secrets,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Usage:
        logger = get_logger(__name__)
        logger.info("message", key="value", stage=Stage.SEND)
    """
    return structlog.get_logger(name)


def set_message_id(message_id: str | None) -> None:
    """Set the ID of the message being processed in the current context."""
    message_id_ctx.set(message_id)


def get_message_id() -> str | None:
    """Get the ID of the message being processed, if any."""
    return message_id_ctx.get()


def clear_message_id() -> None:
    """Clear the message ID from the current context."""
    message_id_ctx.set(None)


def log_stage(
    logger: structlog.stdlib.BoundLogger, stage: str, message: str, level: str = "info", **kwargs
) -> None:
    """
    Log a message with stage information.

    Usage:
        log_stage(logger, Stage.SEND, "Message sent", queue="demo")
    """
    log_func = getattr(logger, level.lower())
    log_func(message, stage=stage, **kwargs)
