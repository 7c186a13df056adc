"""
Service Bus Client Construction

Shared helpers for building the Azure Service Bus client used by the sender
and the receiver. Each wrapper owns its own client; nothing here is cached.
"""

from typing import Any

import orjson
from azure.servicebus.aio import ServiceBusClient

from servicebus_demo.core.config.constants import Stage
from servicebus_demo.core.exceptions import ConfigurationError
from servicebus_demo.core.logging.logger import get_logger

logger = get_logger(__name__)

MessageBody = str | bytes | dict[str, Any] | list[Any]


def require_setting(value: str | None, name: str) -> str:
    """
    Return ``value`` stripped, or fail fast when it is missing or blank.

    Raises:
        ConfigurationError: If the value is None, empty or whitespace
    """
    if value is None or not str(value).strip():
        raise (
            ConfigurationError(f"{name} is required")
            .with_context(setting=name)
            .with_suggestion(f"Set the {name} environment variable or add it to .env")
        )
    return str(value).strip()


def build_client(connection_string: str) -> ServiceBusClient:
    """
    Create an async Service Bus client from a connection string.

    Raises:
        ConfigurationError: If the connection string cannot be parsed
    """
    try:
        return ServiceBusClient.from_connection_string(connection_string)
    except ValueError as e:
        logger.error("Invalid Service Bus connection string", stage=Stage.ERROR, error=str(e))
        raise ConfigurationError.from_exception(
            e, "Invalid Service Bus connection string", setting="SERVICEBUS_CONNECTION_STRING"
        ) from e


def encode_body(body: MessageBody) -> str | bytes:
    """
    Convert a message body into a Service Bus payload.

    str and bytes are sent unchanged; mappings and lists are serialized to
    JSON bytes.
    """
    if isinstance(body, (str, bytes)):
        return body
    if isinstance(body, (dict, list)):
        return orjson.dumps(body)
    raise TypeError(f"Unsupported message body type: {type(body).__name__}")


def display_body(body: MessageBody) -> str:
    """Render a message body as text for console output."""
    if isinstance(body, str):
        return body
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    return orjson.dumps(body).decode("utf-8")
