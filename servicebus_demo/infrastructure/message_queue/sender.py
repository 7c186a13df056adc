"""
Service Bus Sender

Opens one outbound channel to a named queue and sends single messages.

Flow:
    1. Wrap the body in a ServiceBusMessage with the configured content type
    2. Await send_messages until the service acknowledges receipt
    3. Print "Message sent: {body}"

Failures raised by the SDK (authentication, missing queue, oversized
payload, network) are logged and re-raised unchanged. Nothing is retried
here; the SDK's own retry policy is the only resilience layer.
"""

from azure.servicebus import ServiceBusMessage

from servicebus_demo.core.config.constants import (
    CONSOLE_MESSAGE_SENT,
    CONTENT_TYPE_JSON,
    Stage,
)
from servicebus_demo.core.config.settings import Settings, get_settings
from servicebus_demo.core.exceptions import QueueClosedError
from servicebus_demo.core.interfaces.message_queue import MessageSender
from servicebus_demo.core.logging.logger import get_logger, log_stage
from servicebus_demo.infrastructure.message_queue.client import (
    MessageBody,
    build_client,
    display_body,
    encode_body,
    require_setting,
)

logger = get_logger(__name__)


class ServiceBusSender(MessageSender):
    """
    Sender wrapping an Azure Service Bus queue sender.

    Usage:
        sender = ServiceBusSender(connection_string, "demo-queue")
        await sender.send("Hello, Service Bus!")
        await sender.close()

        # Or as a context manager
        async with ServiceBusSender.from_settings() as sender:
            await sender.send({"event": "hello"})
    """

    def __init__(
        self,
        connection_string: str | None,
        queue_name: str | None,
        content_type: str = CONTENT_TYPE_JSON,
    ):
        """
        Initialize sender.

        Args:
            connection_string: Service Bus namespace connection string
            queue_name: Target queue
            content_type: Content type set on every outgoing message

        Raises:
            ConfigurationError: If any argument is missing or invalid
        """
        connection_string = require_setting(connection_string, "SERVICEBUS_CONNECTION_STRING")
        self._queue_name = require_setting(queue_name, "SERVICEBUS_QUEUE_NAME")
        self._content_type = require_setting(content_type, "SERVICEBUS_CONTENT_TYPE")

        self._client = build_client(connection_string)
        self._sender = self._client.get_queue_sender(queue_name=self._queue_name)
        self._closed = False

        log_stage(
            logger,
            Stage.SENDER_INIT,
            "Service Bus sender created",
            queue=self._queue_name,
            content_type=self._content_type,
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ServiceBusSender":
        """Build a sender from application settings."""
        sb = (settings or get_settings()).servicebus
        return cls(
            connection_string=sb.SERVICEBUS_CONNECTION_STRING,
            queue_name=sb.SERVICEBUS_QUEUE_NAME,
            content_type=sb.SERVICEBUS_CONTENT_TYPE,
        )

    @property
    def queue_name(self) -> str:
        return self._queue_name

    @property
    def content_type(self) -> str:
        return self._content_type

    async def send(self, body: MessageBody) -> None:
        """
        Send one message and wait for the service to accept it.

        Args:
            body: str, bytes, or a JSON-serializable dict/list

        Raises:
            QueueClosedError: If the sender has been closed
            TypeError: If the body type is not supported
            ServiceBusError: Any transport failure, unchanged
        """
        if self._closed:
            raise QueueClosedError(
                "Sender is closed", details={"queue": self._queue_name}
            )

        message = ServiceBusMessage(encode_body(body), content_type=self._content_type)

        try:
            await self._sender.send_messages(message)
        except Exception as e:
            logger.error(
                "Failed to send message",
                stage=Stage.ERROR,
                queue=self._queue_name,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        text = display_body(body)
        log_stage(
            logger,
            Stage.SEND,
            "Message sent",
            queue=self._queue_name,
            message_id=message.message_id,
        )
        print(CONSOLE_MESSAGE_SENT.format(body=text), flush=True)

    async def close(self) -> None:
        """
        Close the queue sender and its client.

        Safe to call more than once.
        """
        if self._closed:
            return
        self._closed = True

        try:
            await self._sender.close()
        finally:
            await self._client.close()

        log_stage(logger, Stage.SENDER_CLOSE, "Service Bus sender closed", queue=self._queue_name)

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def __aenter__(self) -> "ServiceBusSender":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
