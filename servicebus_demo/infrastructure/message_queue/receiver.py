"""
Service Bus Receiver - Callback-Driven Queue Processor

Architecture:
    ServiceBusReceiver (Public API)
        ├── ProcessMessageContext (one delivered message + settlement)
        ├── ProcessErrorContext (one delivery / processing failure)
        └── Processing loop (background asyncio task)

Flow:
    1. Receive up to max_concurrent_calls messages from the queue
    2. Dispatch each message to the message callback concurrently
    3. The callback settles the message (complete) exactly once
    4. Receive and callback failures are routed to the error callback
    5. Repeat until stop() is requested

Lifecycle:
    not started -> running -> stopped (may start again) -> closed

The error callback is informational only: nothing here retries,
dead-letters or re-sends a message. A message whose callback raised before
settling it is abandoned so its lock is released back to the queue.
"""

import asyncio
import sys
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from servicebus_demo.core.config.constants import (
    CONSOLE_MESSAGE_RECEIVED,
    CONSOLE_PROCESSING_ERROR,
    DEFAULT_ERROR_BACKOFF_SECONDS,
    DEFAULT_MAX_CONCURRENT_CALLS,
    DEFAULT_MAX_WAIT_TIME,
    DEFAULT_PREFETCH_COUNT,
    DEFAULT_SHUTDOWN_TIMEOUT_SECONDS,
    ErrorSource,
    Stage,
)
from servicebus_demo.core.config.settings import Settings, get_settings
from servicebus_demo.core.exceptions import ConfigurationError, ProcessorStateError
from servicebus_demo.core.interfaces.message_queue import MessageProcessor, QueueMessage
from servicebus_demo.core.logging.logger import (
    clear_message_id,
    get_logger,
    get_message_id,
    log_stage,
    set_message_id,
)
from servicebus_demo.infrastructure.message_queue.client import build_client, require_setting

logger = get_logger(__name__)


# =============================================================================
# CALLBACK CONTEXTS
# =============================================================================


def to_queue_message(received: Any) -> QueueMessage:
    """Build the SDK-independent view of a received Service Bus message."""
    return QueueMessage(
        id=received.message_id,
        body=str(received),
        content_type=received.content_type,
        delivery_count=received.delivery_count,
        enqueued_time=received.enqueued_time_utc,
    )


class ProcessMessageContext:
    """
    Context handed to the message callback for one delivered message.

    Settlement (complete or abandon) happens at most once; later calls are
    logged and ignored.
    """

    def __init__(self, message: QueueMessage, received: Any, receiver: Any):
        self.message = message
        self._received = received
        self._receiver = receiver
        self._settled = False
        self.failed_settlement: ErrorSource | None = None

    @property
    def settled(self) -> bool:
        return self._settled

    async def complete(self) -> None:
        """Mark the message as consumed so it is removed from the queue."""
        await self._settle(ErrorSource.COMPLETE, self._receiver.complete_message)

    async def abandon(self) -> None:
        """Release the message lock so the message can be delivered again."""
        await self._settle(ErrorSource.ABANDON, self._receiver.abandon_message)

    async def _settle(
        self, source: ErrorSource, operation: Callable[[Any], Awaitable[None]]
    ) -> None:
        if self._settled:
            logger.warning(
                "Message already settled, ignoring",
                stage=Stage.SETTLE,
                operation=source.value,
            )
            return

        try:
            await operation(self._received)
        except Exception:
            self.failed_settlement = source
            raise

        self._settled = True
        logger.debug("Message settled", stage=Stage.SETTLE, operation=source.value)


@dataclass
class ProcessErrorContext:
    """
    Context handed to the error callback for one failure.

    Attributes:
        exception: The error raised by the transport or the message callback
        error_source: Where the error was raised
        entity_path: Queue being processed
        fully_qualified_namespace: Service Bus namespace host, when known
        message_id: ID of the message being processed, None for receive failures
    """
    exception: BaseException
    error_source: ErrorSource
    entity_path: str
    fully_qualified_namespace: str | None = None
    message_id: str | None = None


MessageCallback = Callable[[ProcessMessageContext], Awaitable[None]]
ErrorCallback = Callable[[ProcessErrorContext], Awaitable[None]]


async def print_message(context: ProcessMessageContext) -> None:
    """Default message callback: print the body, then complete the message."""
    print(CONSOLE_MESSAGE_RECEIVED.format(body=context.message.body), flush=True)
    await context.complete()


async def print_error(context: ProcessErrorContext) -> None:
    """Default error callback: print the error and take no further action."""
    print(CONSOLE_PROCESSING_ERROR.format(error=context.exception), file=sys.stderr, flush=True)


# =============================================================================
# PUBLIC API
# =============================================================================


class ServiceBusReceiver(MessageProcessor):
    """
    Continuous background processor for one Service Bus queue.

    Usage:
        receiver = ServiceBusReceiver(connection_string, "demo-queue")
        await receiver.start()
        ...
        await receiver.stop()
        await receiver.close()

        # Build and start in one step
        receiver = await create_receiver(connection_string, "demo-queue")
    """

    def __init__(
        self,
        connection_string: str | None,
        queue_name: str | None,
        process_message: MessageCallback = print_message,
        process_error: ErrorCallback = print_error,
        *,
        max_concurrent_calls: int = DEFAULT_MAX_CONCURRENT_CALLS,
        max_wait_time: float = DEFAULT_MAX_WAIT_TIME,
        prefetch_count: int = DEFAULT_PREFETCH_COUNT,
        error_backoff_seconds: float = DEFAULT_ERROR_BACKOFF_SECONDS,
        shutdown_timeout_seconds: float = DEFAULT_SHUTDOWN_TIMEOUT_SECONDS,
    ):
        """
        Initialize receiver. Processing does not begin until start().

        Args:
            connection_string: Service Bus namespace connection string
            queue_name: Queue to process
            process_message: Called once per delivered message
            process_error: Called once per receive or processing failure
            max_concurrent_calls: Messages dispatched concurrently
            max_wait_time: Seconds a receive call waits for messages
            prefetch_count: SDK prefetch count
            error_backoff_seconds: Pause after a failed receive call
            shutdown_timeout_seconds: How long stop() waits before cancelling

        Raises:
            ConfigurationError: If any argument is missing or invalid
        """
        connection_string = require_setting(connection_string, "SERVICEBUS_CONNECTION_STRING")
        self._queue_name = require_setting(queue_name, "SERVICEBUS_QUEUE_NAME")
        if max_concurrent_calls < 1:
            raise ConfigurationError("max_concurrent_calls must be at least 1").with_context(
                setting="SERVICEBUS_MAX_CONCURRENT_CALLS",
                max_concurrent_calls=max_concurrent_calls,
            )

        self._process_message = process_message
        self._process_error = process_error
        self._max_concurrent_calls = max_concurrent_calls
        self._max_wait_time = max_wait_time
        self._error_backoff_seconds = error_backoff_seconds
        self._shutdown_timeout_seconds = shutdown_timeout_seconds

        self._client = build_client(connection_string)
        self._receiver = self._client.get_queue_receiver(
            queue_name=self._queue_name,
            prefetch_count=prefetch_count,
        )
        self._namespace = getattr(self._client, "fully_qualified_namespace", None)

        # State
        self._task: asyncio.Task | None = None
        self._shutdown_event = asyncio.Event()
        self._closed = False

        log_stage(
            logger,
            Stage.RECEIVER_INIT,
            "Service Bus receiver created",
            queue=self._queue_name,
            max_concurrent_calls=max_concurrent_calls,
            max_wait_time=max_wait_time,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        process_message: MessageCallback = print_message,
        process_error: ErrorCallback = print_error,
    ) -> "ServiceBusReceiver":
        """
        Build a receiver from application settings.

        The receiver is returned idle; await start() (or use it with
        ``async with``) to begin processing.
        """
        sb = (settings or get_settings()).servicebus
        return cls(
            connection_string=sb.SERVICEBUS_CONNECTION_STRING,
            queue_name=sb.SERVICEBUS_QUEUE_NAME,
            process_message=process_message,
            process_error=process_error,
            max_concurrent_calls=sb.SERVICEBUS_MAX_CONCURRENT_CALLS,
            max_wait_time=sb.SERVICEBUS_MAX_WAIT_TIME,
            prefetch_count=sb.SERVICEBUS_PREFETCH_COUNT,
            error_backoff_seconds=sb.SERVICEBUS_ERROR_BACKOFF_SECONDS,
            shutdown_timeout_seconds=sb.SERVICEBUS_SHUTDOWN_TIMEOUT_SECONDS,
        )

    @property
    def queue_name(self) -> str:
        return self._queue_name

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def start(self) -> None:
        """
        Start background processing.

        Returns immediately; processing runs on its own task. Calling start()
        while already running is a no-op.

        Raises:
            ProcessorStateError: If the receiver has been closed
        """
        if self._closed:
            raise ProcessorStateError(
                "Receiver is closed and cannot be started",
                details={"queue": self._queue_name},
            )
        if self.is_running:
            logger.debug("Receiver already running", queue=self._queue_name)
            return

        self._shutdown_event.clear()
        self._task = asyncio.create_task(
            self._run(), name=f"servicebus-receiver-{self._queue_name}"
        )

    async def stop(self) -> None:
        """
        Stop background processing.

        Lets the current batch finish, waiting up to the shutdown timeout
        before cancelling the processing task.
        """
        if self._task is None:
            return

        task = self._task
        self._shutdown_event.set()
        log_stage(logger, Stage.RECEIVER_STOP, "Receiver stop requested", queue=self._queue_name)

        try:
            await asyncio.wait_for(task, timeout=self._shutdown_timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(
                "Receiver shutdown timeout, cancelling task",
                stage=Stage.RECEIVER_STOP,
                timeout_seconds=self._shutdown_timeout_seconds,
            )
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                logger.info("Receiver task cancelled", queue=self._queue_name)
        finally:
            self._task = None

    async def close(self) -> None:
        """
        Stop processing and close the SDK receiver and client.

        Safe to call more than once.
        """
        if self._closed:
            return

        await self.stop()
        self._closed = True

        try:
            await self._receiver.close()
        finally:
            await self._client.close()

        log_stage(logger, Stage.RECEIVER_STOP, "Service Bus receiver closed", queue=self._queue_name)

    async def __aenter__(self) -> "ServiceBusReceiver":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Processing loop
    # -------------------------------------------------------------------------

    async def _run(self) -> None:
        log_stage(
            logger,
            Stage.RECEIVE,
            "Receiver started",
            queue=self._queue_name,
            max_concurrent_calls=self._max_concurrent_calls,
        )

        while not self._shutdown_event.is_set():
            try:
                await self._receive_batch()
            except asyncio.CancelledError:
                logger.info("Receiver loop cancelled", queue=self._queue_name)
                raise
            except Exception as e:
                await self._dispatch_error(e, ErrorSource.RECEIVE)
                await self._wait_for_shutdown(self._error_backoff_seconds)

        log_stage(logger, Stage.RECEIVER_STOP, "Receiver stopped", queue=self._queue_name)

    async def _receive_batch(self) -> None:
        messages = await self._receiver.receive_messages(
            max_message_count=self._max_concurrent_calls,
            max_wait_time=self._max_wait_time,
        )
        if not messages:
            return

        logger.debug("Received messages", stage=Stage.RECEIVE, count=len(messages))
        await asyncio.gather(*(self._dispatch_message(received) for received in messages))

    async def _dispatch_message(self, received: Any) -> None:
        message = to_queue_message(received)
        context = ProcessMessageContext(message, received, self._receiver)
        set_message_id(message.id)

        try:
            logger.debug(
                "Dispatching message",
                stage=Stage.PROCESS_MESSAGE,
                queue=self._queue_name,
                delivery_count=message.delivery_count,
            )
            await self._process_message(context)
        except Exception as e:
            source = context.failed_settlement or ErrorSource.USER_CALLBACK
            await self._dispatch_error(e, source)

            if source is ErrorSource.USER_CALLBACK and not context.settled:
                try:
                    await context.abandon()
                except Exception as abandon_error:
                    await self._dispatch_error(abandon_error, ErrorSource.ABANDON)
        finally:
            clear_message_id()

    async def _dispatch_error(self, exc: BaseException, source: ErrorSource) -> None:
        log_stage(
            logger,
            Stage.PROCESS_ERROR,
            "Message processing error",
            level="error",
            queue=self._queue_name,
            error_source=source.value,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        context = ProcessErrorContext(
            exception=exc,
            error_source=source,
            entity_path=self._queue_name,
            fully_qualified_namespace=self._namespace,
            message_id=get_message_id(),
        )
        try:
            await self._process_error(context)
        except Exception as callback_error:
            logger.error(
                "Error callback failed",
                stage=Stage.ERROR,
                queue=self._queue_name,
                error=str(callback_error),
                error_type=type(callback_error).__name__,
                exc_info=True,
            )

    async def _wait_for_shutdown(self, timeout: float) -> None:
        try:
            await asyncio.wait_for(self._shutdown_event.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            pass


async def create_receiver(
    connection_string: str | None,
    queue_name: str | None,
    process_message: MessageCallback = print_message,
    process_error: ErrorCallback = print_error,
    **options: Any,
) -> ServiceBusReceiver:
    """
    Build a receiver and start processing immediately.

    Returns:
        ServiceBusReceiver: Running receiver
    """
    receiver = ServiceBusReceiver(
        connection_string, queue_name, process_message, process_error, **options
    )
    await receiver.start()
    return receiver
