#!/usr/bin/env python3
"""
Application Entry Point

Starts the receiver, sends one message on startup, then keeps the process
alive so the receiver continues processing until SIGINT / SIGTERM.

Usage:
    python -m servicebus_demo
    servicebus-demo
"""

import asyncio
import signal
import sys

from servicebus_demo.core.config.constants import Stage
from servicebus_demo.core.config.settings import Settings, get_settings
from servicebus_demo.core.exceptions import ServiceBusDemoError
from servicebus_demo.core.interfaces.message_queue import MessageProcessor, MessageSender
from servicebus_demo.core.logging import get_logger, setup_logging
from servicebus_demo.infrastructure.message_queue import ServiceBusReceiver, ServiceBusSender

logger = get_logger(__name__)


class ServiceBusDemoApplication:
    """
    Wires the sender and receiver together and owns their lifecycle.

    Lifecycle:
        1. startup(): configure logging, start the receiver, build the sender
        2. run(): send the startup message once
        3. wait until a stop signal arrives
        4. shutdown(): stop the receiver, close both clients

    The sender and receiver may be injected (tests); otherwise they are built
    from settings.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        sender: MessageSender | None = None,
        receiver: MessageProcessor | None = None,
    ):
        self._settings = settings or get_settings()
        self.sender = sender
        self.receiver = receiver

    async def startup(self) -> None:
        """
        Bring up the receiver and the sender.

        Raises:
            ConfigurationError: If connection settings are missing or invalid
        """
        setup_logging(
            log_level=self._settings.logging.LOG_LEVEL,
            log_format=self._settings.logging.LOG_FORMAT,
        )

        logger.info(
            "Starting Service Bus demo",
            stage=Stage.STARTUP,
            environment=self._settings.app.ENVIRONMENT,
            version=self._settings.app.APP_VERSION,
            queue=self._settings.servicebus.SERVICEBUS_QUEUE_NAME,
        )

        if self.receiver is None:
            self.receiver = ServiceBusReceiver.from_settings(self._settings)
        await self.receiver.start()

        if self.sender is None:
            self.sender = ServiceBusSender.from_settings(self._settings)

    async def run(self) -> None:
        """
        Send the startup message once.

        Send failures propagate to the caller.
        """
        message = self._settings.app.STARTUP_MESSAGE
        logger.info("Sending startup message", stage=Stage.RUN)
        await self.sender.send(message)

    async def shutdown(self) -> None:
        """Stop the receiver and close both clients."""
        logger.info("Shutting down Service Bus demo", stage=Stage.SHUTDOWN)

        try:
            if self.receiver is not None:
                await self.receiver.close()
        finally:
            if self.sender is not None:
                await self.sender.close()

        logger.info("Shutdown complete", stage=Stage.SHUTDOWN)

    async def serve(self, stop_event: asyncio.Event | None = None) -> None:
        """
        Start up, send the startup message, and wait for a stop signal.

        Args:
            stop_event: Event that ends serving; SIGINT / SIGTERM set it when
                        none is given
        """
        if stop_event is None:
            stop_event = asyncio.Event()
            _install_signal_handlers(stop_event)

        try:
            await self.startup()
            await self.run()
            await stop_event.wait()
        finally:
            await self.shutdown()


def _install_signal_handlers(stop_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows event loops do not support add_signal_handler
            signal.signal(sig, lambda signum, frame: loop.call_soon_threadsafe(stop_event.set))


def main() -> int:
    """
    Run the demo until interrupted.

    Returns:
        Process exit code: 0 on clean stop, 1 on failure
    """
    try:
        app = ServiceBusDemoApplication()
        asyncio.run(app.serve())
    except ServiceBusDemoError as e:
        logger.error("Startup failed", stage=Stage.ERROR, **e.to_dict())
        print(f"[X] {e.message}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 0
    except Exception as e:
        logger.error(
            "Application failed",
            stage=Stage.ERROR,
            error=str(e),
            error_type=type(e).__name__,
            exc_info=True,
        )
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
