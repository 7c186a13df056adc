"""
Message Queue Exceptions

Errors raised by the sender and receiver wrappers themselves. Transport
failures from the Azure SDK are not wrapped; they propagate unchanged.
"""

from servicebus_demo.core.exceptions.base import ServiceBusDemoError


class QueueError(ServiceBusDemoError):
    """Base exception for message queue errors."""
    pass


class QueueClosedError(QueueError):
    """Raised when sending through a sender that has been closed."""
    pass


class ProcessorStateError(QueueError):
    """
    Raised when a receiver is asked to do something its lifecycle forbids.

    Common causes:
    - start() after close()
    """
    pass
