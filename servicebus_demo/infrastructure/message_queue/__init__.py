"""
Azure Service Bus messaging.

- **sender.py**: ServiceBusSender (one outbound queue channel)
- **receiver.py**: ServiceBusReceiver (callback-driven background processor)
- **client.py**: Client construction and body encoding helpers
"""

from servicebus_demo.infrastructure.message_queue.receiver import (
    ProcessErrorContext,
    ProcessMessageContext,
    ServiceBusReceiver,
    create_receiver,
    print_error,
    print_message,
)
from servicebus_demo.infrastructure.message_queue.sender import ServiceBusSender

__all__ = [
    "ProcessErrorContext",
    "ProcessMessageContext",
    "ServiceBusReceiver",
    "ServiceBusSender",
    "create_receiver",
    "print_error",
    "print_message",
]
