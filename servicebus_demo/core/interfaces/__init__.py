"""
Core Interfaces Module

Abstract interfaces for the messaging components, enabling dependency
injection and testing with fakes.

Components:
-----------
- **message_queue.py**: QueueMessage, MessageSender and MessageProcessor

Usage:
------
```python
from servicebus_demo.core.interfaces import MessageSender

async def announce(sender: MessageSender):
    await sender.send("Hello, Service Bus!")
```
"""

from servicebus_demo.core.interfaces.message_queue import (
    MessageProcessor,
    MessageSender,
    QueueMessage,
)

__all__ = [
    "MessageProcessor",
    "MessageSender",
    "QueueMessage",
]
