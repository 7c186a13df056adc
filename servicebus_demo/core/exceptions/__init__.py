"""
Exception Module

- **base.py**: ServiceBusDemoError base class + ConfigurationError
- **queue.py**: Sender / receiver lifecycle errors

Usage:
------
```python
from servicebus_demo.core.exceptions import ConfigurationError, QueueClosedError
```
"""

from servicebus_demo.core.exceptions.base import ConfigurationError, ServiceBusDemoError
from servicebus_demo.core.exceptions.queue import (
    ProcessorStateError,
    QueueClosedError,
    QueueError,
)

__all__ = [
    # Base
    "ServiceBusDemoError",
    "ConfigurationError",
    # Queue
    "QueueError",
    "QueueClosedError",
    "ProcessorStateError",
]
