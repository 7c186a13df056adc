"""
Configuration Module

Components:
-----------
- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: Console output contract, defaults and enums

Environment Variables:
---------------------
```bash
SERVICEBUS_CONNECTION_STRING=Endpoint=sb://<namespace>.servicebus.windows.net/;...
SERVICEBUS_QUEUE_NAME=demo-queue
SERVICEBUS_CONTENT_TYPE=application/json

LOG_LEVEL=INFO
LOG_FORMAT=json
```

Testing:
-------
```python
import os
from servicebus_demo.core.config import reload_settings

os.environ["SERVICEBUS_QUEUE_NAME"] = "test-queue"
settings = reload_settings()
assert settings.servicebus.SERVICEBUS_QUEUE_NAME == "test-queue"
```
"""

from servicebus_demo.core.config.constants import (
    CONSOLE_MESSAGE_RECEIVED,
    CONSOLE_MESSAGE_SENT,
    CONSOLE_PROCESSING_ERROR,
    CONTENT_TYPE_JSON,
    DEFAULT_STARTUP_MESSAGE,
    ErrorSource,
    Stage,
)
from servicebus_demo.core.config.settings import Settings, get_settings, reload_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "reload_settings",
    # Enums
    "Stage",
    "ErrorSource",
    # Message defaults
    "CONTENT_TYPE_JSON",
    "DEFAULT_STARTUP_MESSAGE",
    # Console contract
    "CONSOLE_MESSAGE_SENT",
    "CONSOLE_MESSAGE_RECEIVED",
    "CONSOLE_PROCESSING_ERROR",
]
