"""
Azure Service Bus send / receive demo.

Sends one message on startup and prints every message received from the
same queue until the process is stopped.
"""

__version__ = "1.0.0"
