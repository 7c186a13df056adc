"""
Test Fixtures Package

Shared test utilities and helpers for consistent testing across all modules.
"""

from .servicebus_factory import (
    TEST_CONNECTION_STRING,
    FakeReceivedMessage,
    InMemoryServiceBus,
    ServiceBusTestFactory,
    wait_until,
)

__all__ = [
    "TEST_CONNECTION_STRING",
    "FakeReceivedMessage",
    "InMemoryServiceBus",
    "ServiceBusTestFactory",
    "wait_until",
]
