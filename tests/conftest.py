"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import os
import sys
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

# Add project root to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from tests.test_fixtures import (  # noqa: E402
    TEST_CONNECTION_STRING,
    InMemoryServiceBus,
    ServiceBusTestFactory,
)

CLIENT_PATCH_TARGET = "servicebus_demo.infrastructure.message_queue.client.ServiceBusClient"

_ENV_KEYS = (
    "SERVICEBUS_CONNECTION_STRING",
    "AZURE_SERVICEBUS_CONNECTION_STRING",
    "SERVICEBUS_QUEUE_NAME",
    "SERVICEBUS_CONTENT_TYPE",
    "SERVICEBUS_MAX_CONCURRENT_CALLS",
    "SERVICEBUS_MAX_WAIT_TIME",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "STARTUP_MESSAGE",
)


# ============================================================================
# Environment Isolation
# ============================================================================


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """
    Remove Service Bus variables from the environment and reset the
    settings singleton so every test starts from defaults.
    """
    import servicebus_demo.core.config.settings as settings_module

    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(settings_module, "_settings", None)
    yield
    settings_module._settings = None


# ============================================================================
# Mock Configuration Fixtures
# ============================================================================


@pytest.fixture
def connection_string():
    """A syntactically valid connection string for a fake namespace."""
    return TEST_CONNECTION_STRING


@pytest.fixture
def test_settings(connection_string):
    """Settings pointing at a test queue with fast receive timings."""
    from servicebus_demo.core.config.settings import Settings

    return Settings(
        SERVICEBUS_CONNECTION_STRING=connection_string,
        SERVICEBUS_QUEUE_NAME="test-queue",
        SERVICEBUS_MAX_WAIT_TIME=0.05,
        SERVICEBUS_ERROR_BACKOFF_SECONDS=0.01,
        SERVICEBUS_SHUTDOWN_TIMEOUT_SECONDS=1.0,
        LOG_LEVEL="DEBUG",
        LOG_FORMAT="console",
    )


# ============================================================================
# Mock Infrastructure Fixtures
# ============================================================================


@pytest.fixture
def mock_servicebus_client():
    """
    Patch ServiceBusClient so no network connection is attempted.

    Yields the client returned by ServiceBusClient.from_connection_string,
    with async mocks for the queue sender and queue receiver it hands out.
    """
    with patch(CLIENT_PATCH_TARGET) as mock_client_cls:
        client = MagicMock()
        client.close = AsyncMock()
        client.fully_qualified_namespace = "test-namespace.servicebus.windows.net"

        sender = MagicMock()
        sender.send_messages = AsyncMock()
        sender.close = AsyncMock()
        client.get_queue_sender.return_value = sender

        receiver = MagicMock()
        # Idle receives pause briefly, like the SDK waiting for max_wait_time
        receiver.receive_messages = AsyncMock(side_effect=ServiceBusTestFactory.scripted_receive())
        receiver.complete_message = AsyncMock()
        receiver.abandon_message = AsyncMock()
        receiver.close = AsyncMock()
        client.get_queue_receiver.return_value = receiver

        mock_client_cls.from_connection_string.return_value = client
        client.client_class = mock_client_cls
        yield client


@pytest.fixture
def in_memory_bus():
    """
    Patch ServiceBusClient with an in-memory namespace.

    Every client built while the fixture is active shares the same queues,
    so a sender and a receiver on one queue name talk to each other.
    """
    bus = InMemoryServiceBus()
    with patch(CLIENT_PATCH_TARGET) as mock_client_cls:
        mock_client_cls.from_connection_string.side_effect = lambda conn_str, **kwargs: bus.client()
        yield bus


@pytest.fixture
def recording_error_callback():
    """Error callback that records every ProcessErrorContext it receives."""
    contexts = []

    async def callback(context):
        contexts.append(context)

    callback.contexts = contexts
    return callback
