"""
Unit Tests for the Service Bus Sender

Tests envelope construction, console output, failure propagation and
configuration validation with the Service Bus SDK patched out.
"""

from unittest.mock import patch

import pytest
from azure.servicebus.exceptions import ServiceBusError

from servicebus_demo.core.config.constants import Stage
from servicebus_demo.core.config.settings import Settings
from servicebus_demo.core.exceptions import ConfigurationError, QueueClosedError
from servicebus_demo.infrastructure.message_queue.sender import ServiceBusSender


@pytest.mark.unit
class TestServiceBusSenderSend:
    """Test suite for ServiceBusSender.send."""

    @pytest.mark.asyncio
    async def test_send_enqueues_one_message_with_json_content_type(
        self, mock_servicebus_client, connection_string, capsys
    ):
        """Test a successful send submits exactly one envelope and prints confirmation."""
        sender = ServiceBusSender(connection_string, "test-queue")

        await sender.send("Hello, Service Bus!")

        queue_sender = mock_servicebus_client.get_queue_sender.return_value
        queue_sender.send_messages.assert_awaited_once()
        message = queue_sender.send_messages.call_args[0][0]
        assert str(message) == "Hello, Service Bus!"
        assert message.content_type == "application/json"

        captured = capsys.readouterr()
        assert "Message sent: Hello, Service Bus!\n" in captured.out

    @pytest.mark.asyncio
    async def test_send_logs_send_stage(self, mock_servicebus_client, connection_string):
        """Test a successful send is logged under the SEND stage."""
        sender = ServiceBusSender(connection_string, "test-queue")

        with patch("servicebus_demo.infrastructure.message_queue.sender.log_stage") as mock_log:
            await sender.send("Hello, Service Bus!")

        stages = [c.args[1] for c in mock_log.call_args_list]
        assert stages == [Stage.SEND]
        assert mock_log.call_args.kwargs["queue"] == "test-queue"

    @pytest.mark.asyncio
    async def test_send_opens_sender_for_configured_queue(
        self, mock_servicebus_client, connection_string
    ):
        """Test the queue sender is opened once, for the configured queue."""
        ServiceBusSender(connection_string, "orders")

        mock_servicebus_client.client_class.from_connection_string.assert_called_once_with(
            connection_string
        )
        mock_servicebus_client.get_queue_sender.assert_called_once_with(queue_name="orders")

    @pytest.mark.asyncio
    async def test_send_failure_propagates_and_prints_nothing(
        self, mock_servicebus_client, connection_string, capsys
    ):
        """Test a transport failure is raised unchanged and no confirmation is printed."""
        error = ServiceBusError("Queue not found")
        queue_sender = mock_servicebus_client.get_queue_sender.return_value
        queue_sender.send_messages.side_effect = error

        sender = ServiceBusSender(connection_string, "test-queue")

        with pytest.raises(ServiceBusError) as exc_info:
            await sender.send("Hello, Service Bus!")

        assert exc_info.value is error
        queue_sender.send_messages.assert_awaited_once()
        assert "Message sent" not in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_send_dict_body_is_serialized_as_json(
        self, mock_servicebus_client, connection_string, capsys
    ):
        """Test mapping bodies are sent as JSON."""
        sender = ServiceBusSender(connection_string, "test-queue")

        await sender.send({"event": "hello", "count": 1})

        message = mock_servicebus_client.get_queue_sender.return_value.send_messages.call_args[0][0]
        assert str(message) == '{"event":"hello","count":1}'
        assert 'Message sent: {"event":"hello","count":1}' in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_send_uses_custom_content_type(self, mock_servicebus_client, connection_string):
        """Test the content type tag is configurable."""
        sender = ServiceBusSender(connection_string, "test-queue", content_type="text/plain")

        await sender.send("plain text")

        message = mock_servicebus_client.get_queue_sender.return_value.send_messages.call_args[0][0]
        assert message.content_type == "text/plain"

    @pytest.mark.asyncio
    async def test_send_unsupported_body_raises_type_error(
        self, mock_servicebus_client, connection_string
    ):
        """Test unsupported body types are rejected before anything is sent."""
        sender = ServiceBusSender(connection_string, "test-queue")

        with pytest.raises(TypeError):
            await sender.send(42)

        mock_servicebus_client.get_queue_sender.return_value.send_messages.assert_not_awaited()


@pytest.mark.unit
class TestServiceBusSenderLifecycle:
    """Test sender close and context manager behaviour."""

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, mock_servicebus_client, connection_string):
        """Test close releases the sender and client exactly once."""
        sender = ServiceBusSender(connection_string, "test-queue")

        await sender.close()
        await sender.close()

        mock_servicebus_client.get_queue_sender.return_value.close.assert_awaited_once()
        mock_servicebus_client.close.assert_awaited_once()
        assert sender.is_closed

    @pytest.mark.asyncio
    async def test_send_after_close_raises(self, mock_servicebus_client, connection_string):
        """Test sending through a closed sender fails without touching the SDK."""
        sender = ServiceBusSender(connection_string, "test-queue")
        await sender.close()

        with pytest.raises(QueueClosedError):
            await sender.send("too late")

        mock_servicebus_client.get_queue_sender.return_value.send_messages.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_context_manager_closes_sender(self, mock_servicebus_client, connection_string):
        """Test async with closes the sender on exit."""
        async with ServiceBusSender(connection_string, "test-queue") as sender:
            await sender.send("inside")

        assert sender.is_closed
        mock_servicebus_client.close.assert_awaited_once()


@pytest.mark.unit
class TestServiceBusSenderConfiguration:
    """Test fail-fast configuration validation."""

    @pytest.mark.parametrize("queue_name", [None, "", "   "])
    def test_missing_queue_name_fails_fast(
        self, mock_servicebus_client, connection_string, queue_name
    ):
        """Test a missing queue name fails before any client is built."""
        with pytest.raises(ConfigurationError) as exc_info:
            ServiceBusSender(connection_string, queue_name)

        assert exc_info.value.details["setting"] == "SERVICEBUS_QUEUE_NAME"
        mock_servicebus_client.client_class.from_connection_string.assert_not_called()

    @pytest.mark.parametrize("conn_str", [None, "", "  "])
    def test_missing_connection_string_fails_fast(self, mock_servicebus_client, conn_str):
        """Test a missing connection string fails before any client is built."""
        with pytest.raises(ConfigurationError) as exc_info:
            ServiceBusSender(conn_str, "test-queue")

        assert exc_info.value.details["setting"] == "SERVICEBUS_CONNECTION_STRING"
        assert "suggestion" in exc_info.value.details
        mock_servicebus_client.client_class.from_connection_string.assert_not_called()

    def test_malformed_connection_string_is_configuration_error(self, mock_servicebus_client):
        """Test an unparsable connection string surfaces as ConfigurationError."""
        mock_servicebus_client.client_class.from_connection_string.side_effect = ValueError(
            "Invalid connection string"
        )

        with pytest.raises(ConfigurationError) as exc_info:
            ServiceBusSender("not-a-connection-string", "test-queue")

        assert exc_info.value.details["original_error"] == "ValueError"
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_from_settings(self, mock_servicebus_client, connection_string):
        """Test the sender is built from settings values."""
        settings = Settings(
            SERVICEBUS_CONNECTION_STRING=connection_string,
            SERVICEBUS_QUEUE_NAME="settings-queue",
            SERVICEBUS_CONTENT_TYPE="text/plain",
        )

        sender = ServiceBusSender.from_settings(settings)

        assert sender.queue_name == "settings-queue"
        assert sender.content_type == "text/plain"

    def test_from_settings_without_connection_string_fails(self, mock_servicebus_client):
        """Test unset settings fail fast at construction."""
        settings = Settings(SERVICEBUS_QUEUE_NAME="settings-queue")

        with pytest.raises(ConfigurationError):
            ServiceBusSender.from_settings(settings)
