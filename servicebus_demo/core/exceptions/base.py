"""
Base Exception Class

This module contains the base exception class that all other exceptions
inherit from, plus ConfigurationError.
"""

from typing import Any


class ServiceBusDemoError(Exception):
    """
    Base exception for all Service Bus demo errors.

    Attributes:
        message: Error message
        message_id: ID of the Service Bus message involved (if any)
        details: Additional error details (dict)

    Example:
        raise ConfigurationError(
            "Queue name is required",
            details={"setting": "SERVICEBUS_QUEUE_NAME"}
        )
    """

    def __init__(
        self, message: str, message_id: str | None = None, details: dict[str, Any] | None = None
    ):
        self.message = message
        self.message_id = message_id
        self.details = (details or {}).copy()
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for logging.

        Returns:
            Dict with error_type, message, message_id, and details
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "message_id": self.message_id,
            "details": self.details,
        }

    def with_suggestion(self, suggestion: str) -> "ServiceBusDemoError":
        """Add a suggestion to help users fix the error."""
        self.details["suggestion"] = suggestion
        return self

    def with_context(self, **context) -> "ServiceBusDemoError":
        """Add additional context to the error details."""
        self.details.update(context)
        return self

    def __repr__(self) -> str:
        details_str = f", details={self.details}" if self.details else ""
        message_id_str = f", message_id='{self.message_id}'" if self.message_id else ""
        return f"{self.__class__.__name__}(message='{self.message}'{message_id_str}{details_str})"

    @classmethod
    def from_exception(
        cls,
        exc: Exception,
        message: str | None = None,
        message_id: str | None = None,
        **details
    ) -> "ServiceBusDemoError":
        """
        Create an error from another exception.

        Useful for wrapping SDK exceptions with additional context.

        Example:
            >>> try:
            ...     ServiceBusClient.from_connection_string(conn_str)
            ... except ValueError as e:
            ...     raise ConfigurationError.from_exception(
            ...         e, "Invalid Service Bus connection string"
            ...     ) from e
        """
        error_message = message or str(exc)
        error_details = {
            "original_error": exc.__class__.__name__,
            "original_message": str(exc),
            **details
        }
        return cls(error_message, message_id=message_id, details=error_details)


class ConfigurationError(ServiceBusDemoError):
    """Raised when configuration is invalid or missing."""
    pass
