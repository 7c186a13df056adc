"""
System Constants and Enumerations

This module defines the constants and enumerations shared by the sender,
the receiver and the application entry point.

Architectural Decision: Centralized constants for maintainability
- Single source of truth for the console output contract
- Type-safe enums for log stages and error sources
"""

from enum import Enum

# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================


class Stage(str, Enum):
    """
    Processing stages used as the ``stage`` field of log entries.

    Format: {PREFIX}.{SEQUENCE}_{DESCRIPTIVE_NAME}
    """

    # Application lifecycle
    STARTUP = "APP.0_STARTUP"
    RUN = "APP.1_RUN"
    SHUTDOWN = "APP.2_SHUTDOWN"

    # Sender
    SENDER_INIT = "SB.S0_SENDER_INIT"
    SEND = "SB.S1_SEND"
    SENDER_CLOSE = "SB.S2_SENDER_CLOSE"

    # Receiver / processor
    RECEIVER_INIT = "SB.R0_RECEIVER_INIT"
    RECEIVE = "SB.R1_RECEIVE"
    PROCESS_MESSAGE = "SB.R2_PROCESS_MESSAGE"
    SETTLE = "SB.R3_SETTLE"
    PROCESS_ERROR = "SB.R4_PROCESS_ERROR"
    RECEIVER_STOP = "SB.R5_RECEIVER_STOP"

    ERROR = "SB.ERR"


# ============================================================================
# Error Sources
# ============================================================================


class ErrorSource(str, Enum):
    """
    Where a processing error was raised.

    RECEIVE: pulling messages from the queue failed
    USER_CALLBACK: the message callback raised
    COMPLETE: settling a message (complete) failed
    ABANDON: releasing a message lock (abandon) failed
    """

    RECEIVE = "receive"
    USER_CALLBACK = "user_callback"
    COMPLETE = "complete"
    ABANDON = "abandon"


# ============================================================================
# Message Defaults
# ============================================================================

CONTENT_TYPE_JSON = "application/json"
DEFAULT_STARTUP_MESSAGE = "Hello, Service Bus!"

# ============================================================================
# Receiver Defaults
# ============================================================================

DEFAULT_MAX_CONCURRENT_CALLS = 1
DEFAULT_MAX_WAIT_TIME = 5  # Seconds a single receive call waits for messages
DEFAULT_PREFETCH_COUNT = 0
DEFAULT_ERROR_BACKOFF_SECONDS = 5.0  # Pause after a failed receive call
# Longer than DEFAULT_MAX_WAIT_TIME so an idle stop() lets the pending receive return
DEFAULT_SHUTDOWN_TIMEOUT_SECONDS = 15.0

# ============================================================================
# Console Output Contract
# ============================================================================

CONSOLE_MESSAGE_SENT = "Message sent: {body}"
CONSOLE_MESSAGE_RECEIVED = "Message Received: {body}"
CONSOLE_PROCESSING_ERROR = "Message Processing Error: {error}"
