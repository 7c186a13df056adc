from .logger import (
    clear_message_id,
    get_logger,
    get_message_id,
    log_stage,
    redact_text,
    set_message_id,
    setup_logging,
)

__all__ = [
    "clear_message_id",
    "get_logger",
    "get_message_id",
    "log_stage",
    "redact_text",
    "set_message_id",
    "setup_logging",
]
