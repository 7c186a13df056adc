from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass
class QueueMessage:
    """
    SDK-independent view of a received message.
    """
    id: str | None
    body: str
    content_type: str | None = None
    delivery_count: int | None = None
    enqueued_time: datetime | None = None


class MessageSender(ABC):
    """
    Outbound channel to a single queue.
    """

    @abstractmethod
    async def send(self, body: Any) -> None:
        """
        Send one message and wait for the service to accept it.

        Args:
            body: Message payload.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the outbound channel."""
        pass


class MessageProcessor(ABC):
    """
    Inbound processing channel that dispatches messages to callbacks.
    """

    @abstractmethod
    async def start(self) -> None:
        """Begin background processing."""
        pass

    @abstractmethod
    async def stop(self) -> None:
        """Stop background processing; the processor may be started again."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Stop processing and release the underlying client."""
        pass

    @property
    @abstractmethod
    def is_running(self) -> bool:
        """Whether background processing is active."""
        pass
