"""Abstract messenger adapter interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Protocol

from taskmaster_bot.messenger.models import IncomingMessage, OutgoingMessage


class MessageSender(Protocol):
    """Outbound capability injected into the engine and the alert dispatcher.

    ``send_message`` raises TransportError when the message is not delivered.
    """

    async def send_message(self, message: OutgoingMessage) -> None: ...


class MessengerAdapter(ABC):
    """Base class for messenger platform adapters.

    An adapter is both the inbound event source (``on_message``) and the
    outbound sender.
    """

    def __init__(self, bot_id: str, config: dict):
        self.bot_id = bot_id
        self.config = config
        self._message_callback: Callable[[IncomingMessage], Awaitable[None]] | None = None

    @abstractmethod
    async def connect(self) -> None:
        """Prepare for sending without receiving messages."""
        ...

    @abstractmethod
    async def start(self) -> None:
        """Connect to the platform and begin receiving messages."""
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Gracefully disconnect."""
        ...

    @abstractmethod
    async def send_message(self, message: OutgoingMessage) -> None:
        """Send a message to a chat. Raises TransportError on failure."""
        ...

    def on_message(self, callback: Callable[[IncomingMessage], Awaitable[None]]) -> None:
        """Register the callback invoked for every incoming message."""
        self._message_callback = callback

    @property
    @abstractmethod
    def platform_name(self) -> str:
        """Return platform identifier string."""
        ...
