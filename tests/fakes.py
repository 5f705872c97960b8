# tests/fakes.py

from __future__ import annotations

from dataclasses import dataclass, field

from taskmaster_bot.core.errors import TransportError
from taskmaster_bot.messenger.models import OutgoingMessage


@dataclass
class FakeMessenger:
    """
    Recording MessageSender.

    Messages addressed to a chat id listed in ``fail_for`` raise TransportError
    and are not recorded.
    """

    sent: list[OutgoingMessage] = field(default_factory=list)
    fail_for: set[str] = field(default_factory=set)

    async def send_message(self, message: OutgoingMessage) -> None:
        if message.chat_id in self.fail_for:
            raise TransportError(f"simulated failure for {message.chat_id}")
        self.sent.append(message)

    def texts(self, chat_id: str | None = None) -> list[str]:
        return [m.text for m in self.sent if chat_id is None or m.chat_id == chat_id]

    @property
    def last(self) -> OutgoingMessage:
        return self.sent[-1]

    def clear(self) -> None:
        self.sent.clear()
