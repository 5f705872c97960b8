"""Message models exchanged between the engine and messenger adapters."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from taskmaster_bot.core.types import Platform

Keyboard = tuple[tuple[str, ...], ...]


@dataclass(frozen=True, slots=True)
class IncomingMessage:
    platform: Platform
    bot_id: str
    chat_id: str
    user_id: str  # external id used to resolve the User record
    user_display_name: str
    text: str
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class OutgoingMessage:
    chat_id: str
    text: str
    keyboard: Optional[Keyboard] = None  # reply keyboard rows of button labels
