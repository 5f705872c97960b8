"""Abstract service lifecycle interface."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Service(ABC):
    """Base class for background services started alongside the bot."""

    @property
    @abstractmethod
    def service_name(self) -> str:
        ...

    @abstractmethod
    async def start(self) -> None:
        """Begin background work. Must be called from a running event loop."""
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Stop background work; in-flight jobs may be abandoned."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        ...
