"""Per-chat workflow state and the store that owns it."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import AsyncIterator, Optional, Union

from taskmaster_bot.core.types import CommandKind, IssueStatus, TaskCreationStep, WorkflowKind
from taskmaster_bot.log import get_logger
from taskmaster_bot.storage.models import Issue

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class IssueDraft:
    """An issue under construction inside a task-creation session."""

    title: str = ""
    description: str = ""
    estimation: Optional[int] = None
    due_date: Optional[datetime] = None
    assignee: Optional[int] = None

    def to_issue(self) -> Issue:
        return Issue(
            title=self.title,
            description=self.description,
            estimation=self.estimation,
            due_date=self.due_date,
            assignee=self.assignee,
            status=IssueStatus.OPEN,
        )


@dataclass(frozen=True, slots=True)
class ChatSession:
    """Task-creation workflow state for one chat."""

    chat_id: str
    step: TaskCreationStep = TaskCreationStep.TITLE
    fields: dict[str, str] = field(default_factory=dict)
    draft: IssueDraft = field(default_factory=IssueDraft)

    @property
    def kind(self) -> WorkflowKind:
        return WorkflowKind.TASK_CREATION


@dataclass(frozen=True, slots=True)
class CommandState:
    """Lighter state for the issue-completion and stats flows."""

    chat_id: str
    command: CommandKind
    params: dict[str, str] = field(default_factory=dict)
    step: int = 0

    @property
    def kind(self) -> WorkflowKind:
        return WorkflowKind(self.command.value)


WorkflowState = Union[ChatSession, CommandState]


class SessionStore:
    """Holds at most one workflow state per chat id.

    Callers must hold ``lock(chat_id)`` for the whole read-check-mutate-write
    of a chat's state; different chats never share a lock. A chat's lock is
    dropped once nobody holds or awaits it and the chat has no state.
    """

    def __init__(self) -> None:
        self._states: dict[str, WorkflowState] = {}
        # chat id -> (lock, number of holders and waiters)
        self._locks: dict[str, tuple[asyncio.Lock, int]] = {}

    @asynccontextmanager
    async def lock(self, chat_id: str) -> AsyncIterator[None]:
        lock, users = self._locks.get(chat_id, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._locks[chat_id] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            _, users = self._locks[chat_id]
            if users == 1 and chat_id not in self._states:
                del self._locks[chat_id]
            else:
                self._locks[chat_id] = (lock, users - 1)

    def get(self, chat_id: str) -> WorkflowState | None:
        return self._states.get(chat_id)

    def put(self, chat_id: str, state: WorkflowState) -> None:
        """Store ``state`` as the chat's only workflow, replacing any other."""
        previous = self._states.get(chat_id)
        self._states[chat_id] = state
        if previous is None or previous.kind != state.kind:
            logger.info("session_started", chat_id=chat_id, kind=state.kind.value)

    def remove(self, chat_id: str) -> WorkflowState | None:
        state = self._states.pop(chat_id, None)
        if state is not None:
            logger.info("session_ended", chat_id=chat_id, kind=state.kind.value)
        return state

    def kind(self, chat_id: str) -> WorkflowKind:
        state = self._states.get(chat_id)
        return state.kind if state is not None else WorkflowKind.NONE

    def __contains__(self, chat_id: object) -> bool:
        return chat_id in self._states

    def __len__(self) -> int:
        return len(self._states)
