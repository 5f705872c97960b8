"""Pure state transitions for the multi-step chat workflows.

Each ``advance_*`` function maps ``(state, text)`` to a ``Transition``: the
next state (``None`` ends the workflow), the replies to send, and at most one
effect that needs the task store. Nothing here touches I/O.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import date, datetime, time
from typing import Optional, Union

from taskmaster_bot.bot.labels import (
    CANCEL_KEYBOARD,
    HOURS_KEYBOARD,
    MAIN_MENU_KEYBOARD,
    BotMessages,
    is_cancel,
)
from taskmaster_bot.core.errors import ValidationError
from taskmaster_bot.core.session import ChatSession, CommandState, IssueDraft, WorkflowState
from taskmaster_bot.core.types import CommandKind, TaskCreationStep
from taskmaster_bot.messenger.models import Keyboard

_INT_PATTERN = re.compile(r"\d+")
_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")

MAX_HOURS = 10_000
# Largest value an SQLite INTEGER column holds.
MAX_ID = 2**63 - 1


@dataclass(frozen=True, slots=True)
class Reply:
    text: str
    keyboard: Optional[Keyboard] = None


@dataclass(frozen=True, slots=True)
class ShowEngineers:
    """Send the roster of engineers eligible for assignment.

    ``prompt`` follows the roster only when at least one engineer was listed.
    """

    prompt: Optional[str] = None


@dataclass(frozen=True, slots=True)
class AssignDeveloper:
    developer_id: int
    draft: IssueDraft


@dataclass(frozen=True, slots=True)
class CompleteIssue:
    issue_id: int
    hours: int


@dataclass(frozen=True, slots=True)
class ShowStats:
    developer_id: int


Effect = Union[ShowEngineers, AssignDeveloper, CompleteIssue, ShowStats]


@dataclass(frozen=True, slots=True)
class Transition:
    state: Optional[WorkflowState]
    replies: tuple[Reply, ...] = ()
    effect: Optional[Effect] = None


def parse_count(
    text: str,
    message: str = BotMessages.INVALID_NUMBER_FORMAT,
    limit: int = MAX_ID,
) -> int:
    """Parse a non-negative integer no larger than ``limit`` (ids, hours)."""
    value = text.strip()
    if not _INT_PATTERN.fullmatch(value):
        raise ValidationError(message, f"not a non-negative integer: {text!r}")
    number = int(value)
    if number > limit:
        raise ValidationError(message, f"{number} exceeds {limit}")
    return number


def parse_due_date(text: str) -> datetime:
    """Parse ``YYYY-MM-DD`` into the start of that day in local time."""
    value = text.strip()
    if not _DATE_PATTERN.fullmatch(value):
        raise ValidationError(BotMessages.INVALID_DATE_FORMAT, f"not an ISO date: {text!r}")
    try:
        day = date.fromisoformat(value)
    except ValueError as e:
        raise ValidationError(BotMessages.INVALID_DATE_FORMAT, str(e)) from e
    return datetime.combine(day, time.min).astimezone()


def _stay(state: WorkflowState, text: str, keyboard: Keyboard = CANCEL_KEYBOARD) -> Transition:
    return Transition(state, (Reply(text, keyboard),))


def start_task_creation(chat_id: str) -> Transition:
    return Transition(
        ChatSession(chat_id=chat_id),
        (
            Reply(BotMessages.TASK_CREATION_STARTED),
            Reply(BotMessages.ENTER_TASK_TITLE, CANCEL_KEYBOARD),
        ),
    )


def advance_task_creation(session: ChatSession, text: str) -> Transition:
    if is_cancel(text):
        return Transition(None, (Reply(BotMessages.TASK_CREATION_CANCELLED, MAIN_MENU_KEYBOARD),))

    fields = dict(session.fields)
    fields[session.step.value] = text

    try:
        match session.step:
            case TaskCreationStep.TITLE | TaskCreationStep.DESCRIPTION:
                if not text.strip():
                    return _stay(session, BotMessages.EMPTY_INPUT)
                if session.step is TaskCreationStep.TITLE:
                    draft = replace(session.draft, title=text)
                    step, prompt = TaskCreationStep.DESCRIPTION, BotMessages.ENTER_TASK_DESCRIPTION
                else:
                    draft = replace(session.draft, description=text)
                    step, prompt = TaskCreationStep.ESTIMATION, BotMessages.ENTER_TASK_ESTIMATION
                return _stay(replace(session, step=step, fields=fields, draft=draft), prompt)

            case TaskCreationStep.ESTIMATION:
                estimation = parse_count(text, limit=MAX_HOURS)
                return _stay(
                    replace(
                        session,
                        step=TaskCreationStep.DUE_DATE,
                        fields=fields,
                        draft=replace(session.draft, estimation=estimation),
                    ),
                    BotMessages.ENTER_TASK_DUE_DATE,
                )

            case TaskCreationStep.DUE_DATE:
                due_date = parse_due_date(text)
                return Transition(
                    replace(
                        session,
                        step=TaskCreationStep.DEVELOPER,
                        fields=fields,
                        draft=replace(session.draft, due_date=due_date),
                    ),
                    effect=ShowEngineers(prompt=BotMessages.SELECT_DEVELOPER),
                )

            case TaskCreationStep.DEVELOPER:
                # The engine checks the role and persists; the session stays
                # at DEVELOPER until that succeeds.
                return Transition(session, effect=AssignDeveloper(parse_count(text), session.draft))

    except ValidationError as e:
        return _stay(session, e.user_message)

    raise AssertionError(f"unhandled task creation step: {session.step}")


def start_complete_issue(chat_id: str) -> Transition:
    return Transition(
        CommandState(chat_id=chat_id, command=CommandKind.COMPLETE_ISSUE),
        (Reply(BotMessages.ENTER_ISSUE_ID, CANCEL_KEYBOARD),),
    )


def start_dev_stats_selection(chat_id: str) -> Transition:
    """Manager variant of the stats flow: roster first, then wait for an id."""
    return Transition(
        CommandState(chat_id=chat_id, command=CommandKind.DEV_STATS),
        effect=ShowEngineers(),
    )


_COMMAND_CANCELLED = Transition(None, (Reply(BotMessages.COMMAND_CANCELLED, MAIN_MENU_KEYBOARD),))


def advance_command(state: CommandState, text: str) -> Transition:
    """Route to the transition of the command the chat is in."""
    if state.command is CommandKind.COMPLETE_ISSUE:
        return advance_complete_issue(state, text)
    return advance_dev_stats(state, text)


def advance_complete_issue(state: CommandState, text: str) -> Transition:
    if is_cancel(text):
        return _COMMAND_CANCELLED
    if state.step == 0:
        try:
            issue_id = parse_count(text, BotMessages.INVALID_ISSUE_ID)
        except ValidationError as e:
            return _stay(state, e.user_message)
        return _stay(
            replace(state, step=1, params={**state.params, "issue_id": str(issue_id)}),
            BotMessages.ENTER_HOURS,
            HOURS_KEYBOARD,
        )

    try:
        hours = parse_count(text, BotMessages.INVALID_HOURS, MAX_HOURS)
    except ValidationError as e:
        return _stay(state, e.user_message, HOURS_KEYBOARD)
    return Transition(
        replace(state, step=2, params={**state.params, "hours": str(hours)}),
        effect=CompleteIssue(issue_id=int(state.params["issue_id"]), hours=hours),
    )


def advance_dev_stats(state: CommandState, text: str) -> Transition:
    if is_cancel(text):
        return _COMMAND_CANCELLED
    try:
        developer_id = parse_count(text, BotMessages.INVALID_DEVELOPER_ID)
    except ValidationError as e:
        return _stay(state, e.user_message)
    return Transition(
        replace(state, step=1, params={**state.params, "developer_id": str(developer_id)}),
        effect=ShowStats(developer_id),
    )
