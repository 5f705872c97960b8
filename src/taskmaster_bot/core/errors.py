"""Error taxonomy shared by the conversation engine and the alert dispatcher."""

from __future__ import annotations


class TaskBotError(Exception):
    """Base class for all taskmaster-bot errors."""


class WorkflowError(TaskBotError):
    """An error that is reported back to the chat that caused it.

    ``user_message`` is the only text the user ever sees; ``str(error)`` may
    carry more detail for the logs.
    """

    def __init__(self, user_message: str, detail: str | None = None):
        super().__init__(detail or user_message)
        self.user_message = user_message


class ValidationError(WorkflowError):
    """Malformed numeric or date input. Recovered by re-prompting."""


class AuthorizationError(WorkflowError):
    """Role mismatch or wrong assignee."""


class NotFoundError(WorkflowError):
    """Unknown user, issue, or alert target."""


class TransportError(TaskBotError):
    """A message could not be delivered."""
