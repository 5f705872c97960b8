"""Shared types and enumerations."""

from __future__ import annotations

from enum import IntEnum, StrEnum


class Platform(StrEnum):
    TELEGRAM = "telegram"


class Role(StrEnum):
    PROJECT_MANAGER = "Project Manager"
    ENGINEER = "Engineer"


class IssueStatus(IntEnum):
    OPEN = 0
    COMPLETED = 1


class AlertStatus(StrEnum):
    PENDING = "PENDING"
    SENT = "SENT"


class WorkflowKind(StrEnum):
    NONE = "none"
    TASK_CREATION = "task_creation"
    COMPLETE_ISSUE = "complete_issue"
    DEV_STATS = "dev_stats"


class TaskCreationStep(StrEnum):
    TITLE = "title"
    DESCRIPTION = "description"
    ESTIMATION = "estimation"
    DUE_DATE = "due_date"
    DEVELOPER = "developer"


class CommandKind(StrEnum):
    COMPLETE_ISSUE = "complete_issue"
    DEV_STATS = "dev_stats"
