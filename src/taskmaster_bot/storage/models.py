"""Data models for storage layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from taskmaster_bot.core.types import AlertStatus, IssueStatus


@dataclass
class User:
    name: str
    role: str  # e.g. "Project Manager" | "Engineer"
    external_id: Optional[str] = None  # Telegram id; also the alert delivery address
    id: Optional[int] = None

    def has_role(self, role: str) -> bool:
        return (self.role or "").strip().casefold() == role.strip().casefold()


@dataclass
class Issue:
    title: str
    description: str = ""
    estimation: Optional[int] = None  # hours
    due_date: Optional[datetime] = None
    assignee: Optional[int] = None
    status: IssueStatus = IssueStatus.OPEN
    hours_worked: int = 0
    sprint_id: Optional[int] = None
    id: Optional[int] = None

    @property
    def is_completed(self) -> bool:
        return self.status == IssueStatus.COMPLETED


@dataclass
class Alert:
    message: str
    user_id: Optional[str]  # kept as text; may be malformed
    task_id: Optional[int] = None
    task: str = ""
    project_id: Optional[int] = None
    priority: str = "MEDIUM"
    scheduled_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    status: AlertStatus = AlertStatus.PENDING
    id: Optional[int] = None
