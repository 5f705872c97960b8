"""Plain-text rendering of rosters, issue lists, and statistics."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from taskmaster_bot.storage.models import Issue, User

SEPARATOR = "-------------------"


@dataclass(frozen=True, slots=True)
class DeveloperStats:
    developer: User
    completed: tuple[Issue, ...]
    pending: tuple[Issue, ...]

    @property
    def total_hours(self) -> int:
        return sum(issue.hours_worked or 0 for issue in self.completed)


def compute_stats(developer: User, issues: Iterable[Issue]) -> DeveloperStats:
    """Partition a developer's issues into completed and pending."""
    completed: list[Issue] = []
    pending: list[Issue] = []
    for issue in issues:
        (completed if issue.is_completed else pending).append(issue)
    return DeveloperStats(developer=developer, completed=tuple(completed), pending=tuple(pending))


def render_engineer_roster(engineers: Sequence[User], footer: str) -> str:
    lines = ["📋 Available Engineers", ""]
    for engineer in engineers:
        lines += [
            "👤 Engineer Details",
            f"ID: {engineer.id}",
            f"Name: {engineer.name}",
            f"Role: {engineer.role}",
            SEPARATOR,
        ]
    lines += ["", footer]
    return "\n".join(lines)


def render_user_info(user: User) -> str:
    return f"Your Information:\nID: {user.id}\nName: {user.name}\nRole: {user.role}"


def render_stats(stats: DeveloperStats) -> str:
    lines = [
        f"📊 Statistics for {stats.developer.name}",
        "",
        f"Total Completed Tasks: {len(stats.completed)}",
        f"Total Hours Worked: {stats.total_hours}",
        f"Pending Tasks: {len(stats.pending)}",
    ]
    if stats.completed:
        lines += ["", "📋 Completed Tasks Details:"]
        for issue in stats.completed:
            lines += [
                f"• Task ID: {issue.id}",
                f"  Title: {issue.title}",
                f"  Hours: {issue.hours_worked}",
            ]
    return "\n".join(lines)


def render_team_summary(all_stats: Sequence[DeveloperStats]) -> str:
    lines = ["Developer Statistics Summary:", ""]
    for stats in all_stats:
        lines += [
            f"Developer: {stats.developer.name} (ID: {stats.developer.id})",
            f"Completed Tasks: {len(stats.completed)}",
            f"Total Hours: {stats.total_hours}",
            "",
        ]
    lines += ["For detailed stats on a specific developer, use:", "/stats <developer_id>"]
    return "\n".join(lines)


def render_assigned_issues(issues: Sequence[Issue]) -> str:
    lines = ["Your active assigned issues:", ""]
    for issue in issues:
        due = issue.due_date.date().isoformat() if issue.due_date else "-"
        lines += [
            f"ID: {issue.id}",
            f"Title: {issue.title}",
            f"Estimation: {issue.estimation if issue.estimation is not None else '-'}h",
            f"Due Date: {due}",
            "",
        ]
    lines += ["To complete an issue, use the command:", "/complete <issue_id> <hours>"]
    return "\n".join(lines)
