"""Menu labels, reply texts, and reply keyboards."""

from __future__ import annotations

from enum import Enum, StrEnum
from typing import Optional

from taskmaster_bot.messenger.models import Keyboard

CANCEL_COMMAND = "/cancel"


class BotLabels(Enum):
    """Menu entries: (button label, slash command)."""

    SHOW_MAIN_SCREEN = ("Show Main Screen", "/start")
    MY_ASSIGNED_ISSUES = ("My Assigned Issues", "/MyAssignedIssues")
    COMPLETE_ISSUE = ("Complete Issue", "/CompleteIssue")
    DEVELOPER_STATS = ("Developer Stats", "/DevStats")
    SHOW_DEVELOPERS = ("Show Developers", "/ShowDevelopers")
    CREATE_NEW_TASK = ("Create New Task", "/CreateTask")

    def __init__(self, label: str, command: str):
        self.label = label
        self.command = command

    def matches(self, text: str) -> bool:
        folded = text.strip().casefold()
        return folded in (self.label.casefold(), self.command.casefold())

    @classmethod
    def parse(cls, text: str) -> Optional["BotLabels"]:
        for entry in cls:
            if entry.matches(text):
                return entry
        return None


class BotMessages(StrEnum):
    WELCOME = "Welcome to the TaskMaster!\n\nPlease select a command from the menu below:"
    UNKNOWN_COMMAND = "Please use one of the available commands from the menu."
    USER_NOT_FOUND = "User not found. Please contact your administrator."
    GENERIC_ERROR = "An error occurred while processing your request. Please try again."
    NEXT_ACTION = "What would you like to do next?"

    TASK_CREATION_STARTED = "Starting task creation process. Let's begin with the title."
    ENTER_TASK_TITLE = "Please enter the task title:"
    ENTER_TASK_DESCRIPTION = "Please enter the task description:"
    ENTER_TASK_ESTIMATION = "Please enter the estimated hours for this task:"
    ENTER_TASK_DUE_DATE = "Please enter the due date (YYYY-MM-DD):"
    SELECT_DEVELOPER = "Please select a developer ID from the list above:"
    INVALID_ENGINEER = "Invalid engineer ID. Please select a valid engineer from the list."
    TASK_CREATED_SUCCESS = "Task created successfully!"
    TASK_CREATION_CANCELLED = "Task creation cancelled."
    NOT_AUTHORIZED = (
        "You are not authorized to perform this action. Only Project Managers can create tasks."
    )
    EMPTY_INPUT = "Please enter some text."

    INVALID_NUMBER_FORMAT = "Invalid number format. Please enter a valid number."
    INVALID_DATE_FORMAT = "Invalid date format. Please use YYYY-MM-DD"

    ENTER_ISSUE_ID = "Please enter the Issue ID you want to complete:"
    INVALID_ISSUE_ID = "Please enter a valid Issue ID (numbers only):"
    ENTER_HOURS = "Please enter the number of hours worked:"
    INVALID_HOURS = "Please enter a valid number of hours (numbers only):"
    ISSUE_COMPLETED = "Issue completed successfully!"
    NOT_ASSIGNEE = "You are not assigned to this issue."
    COMPLETE_USAGE = "Invalid format. Use: /complete <issue_id> <hours>\nExample: /complete 123 4"
    STATS_USAGE = "Invalid format. Use: /stats or /stats <developer_id>"

    ENTER_DEVELOPER_ID = "Please enter the Developer ID to view their statistics:"
    INVALID_DEVELOPER_ID = "Please enter a valid Developer ID (numbers only):"
    OWN_STATS_ONLY = "You can only view your own statistics."
    NO_ENGINEERS = "No engineers found in the system. Please check the role configuration."
    NO_ACTIVE_ISSUES = "You don't have any active assigned issues."

    COMMAND_CANCELLED = "Command cancelled. You can start over with a new command."


MAIN_MENU_KEYBOARD: Keyboard = (
    (BotLabels.MY_ASSIGNED_ISSUES.label, BotLabels.COMPLETE_ISSUE.label),
    (BotLabels.DEVELOPER_STATS.label, BotLabels.SHOW_DEVELOPERS.label),
    (BotLabels.CREATE_NEW_TASK.label,),
)

CANCEL_KEYBOARD: Keyboard = ((CANCEL_COMMAND,),)

HOURS_KEYBOARD: Keyboard = (
    ("1", "2", "3"),
    ("4", "5", "6"),
    ("7", "8", "9"),
    ("10", "15", "20"),
    (CANCEL_COMMAND,),
)


def is_cancel(text: str) -> bool:
    return text.strip().casefold() in (CANCEL_COMMAND, "cancel")
