"""Conversation engine: routes chat text to workflows, menu commands, and replies."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from taskmaster_bot.bot.formatting import (
    compute_stats,
    render_assigned_issues,
    render_engineer_roster,
    render_stats,
    render_team_summary,
    render_user_info,
)
from taskmaster_bot.bot.labels import (
    CANCEL_KEYBOARD,
    MAIN_MENU_KEYBOARD,
    BotLabels,
    BotMessages,
)
from taskmaster_bot.bot.workflows import (
    MAX_HOURS,
    AssignDeveloper,
    CompleteIssue,
    Effect,
    ShowEngineers,
    ShowStats,
    Transition,
    advance_command,
    advance_task_creation,
    parse_count,
    start_complete_issue,
    start_dev_stats_selection,
    start_task_creation,
)
from taskmaster_bot.config import RolesConfig
from taskmaster_bot.core.errors import (
    AuthorizationError,
    NotFoundError,
    TransportError,
    ValidationError,
    WorkflowError,
)
from taskmaster_bot.core.session import ChatSession, CommandState, IssueDraft, SessionStore, WorkflowState
from taskmaster_bot.core.types import IssueStatus
from taskmaster_bot.log import bound_chat, get_logger
from taskmaster_bot.messenger.base import MessageSender
from taskmaster_bot.messenger.models import IncomingMessage, Keyboard, OutgoingMessage
from taskmaster_bot.storage.issue_repo import IssueRepository
from taskmaster_bot.storage.models import Issue, User
from taskmaster_bot.storage.user_repo import UserRepository

logger = get_logger(__name__)

ASSIGN_FOOTER = "To assign a task, use the engineer's ID number."


class ConversationEngine:
    """Handles one inbound chat message at a time per chat.

    Dispatch precedence: an active task-creation session, then an active
    command state, then menu interpretation.
    """

    def __init__(
        self,
        sender: MessageSender,
        sessions: SessionStore,
        users: UserRepository,
        issues: IssueRepository,
        roles: RolesConfig | None = None,
    ):
        self._sender = sender
        self._sessions = sessions
        self._users = users
        self._issues = issues
        self._roles = roles or RolesConfig()

    async def handle(self, message: IncomingMessage) -> None:
        """Adapter callback."""
        await self.on_incoming_message(message.chat_id, message.user_id, message.text)

    async def on_incoming_message(self, chat_id: str, external_user_id: str, text: str) -> None:
        text = text.strip()
        if not text:
            return

        with bound_chat(chat_id, external_user_id):
            async with self._sessions.lock(chat_id):
                try:
                    await self._dispatch(chat_id, external_user_id, text)
                except TransportError as e:
                    logger.error("reply_delivery_failed", error=str(e))

    async def _dispatch(self, chat_id: str, external_user_id: str, text: str) -> None:
        state = self._sessions.get(chat_id)
        try:
            if isinstance(state, ChatSession):
                await self._apply(chat_id, external_user_id, advance_task_creation(state, text))
            elif isinstance(state, CommandState):
                await self._apply(chat_id, external_user_id, advance_command(state, text))
            else:
                await self._on_menu(chat_id, external_user_id, text)
        except WorkflowError as e:
            logger.warning(
                "workflow_rejected",
                error_type=type(e).__name__,
                detail=str(e),
                kind=self._sessions.kind(chat_id).value,
            )
            self._sessions.remove(chat_id)
            await self._reply(chat_id, e.user_message, MAIN_MENU_KEYBOARD)
        except TransportError:
            raise
        except Exception:
            logger.exception("workflow_failed", kind=self._sessions.kind(chat_id).value)
            self._sessions.remove(chat_id)
            await self._reply(chat_id, BotMessages.GENERIC_ERROR, MAIN_MENU_KEYBOARD)

    # -- workflows -----------------------------------------------------------

    async def _apply(self, chat_id: str, external_user_id: str, transition: Transition) -> None:
        """Store the next state, run the effect, then send the replies."""
        if transition.state is None:
            self._sessions.remove(chat_id)
        else:
            self._sessions.put(chat_id, transition.state)

        if transition.effect is not None:
            await self._run_effect(chat_id, external_user_id, transition.state, transition.effect)

        for reply in transition.replies:
            await self._reply(chat_id, reply.text, reply.keyboard)

    async def _run_effect(
        self,
        chat_id: str,
        external_user_id: str,
        state: Optional[WorkflowState],
        effect: Effect,
    ) -> None:
        match effect:
            case ShowEngineers(prompt=prompt):
                if isinstance(state, CommandState):
                    await self._send_roster(chat_id, BotMessages.ENTER_DEVELOPER_ID, CANCEL_KEYBOARD)
                elif await self._send_roster(chat_id, ASSIGN_FOOTER) and prompt:
                    await self._reply(chat_id, prompt, CANCEL_KEYBOARD)

            case AssignDeveloper(developer_id=developer_id, draft=draft):
                await self._finish_task_creation(chat_id, draft, developer_id)

            case CompleteIssue(issue_id=issue_id, hours=hours):
                user = await self._require_user(external_user_id)
                await self._complete_issue(user, issue_id, hours)
                self._sessions.remove(chat_id)
                await self._reply(
                    chat_id,
                    f"{BotMessages.ISSUE_COMPLETED}\n\n{BotMessages.NEXT_ACTION}",
                    MAIN_MENU_KEYBOARD,
                )

            case ShowStats(developer_id=developer_id):
                requester = await self._require_user(external_user_id)
                await self._send_stats(chat_id, requester, developer_id)
                self._sessions.remove(chat_id)

    async def _finish_task_creation(self, chat_id: str, draft: IssueDraft, developer_id: int) -> None:
        developer = await self._users.find_by_id(developer_id)
        if developer is None or not developer.has_role(self._roles.engineer):
            logger.info("task_creation_invalid_engineer", developer_id=developer_id)
            await self._reply(chat_id, BotMessages.INVALID_ENGINEER, CANCEL_KEYBOARD)
            return

        issue = await self._issues.create(replace(draft, assignee=developer_id).to_issue())
        self._sessions.remove(chat_id)
        logger.info("task_created", issue_id=issue.id, assignee=developer_id)
        await self._reply(chat_id, BotMessages.TASK_CREATED_SUCCESS, MAIN_MENU_KEYBOARD)

    # -- menu ----------------------------------------------------------------

    async def _on_menu(self, chat_id: str, external_user_id: str, text: str) -> None:
        head, _, rest = text.partition(" ")
        inline = head.casefold()
        entry = BotLabels.parse(text)

        if entry is BotLabels.SHOW_MAIN_SCREEN:
            await self._reply(chat_id, BotMessages.WELCOME, MAIN_MENU_KEYBOARD)
            return
        if entry is None and inline not in ("/complete", "/stats"):
            await self._reply(chat_id, BotMessages.UNKNOWN_COMMAND, MAIN_MENU_KEYBOARD)
            return

        user = await self._require_user(external_user_id)
        logger.info("menu_command", command=entry.name if entry else inline)

        if inline == "/complete":
            await self._complete_inline(chat_id, user, rest)
            return
        if inline == "/stats":
            await self._stats_inline(chat_id, user, rest)
            return

        match entry:
            case BotLabels.MY_ASSIGNED_ISSUES:
                await self._send_assigned_issues(chat_id, user)
            case BotLabels.COMPLETE_ISSUE:
                await self._apply(chat_id, external_user_id, start_complete_issue(chat_id))
            case BotLabels.DEVELOPER_STATS:
                if self._is_manager(user):
                    await self._apply(chat_id, external_user_id, start_dev_stats_selection(chat_id))
                else:
                    await self._send_stats(chat_id, user, user.id)
            case BotLabels.SHOW_DEVELOPERS:
                if self._is_manager(user):
                    await self._send_roster(chat_id, ASSIGN_FOOTER)
                else:
                    await self._reply(chat_id, render_user_info(user))
            case BotLabels.CREATE_NEW_TASK:
                if not self._is_manager(user):
                    raise AuthorizationError(
                        BotMessages.NOT_AUTHORIZED, f"user {user.id} has role {user.role!r}"
                    )
                await self._apply(chat_id, external_user_id, start_task_creation(chat_id))

    async def _complete_inline(self, chat_id: str, user: User, args: str) -> None:
        parts = args.split()
        if len(parts) != 2:
            raise ValidationError(BotMessages.COMPLETE_USAGE)
        issue_id = parse_count(parts[0], BotMessages.COMPLETE_USAGE)
        hours = parse_count(parts[1], BotMessages.COMPLETE_USAGE, MAX_HOURS)
        await self._complete_issue(user, issue_id, hours)
        await self._reply(chat_id, BotMessages.ISSUE_COMPLETED, MAIN_MENU_KEYBOARD)

    async def _stats_inline(self, chat_id: str, user: User, args: str) -> None:
        parts = args.split()
        if len(parts) > 1:
            raise ValidationError(BotMessages.STATS_USAGE)
        if parts:
            await self._send_stats(chat_id, user, parse_count(parts[0], BotMessages.STATS_USAGE))
        elif self._is_manager(user):
            await self._send_team_summary(chat_id)
        else:
            await self._send_stats(chat_id, user, user.id)

    # -- domain operations ---------------------------------------------------

    async def _require_user(self, external_user_id: str) -> User:
        user = await self._users.find_by_external_id(external_user_id)
        if user is None:
            raise NotFoundError(BotMessages.USER_NOT_FOUND, f"no user for external id {external_user_id}")
        return user

    def _is_manager(self, user: User) -> bool:
        return user.has_role(self._roles.manager)

    async def _complete_issue(self, user: User, issue_id: int, hours: int) -> Issue:
        issue = await self._issues.find_by_id(issue_id)
        if issue is None:
            raise NotFoundError(f"Issue {issue_id} not found.")
        if issue.assignee != user.id:
            raise AuthorizationError(
                BotMessages.NOT_ASSIGNEE,
                f"user {user.id} is not the assignee of issue {issue_id}",
            )
        updated = await self._issues.update(issue_id, status=IssueStatus.COMPLETED, hours_worked=hours)
        logger.info("issue_completed", issue_id=issue_id, hours=hours)
        return updated

    async def _send_stats(self, chat_id: str, requester: User, developer_id: int) -> None:
        if developer_id != requester.id and not self._is_manager(requester):
            raise AuthorizationError(
                BotMessages.OWN_STATS_ONLY,
                f"user {requester.id} requested stats of {developer_id}",
            )
        developer = requester if developer_id == requester.id else await self._users.find_by_id(developer_id)
        if developer is None:
            raise NotFoundError(f"Developer with ID {developer_id} not found.")

        issues = await self._issues.find_by_assignee(developer_id)
        await self._reply(chat_id, render_stats(compute_stats(developer, issues)), MAIN_MENU_KEYBOARD)

    async def _send_team_summary(self, chat_id: str) -> None:
        engineers = await self._users.find_by_role(self._roles.engineer)
        if not engineers:
            raise NotFoundError(BotMessages.NO_ENGINEERS)
        all_stats = [
            compute_stats(engineer, await self._issues.find_by_assignee(engineer.id))
            for engineer in engineers
        ]
        await self._reply(chat_id, render_team_summary(all_stats), MAIN_MENU_KEYBOARD)

    async def _send_roster(self, chat_id: str, footer: str, keyboard: Keyboard | None = None) -> bool:
        """Send the engineer roster; False when there is nobody to list."""
        engineers = await self._users.find_by_role(self._roles.engineer)
        if not engineers:
            # Ends the stats flow; task creation keeps waiting for an id.
            if isinstance(self._sessions.get(chat_id), CommandState):
                raise NotFoundError(BotMessages.NO_ENGINEERS)
            await self._reply(chat_id, BotMessages.NO_ENGINEERS)
            return False
        await self._reply(chat_id, render_engineer_roster(engineers, footer), keyboard)
        return True

    async def _send_assigned_issues(self, chat_id: str, user: User) -> None:
        active = [issue for issue in await self._issues.find_by_assignee(user.id) if not issue.is_completed]
        if not active:
            await self._reply(chat_id, BotMessages.NO_ACTIVE_ISSUES)
            return
        await self._reply(chat_id, render_assigned_issues(active))

    async def _reply(self, chat_id: str, text: str, keyboard: Keyboard | None = None) -> None:
        await self._sender.send_message(OutgoingMessage(chat_id=chat_id, text=str(text), keyboard=keyboard))
