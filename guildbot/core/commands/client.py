"""Long-lived owner of the response tracker that builds dispatch contexts."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Optional

from ..config import Config
from ..errors import ChatPlatformError, ResolutionFailure
from ..models import Arguments, ChannelRef, ChannelType, Invocation, Membership, ResponseRecord
from ..permissions import Permission, PermissionEvaluator
from ..profiles import InMemoryProfileStore, ProfileStore
from ..tracking import ResponseTracker
from .context import DispatchContext
from .descriptor import CommandSpec
from .help import HelpFormatter
from .resolution import resolve_channel, resolve_membership, resolve_scope

if TYPE_CHECKING:
    from ...chat_adapters.i_chat_adapter import IChatTransport, IDirectory

LOGGER = logging.getLogger(__name__)


class CommandClient:
    """One per running service; shared by every command execution."""

    def __init__(
        self,
        *,
        transport: "IChatTransport",
        directory: "IDirectory",
        profile_store: ProfileStore,
        home_scope_id: str,
        evaluator: Optional[PermissionEvaluator] = None,
        help_formatter: Optional[HelpFormatter] = None,
        tracker: Optional[ResponseTracker] = None,
    ) -> None:
        self._transport = transport
        self._directory = directory
        self._profile_store = profile_store
        self._home_scope_id = home_scope_id
        self.evaluator = evaluator or PermissionEvaluator()
        self.help_formatter = help_formatter or HelpFormatter()
        self.tracker = tracker or ResponseTracker()
        self._self_user_id: Optional[str] = None

    @classmethod
    def from_config(
        cls, config: Config, transport: "IChatTransport", directory: "IDirectory"
    ) -> "CommandClient":
        return cls(
            transport=transport,
            directory=directory,
            profile_store=InMemoryProfileStore(config.profiles),
            home_scope_id=config.home_scope_id,
            evaluator=PermissionEvaluator(
                admin_role_ids=config.admin_role_ids,
                moderator_role_ids=config.moderator_role_ids,
                owner_ids=config.owner_ids,
            ),
        )

    @property
    def home_scope_id(self) -> str:
        return self._home_scope_id

    async def create_context(
        self, invocation: Invocation, command: CommandSpec, args: Iterable[str] = ()
    ) -> DispatchContext:
        scope_id = await resolve_scope(invocation, self._directory, self._home_scope_id)

        membership: Optional[Membership] = None
        try:
            membership = await resolve_membership(invocation, scope_id, self._directory)
        except ResolutionFailure as exc:
            LOGGER.warning("Evaluating %s without membership: %s", invocation.author_id, exc)

        channel = None
        channel_error: Optional[ResolutionFailure] = None
        try:
            channel = resolve_channel(invocation, membership)
        except ResolutionFailure as exc:
            LOGGER.warning("No response channel for invocation %s: %s", invocation.message_id, exc)
            channel_error = exc

        return DispatchContext(
            invocation=invocation,
            command=command,
            args=args if isinstance(args, Arguments) else Arguments(tuple(args)),
            profile=self._profile_store.get_profile(invocation.author_id),
            scope_id=scope_id,
            membership=membership,
            channel=channel,
            channel_error=channel_error,
            transport=self._transport,
            tracker=self.tracker,
            evaluator=self.evaluator,
            help_formatter=self.help_formatter,
            self_user_id=await self.bot_user_id(),
        )

    async def bot_user_id(self) -> Optional[str]:
        """Return the bot's own user id, looked up once and then reused."""
        if self._self_user_id is None:
            try:
                self._self_user_id = await self._directory.resolve_self_id()
            except ChatPlatformError as exc:
                LOGGER.warning("Could not resolve the bot's own user id: %s", exc)
        return self._self_user_id

    async def effective_permission(self, user_id: str) -> Permission:
        """Return the tier ``user_id`` holds in the home scope."""
        invocation = Invocation(
            message_id=f"lookup-{user_id}",
            channel=ChannelRef(id=user_id, type=ChannelType.PRIVATE),
            author_id=user_id,
        )
        membership: Optional[Membership] = None
        try:
            membership = await resolve_membership(invocation, self._home_scope_id, self._directory)
        except ResolutionFailure as exc:
            LOGGER.warning("%s", exc)
        profile = self._profile_store.get_profile(user_id)
        return self.evaluator.effective_permission(membership, profile, user_id)

    def acknowledge_response(self, invocation_id: str, channel_id: str, message_id: str) -> ResponseRecord:
        return self.tracker.register(invocation_id, channel_id, message_id)

    async def delete_responses(self, invocation_id: str) -> int:
        """Delete every tracked reply to ``invocation_id``.

        Records whose deletion fails are put back so a later call can retry
        them; the platform error is re-raised.
        """
        records = self.tracker.pop(invocation_id)
        for index, record in enumerate(records):
            try:
                await self._transport.delete_message(record.channel_id, record.message_id)
            except Exception:
                for remaining in records[index:]:
                    self.tracker.register(remaining.invocation_id, remaining.channel_id, remaining.message_id)
                raise
        if records:
            LOGGER.info("Deleted %s response(s) to invocation %s", len(records), invocation_id)
        return len(records)
