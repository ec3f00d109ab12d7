"""Per-invocation context handed to command handlers."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, List, Optional, Union

from ..errors import DispatchFailure, ResolutionFailure
from ..messages import OutboundPayload, ResponsePayload, normalize_payload
from ..models import ActorProfile, Arguments, ChannelRef, Invocation, Membership, SentMessage
from ..permissions import Permission, PermissionEvaluator
from ..tracking import ResponseTracker
from .descriptor import CommandSpec
from .help import HelpFormatter

if TYPE_CHECKING:
    from ...chat_adapters.i_chat_adapter import IChatTransport

LOGGER = logging.getLogger(__name__)


class DispatchContext:
    """Everything a command handler needs for one execution.

    Replies go through :meth:`respond`, which records every delivered message
    in the shared :class:`ResponseTracker` under the id of the triggering
    message. Permission checks run against the membership and profile that
    were resolved when the context was built.

    Attributes:
        invocation: The message that triggered the command
        command: Descriptor of the executed command
        args: Parsed command arguments
        profile: Stored settings of the author, if any
        scope_id: Scope the invocation is evaluated in
        self_user_id: Platform id of the bot itself, if it could be resolved
    """

    def __init__(
        self,
        *,
        invocation: Invocation,
        command: CommandSpec,
        args: Arguments,
        profile: Optional[ActorProfile],
        scope_id: str,
        membership: Optional[Membership],
        channel: Optional[ChannelRef],
        transport: "IChatTransport",
        tracker: ResponseTracker,
        evaluator: PermissionEvaluator,
        help_formatter: HelpFormatter,
        channel_error: Optional[ResolutionFailure] = None,
        self_user_id: Optional[str] = None,
    ) -> None:
        self.invocation = invocation
        self.command = command
        self.args = args
        self.profile = profile
        self.scope_id = scope_id
        self.self_user_id = self_user_id
        self._membership = membership
        self._channel = channel
        self._channel_error = channel_error
        self._transport = transport
        self._tracker = tracker
        self._evaluator = evaluator
        self._help_formatter = help_formatter
        self._responses: List["asyncio.Task[SentMessage]"] = []

    @property
    def message_id(self) -> str:
        return self.invocation.message_id

    @property
    def author_id(self) -> str:
        return self.invocation.author_id

    @property
    def effective_channel(self) -> Optional[ChannelRef]:
        return self._channel

    @property
    def effective_membership(self) -> Optional[Membership]:
        return self._membership

    @property
    def tracker(self) -> ResponseTracker:
        return self._tracker

    def respond(self, payload: ResponsePayload) -> "asyncio.Task[SentMessage]":
        """Send ``payload`` into the effective channel.

        ``payload`` may be plain text, a :class:`StructuredMessage`, a
        :class:`StructuredMessageBuilder` or a :class:`MessageConvention`.
        Plain text never expands @everyone/@here style mentions.

        Returns:
            A started task resolving to the sent message. Awaiting it raises
            :class:`DispatchFailure` if delivery failed; nothing is tracked
            in that case.

        Raises:
            ValueError: ``payload`` is empty.
            TypeError: ``payload`` has an unsupported type.
        """
        outbound = normalize_payload(payload)
        task = asyncio.get_running_loop().create_task(self._send(outbound))
        self._responses.append(task)
        return task

    def send_help(self) -> "asyncio.Task[SentMessage]":
        """Send the help message of the executed command."""
        return self.respond(self._help_formatter.render_help(self.command))

    def has_permission(self, permission: Permission) -> bool:
        return self._evaluator.has(permission, self._membership, self.profile, self.author_id)

    def has_admin(self) -> bool:
        return self.has_permission(Permission.ADMIN)

    def has_moderator(self) -> bool:
        return self.has_permission(Permission.MODERATOR)

    async def drain(self) -> List[Union[SentMessage, BaseException]]:
        """Wait for every response issued so far; failures are returned, not raised."""
        if not self._responses:
            return []
        return list(await asyncio.gather(*self._responses, return_exceptions=True))

    async def _send(self, payload: OutboundPayload) -> SentMessage:
        if self._channel is None:
            raise DispatchFailure(
                f"No response channel for invocation {self.message_id}: {self._channel_error}",
                self.message_id,
            ) from self._channel_error

        LOGGER.debug(
            "Sending %s response to %s for invocation %s", payload.kind.value, self._channel.id, self.message_id
        )
        try:
            sent = await self._transport.send_to_channel(self._channel, payload)
        except Exception as exc:
            LOGGER.warning("Response to invocation %s failed: %s", self.message_id, exc)
            raise DispatchFailure(
                f"Failed to respond to invocation {self.message_id}: {exc}", self.message_id
            ) from exc

        self._tracker.register(self.message_id, sent.channel_id, sent.message_id)
        return sent
