"""Chat adapter abstraction."""

from __future__ import annotations

import abc
from typing import Optional

from ..core.messages import OutboundPayload
from ..core.models import ChannelRef, Membership, SentMessage


class IChatTransport(abc.ABC):
    """Sends and deletes messages on a chat platform (Slack, Discord, etc.)."""

    @abc.abstractmethod
    async def send_to_channel(self, channel: ChannelRef, payload: OutboundPayload) -> SentMessage:
        """Send ``payload`` into ``channel``.

        Implementations must honour ``payload.denied_mentions`` and raise
        :class:`~guildbot.core.errors.ChatPlatformError` when the platform
        rejects the message.
        """

    @abc.abstractmethod
    async def delete_message(self, channel_id: str, message_id: str) -> None:
        """Delete a previously sent message."""


class IDirectory(abc.ABC):
    """Looks up scopes, memberships and the bot's own identity."""

    @abc.abstractmethod
    async def resolve_scope(self, channel: ChannelRef) -> Optional[str]:
        """Return the scope id owning ``channel``, or None for unscoped channels."""

    @abc.abstractmethod
    async def resolve_membership(self, user_id: str, scope_id: str) -> Optional[Membership]:
        """Return the membership of ``user_id`` in ``scope_id``, or None if absent."""

    @abc.abstractmethod
    async def resolve_self_id(self) -> str:
        """Return the user id the bot itself acts as."""
