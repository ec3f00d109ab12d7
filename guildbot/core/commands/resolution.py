"""Resolve where an invocation lives and who invoked it.

Each function runs once when a dispatch context is built. Invocations from
scope-bound channels use what the platform event already carries; anything
else (direct messages, group DMs) falls back to the bot's home scope.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from ..errors import ChatPlatformError, ResolutionFailure
from ..models import ChannelRef, Invocation, Membership

if TYPE_CHECKING:
    from ...chat_adapters.i_chat_adapter import IDirectory

LOGGER = logging.getLogger(__name__)


async def resolve_scope(invocation: Invocation, directory: "IDirectory", home_scope_id: str) -> str:
    if not invocation.is_scope_bound:
        return home_scope_id
    if invocation.scope_id:
        return invocation.scope_id
    try:
        scope_id = await directory.resolve_scope(invocation.channel)
    except ChatPlatformError as exc:
        LOGGER.warning(
            "Could not resolve scope of channel %s, using home scope: %s", invocation.channel.id, exc
        )
        return home_scope_id
    return scope_id or home_scope_id


async def resolve_membership(
    invocation: Invocation, scope_id: str, directory: "IDirectory"
) -> Membership:
    """Return the author's membership in ``scope_id``.

    Raises:
        ResolutionFailure: the author is not a member or the lookup failed.
    """
    if invocation.is_scope_bound and invocation.membership is not None:
        return invocation.membership
    try:
        membership = await directory.resolve_membership(invocation.author_id, scope_id)
    except ChatPlatformError as exc:
        raise ResolutionFailure(
            f"Membership lookup of {invocation.author_id} in {scope_id} failed: {exc}"
        ) from exc
    if membership is None:
        raise ResolutionFailure(f"User {invocation.author_id} is not a member of {scope_id}")
    return membership


def resolve_channel(invocation: Invocation, membership: Optional[Membership]) -> ChannelRef:
    """Return the channel replies to ``invocation`` go to.

    Direct messages and group DMs are answered where they were sent, but only
    for members of the home scope.

    Raises:
        ResolutionFailure: the author of an unscoped invocation is not a member.
    """
    if not invocation.is_scope_bound and membership is None:
        raise ResolutionFailure(
            f"User {invocation.author_id} is not a member of the home scope; refusing to reply"
        )
    return invocation.channel
