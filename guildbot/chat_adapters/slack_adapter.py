"""Slack adapter using the official Slack SDK."""

from __future__ import annotations

import logging
import re
import time
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple

from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from .i_chat_adapter import IChatTransport, IDirectory
from ..core.errors import SlackError
from ..core.messages import MentionType, OutboundPayload, StructuredMessage
from ..core.models import ChannelRef, Membership, SentMessage

LOGGER = logging.getLogger(__name__)

# Slack encodes broadcast mentions as <!here>, <!channel>, <!everyone>, optionally with a |label.
_BROADCAST_PATTERNS = {
    MentionType.EVERYONE: re.compile(r"<!(everyone|channel)(?:\|[^>]*)?>"),
    MentionType.HERE: re.compile(r"<!(here)(?:\|[^>]*)?>"),
}
_MAX_SECTION_FIELDS = 10
_MISSING_USER_ERRORS = {"user_not_found", "user_not_visible"}
DEFAULT_USERGROUP_TTL = 60.0


def suppress_mentions(text: str, denied: FrozenSet[MentionType]) -> str:
    """Rewrite denied broadcast mentions as inert plain text."""
    for mention_type, pattern in _BROADCAST_PATTERNS.items():
        if mention_type in denied:
            text = pattern.sub(lambda match: f"@{match.group(1)}", text)
    return text


def render_blocks(
    message: StructuredMessage, denied: FrozenSet[MentionType] = frozenset()
) -> List[Dict[str, Any]]:
    def clean(text: str) -> str:
        return suppress_mentions(text, denied)

    blocks: List[Dict[str, Any]] = []
    if message.title:
        blocks.append({"type": "header", "text": {"type": "plain_text", "text": clean(message.title)}})
    if message.description:
        blocks.append({"type": "section", "text": {"type": "mrkdwn", "text": clean(message.description)}})
    fields = [
        {"type": "mrkdwn", "text": clean(f"*{item.name}*\n{item.value}")} for item in message.fields
    ]
    for start in range(0, len(fields), _MAX_SECTION_FIELDS):
        blocks.append({"type": "section", "fields": fields[start : start + _MAX_SECTION_FIELDS]})
    if message.footer:
        blocks.append({"type": "context", "elements": [{"type": "mrkdwn", "text": clean(message.footer)}]})
    return blocks


class SlackAdapter(IChatTransport, IDirectory):
    """Slack transport and directory.

    User group membership is cached per workspace for ``usergroup_ttl``
    seconds, so a revoked group stops granting its tier after at most that
    long.
    """

    def __init__(
        self,
        bot_token: str,
        web_client: Optional[AsyncWebClient] = None,
        usergroup_ttl: float = DEFAULT_USERGROUP_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._web_client = web_client or AsyncWebClient(token=bot_token)
        self._usergroup_ttl = usergroup_ttl
        self._clock = clock
        self._usergroup_cache: Dict[str, Tuple[float, Dict[str, FrozenSet[str]]]] = {}
        self._self_id: Optional[str] = None

    async def send_to_channel(self, channel: ChannelRef, payload: OutboundPayload) -> SentMessage:
        kwargs: Dict[str, Any] = {"channel": channel.id, "link_names": False}
        if payload.message is not None:
            blocks = render_blocks(payload.message, payload.denied_mentions)
            kwargs["text"] = suppress_mentions(payload.message.fallback_text(), payload.denied_mentions)
            if payload.message.color:
                kwargs["attachments"] = [{"color": payload.message.color, "blocks": blocks}]
            else:
                kwargs["blocks"] = blocks
        else:
            kwargs["text"] = suppress_mentions(payload.text or "", payload.denied_mentions)

        try:
            response = await self._web_client.chat_postMessage(**kwargs)
        except SlackApiError as exc:
            raise SlackError(f"Failed to send Slack message: {exc}") from exc
        return SentMessage(channel_id=response["channel"], message_id=response["ts"])

    async def delete_message(self, channel_id: str, message_id: str) -> None:
        try:
            await self._web_client.chat_delete(channel=channel_id, ts=message_id)
        except SlackApiError as exc:
            raise SlackError(f"Failed to delete Slack message {message_id}: {exc}") from exc

    async def resolve_scope(self, channel: ChannelRef) -> Optional[str]:
        try:
            result = await self._web_client.conversations_info(channel=channel.id)
        except SlackApiError as exc:
            raise SlackError(f"Failed to resolve channel {channel.id}: {exc}") from exc

        info = result.get("channel") or {}
        if info.get("is_im") or info.get("is_mpim"):
            return None
        scope_id = info.get("context_team_id")
        if not scope_id:
            shared = info.get("shared_team_ids") or []
            scope_id = shared[0] if shared else None
        return scope_id

    async def resolve_membership(self, user_id: str, scope_id: str) -> Optional[Membership]:
        try:
            result = await self._web_client.users_info(user=user_id)
        except SlackApiError as exc:
            if exc.response.get("error") in _MISSING_USER_ERRORS:
                LOGGER.debug("User %s not found in Slack", user_id)
                return None
            raise SlackError(f"Failed to look up user {user_id}: {exc}") from exc

        user = result.get("user") or {}
        if user.get("deleted"):
            return None
        teams = {user.get("team_id")}
        teams.update((user.get("enterprise_user") or {}).get("teams") or [])
        if scope_id not in teams:
            return None

        groups = await self._usergroups(scope_id)
        return Membership(
            user_id=user_id,
            scope_id=scope_id,
            role_ids=frozenset(gid for gid, members in groups.items() if user_id in members),
            is_admin=bool(user.get("is_admin")),
            is_owner=bool(user.get("is_owner") or user.get("is_primary_owner")),
        )

    async def resolve_self_id(self) -> str:
        if self._self_id is None:
            try:
                result = await self._web_client.auth_test()
            except SlackApiError as exc:
                raise SlackError(f"Failed to identify the bot user: {exc}") from exc
            self._self_id = result["user_id"]
        return self._self_id

    def clear_cache(self) -> None:
        self._usergroup_cache.clear()

    async def _usergroups(self, scope_id: str) -> Dict[str, FrozenSet[str]]:
        cached = self._usergroup_cache.get(scope_id)
        now = self._clock()
        if cached is not None and now - cached[0] < self._usergroup_ttl:
            return cached[1]
        try:
            result = await self._web_client.usergroups_list(include_users=True, team_id=scope_id)
        except SlackApiError as exc:
            raise SlackError(f"Failed to list user groups of {scope_id}: {exc}") from exc

        groups = {
            group["id"]: frozenset(group.get("users") or ())
            for group in result.get("usergroups") or []
            if group.get("id")
        }
        self._usergroup_cache[scope_id] = (now, groups)
        return groups
