"""Shared fixtures: in-memory chat platform fakes and a command client."""

from __future__ import annotations

import asyncio
from itertools import count
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from guildbot.chat_adapters.i_chat_adapter import IChatTransport, IDirectory
from guildbot.core.commands import CommandClient, CommandSpec
from guildbot.core.errors import SlackError
from guildbot.core.messages import OutboundPayload
from guildbot.core.models import (
    ActorProfile,
    ChannelRef,
    ChannelType,
    Invocation,
    Membership,
    SentMessage,
)
from guildbot.core.permissions import Permission, PermissionEvaluator
from guildbot.core.profiles import InMemoryProfileStore

HOME_SCOPE = "T-HOME"
ADMIN_GROUP = "S-ADMINS"
MODERATOR_GROUP = "S-MODS"


class FakeTransport(IChatTransport):
    """Records sends; optional per-send delays make completion order differ from call order."""

    def __init__(self) -> None:
        self.sent: List[Tuple[ChannelRef, OutboundPayload]] = []
        self.deleted: List[Tuple[str, str]] = []
        self.fail_with: Optional[Exception] = None
        self.fail_delete_with: Optional[Exception] = None
        self.delays: List[float] = []
        self._ids = count(1)

    async def send_to_channel(self, channel: ChannelRef, payload: OutboundPayload) -> SentMessage:
        self.sent.append((channel, payload))
        message_id = f"M{next(self._ids)}"
        delay = self.delays.pop(0) if self.delays else 0
        await asyncio.sleep(delay)
        if self.fail_with is not None:
            raise self.fail_with
        return SentMessage(channel_id=channel.id, message_id=message_id)

    async def delete_message(self, channel_id: str, message_id: str) -> None:
        if self.fail_delete_with is not None:
            raise self.fail_delete_with
        self.deleted.append((channel_id, message_id))


class FakeDirectory(IDirectory):
    def __init__(self, members: Sequence[Membership] = ()) -> None:
        self.members: Dict[Tuple[str, str], Membership] = {
            (member.user_id, member.scope_id): member for member in members
        }
        self.channel_scopes: Dict[str, str] = {}
        self.membership_calls: List[Tuple[str, str]] = []
        self.self_id = "U-BOT"
        self.self_id_calls = 0
        self.fail_lookups = False

    async def resolve_scope(self, channel: ChannelRef) -> Optional[str]:
        return self.channel_scopes.get(channel.id)

    async def resolve_membership(self, user_id: str, scope_id: str) -> Optional[Membership]:
        self.membership_calls.append((user_id, scope_id))
        if self.fail_lookups:
            raise SlackError("directory unavailable")
        return self.members.get((user_id, scope_id))

    async def resolve_self_id(self) -> str:
        self.self_id_calls += 1
        if self.fail_lookups:
            raise SlackError("directory unavailable")
        return self.self_id


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def member() -> Membership:
    return Membership(user_id="U-MEMBER", scope_id=HOME_SCOPE)


@pytest.fixture
def moderator() -> Membership:
    return Membership(user_id="U-MOD", scope_id=HOME_SCOPE, role_ids=frozenset({MODERATOR_GROUP}))


@pytest.fixture
def directory(member, moderator) -> FakeDirectory:
    return FakeDirectory([member, moderator])


@pytest.fixture
def profile_store() -> InMemoryProfileStore:
    return InMemoryProfileStore(
        {"U-GRANTED": ActorProfile(user_id="U-GRANTED", permission=Permission.ADMIN)}
    )


@pytest.fixture
def evaluator() -> PermissionEvaluator:
    return PermissionEvaluator(
        admin_role_ids=[ADMIN_GROUP],
        moderator_role_ids=[MODERATOR_GROUP],
        owner_ids=["U-OWNER"],
    )


@pytest.fixture
def client(transport, directory, profile_store, evaluator) -> CommandClient:
    return CommandClient(
        transport=transport,
        directory=directory,
        profile_store=profile_store,
        home_scope_id=HOME_SCOPE,
        evaluator=evaluator,
    )


@pytest.fixture
def command_spec() -> CommandSpec:
    return CommandSpec(
        name="ban",
        usage="!ban <user> [reason]",
        description="Ban a user from the workspace.",
        aliases=("kick",),
        permission=Permission.MODERATOR,
        category="moderation",
    )


@pytest.fixture
def guild_invocation(member) -> Invocation:
    return Invocation(
        message_id="1700000000.000100",
        channel=ChannelRef(id="C-GENERAL", type=ChannelType.TEXT),
        author_id=member.user_id,
        scope_id=HOME_SCOPE,
        membership=member,
        content="!ban U-SPAM",
    )


@pytest.fixture
def dm_invocation(moderator) -> Invocation:
    return Invocation(
        message_id="1700000000.000200",
        channel=ChannelRef(id="D-INCOMING", type=ChannelType.PRIVATE),
        author_id=moderator.user_id,
        content="!ban U-SPAM",
    )
