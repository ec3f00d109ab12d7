"""Domain models for guildbot."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from .permissions import Permission


class ChannelType(str, Enum):
    TEXT = "text"
    PRIVATE = "private"
    GROUP = "group"

    @property
    def is_scope_bound(self) -> bool:
        return self is ChannelType.TEXT


@dataclass(frozen=True)
class ChannelRef:
    id: str
    type: ChannelType = ChannelType.TEXT

    @property
    def is_scope_bound(self) -> bool:
        return self.type.is_scope_bound


@dataclass(frozen=True)
class Membership:
    """A user as seen inside one scope (Slack workspace, guild)."""

    user_id: str
    scope_id: str
    role_ids: FrozenSet[str] = frozenset()
    is_admin: bool = False
    is_owner: bool = False


@dataclass(frozen=True)
class ActorProfile:
    """Stored settings of a user; ``permission`` is an explicit grant."""

    user_id: str
    permission: Optional[Permission] = None


@dataclass(frozen=True)
class Invocation:
    """The message that triggered one command execution."""

    message_id: str
    channel: ChannelRef
    author_id: str
    scope_id: Optional[str] = None
    membership: Optional[Membership] = None
    content: str = ""

    @property
    def is_scope_bound(self) -> bool:
        return self.channel.is_scope_bound


@dataclass(frozen=True)
class SentMessage:
    channel_id: str
    message_id: str


@dataclass(frozen=True)
class ResponseRecord:
    invocation_id: str
    channel_id: str
    message_id: str


@dataclass(frozen=True)
class Arguments:
    """Already-parsed command arguments."""

    values: Tuple[str, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self):
        return iter(self.values)

    def __getitem__(self, index: int) -> str:
        return self.values[index]

    def get(self, index: int, default: Optional[str] = None) -> Optional[str]:
        if 0 <= index < len(self.values):
            return self.values[index]
        return default

    def join(self, start: int = 0) -> str:
        """Return the arguments from ``start`` on as one space separated string."""
        return " ".join(self.values[start:])
