"""Core domain logic for guildbot."""

from .config import Config, load_config
from .errors import (
    ChatPlatformError,
    ConfigError,
    DispatchFailure,
    GuildBotError,
    ResolutionFailure,
    SlackError,
)
from .messages import (
    MentionType,
    MessageConvention,
    MessageField,
    MessageStyle,
    OutboundPayload,
    PayloadKind,
    StructuredMessage,
    StructuredMessageBuilder,
    normalize_payload,
)
from .models import (
    ActorProfile,
    Arguments,
    ChannelRef,
    ChannelType,
    Invocation,
    Membership,
    ResponseRecord,
    SentMessage,
)
from .permissions import Permission, PermissionEvaluator, PermissionState
from .profiles import InMemoryProfileStore, ProfileStore
from .tracking import ResponseTracker
from .commands import CommandClient, CommandSpec, DispatchContext, HelpFormatter

__all__ = [
    "Config",
    "load_config",
    "GuildBotError",
    "ConfigError",
    "ChatPlatformError",
    "SlackError",
    "DispatchFailure",
    "ResolutionFailure",
    "MentionType",
    "MessageConvention",
    "MessageField",
    "MessageStyle",
    "OutboundPayload",
    "PayloadKind",
    "StructuredMessage",
    "StructuredMessageBuilder",
    "normalize_payload",
    "ActorProfile",
    "Arguments",
    "ChannelRef",
    "ChannelType",
    "Invocation",
    "Membership",
    "ResponseRecord",
    "SentMessage",
    "Permission",
    "PermissionEvaluator",
    "PermissionState",
    "InMemoryProfileStore",
    "ProfileStore",
    "ResponseTracker",
    "CommandClient",
    "CommandSpec",
    "DispatchContext",
    "HelpFormatter",
]
