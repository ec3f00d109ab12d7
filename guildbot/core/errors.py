"""Custom exception hierarchy for guildbot."""


class GuildBotError(Exception):
    """Base error type."""


class ConfigError(GuildBotError):
    pass


class ChatPlatformError(GuildBotError):
    """Raised by chat adapters when the platform rejects a request."""


class SlackError(ChatPlatformError):
    pass


class DispatchFailure(GuildBotError):
    """A response could not be delivered for an invocation."""

    def __init__(self, message: str, invocation_id: str | None = None) -> None:
        super().__init__(message)
        self.invocation_id = invocation_id


class ResolutionFailure(GuildBotError):
    """A membership, scope or channel lookup found nothing where a fallback was required."""
