"""guildbot: execution context for chat-bot commands."""

__version__ = "0.1.0"
