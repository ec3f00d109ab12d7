"""Chat platform adapters."""

from .i_chat_adapter import IChatTransport, IDirectory
from .slack_adapter import SlackAdapter

__all__ = ["IChatTransport", "IDirectory", "SlackAdapter"]
