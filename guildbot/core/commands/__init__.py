"""Command execution context, its resolution helpers and the client that builds it."""

from .client import CommandClient
from .context import DispatchContext
from .descriptor import CommandSpec
from .help import HelpFormatter
from .resolution import resolve_channel, resolve_membership, resolve_scope

__all__ = [
    "CommandClient",
    "CommandSpec",
    "DispatchContext",
    "HelpFormatter",
    "resolve_channel",
    "resolve_membership",
    "resolve_scope",
]
