"""Help payloads for commands."""

from __future__ import annotations

from ..messages import MessageConvention
from ..permissions import Permission
from .descriptor import CommandSpec


class HelpFormatter:
    """Renders the help message of one command."""

    def __init__(self, prefix: str = "!") -> None:
        self._prefix = prefix

    def render_help(self, command: CommandSpec) -> MessageConvention:
        convention = MessageConvention.info(f"Help: {self._prefix}{command.name}", command.description)
        convention.add_field("Usage", f"`{command.usage}`")
        aliases = command.alias_display()
        if aliases:
            convention.add_field("Aliases", aliases, inline=True)
        if command.permission is not Permission.ANY:
            convention.add_field("Permission", command.permission.name.lower(), inline=True)
        convention.footer = f"Category: {command.category}"
        return convention
