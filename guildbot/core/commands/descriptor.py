"""Command descriptors handed to dispatch contexts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..permissions import Permission


@dataclass(frozen=True)
class CommandSpec:
    """Metadata describing a single command."""

    name: str
    usage: str
    description: str
    aliases: Tuple[str, ...] = ()
    permission: Permission = Permission.ANY
    category: str = "general"

    @property
    def all_names(self) -> Tuple[str, ...]:
        return (self.name, *self.aliases)

    def alias_display(self) -> str:
        """Return formatted alias list for help output."""
        if not self.aliases:
            return ""
        return ", ".join(f"`!{alias}`" for alias in self.aliases)
