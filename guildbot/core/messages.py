"""Outbound message types accepted by ``DispatchContext.respond``."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple, Union


class MentionType(str, Enum):
    EVERYONE = "everyone"
    HERE = "here"
    USER = "user"
    ROLE = "role"


BROAD_MENTIONS: FrozenSet[MentionType] = frozenset({MentionType.EVERYONE, MentionType.HERE})


@dataclass(frozen=True)
class MessageField:
    name: str
    value: str
    inline: bool = False


@dataclass(frozen=True)
class StructuredMessage:
    """A rich message: title, description and named sections."""

    title: Optional[str] = None
    description: Optional[str] = None
    fields: Tuple[MessageField, ...] = ()
    color: Optional[str] = None
    footer: Optional[str] = None

    def is_empty(self) -> bool:
        return not (self.title or self.description or self.fields)

    def fallback_text(self) -> str:
        """Plain text summary for clients that cannot render structured content."""
        return self.title or self.description or (self.fields[0].name if self.fields else "")


class StructuredMessageBuilder:
    """Mutable, chainable builder for :class:`StructuredMessage`."""

    def __init__(self) -> None:
        self._title: Optional[str] = None
        self._description: Optional[str] = None
        self._fields: List[MessageField] = []
        self._color: Optional[str] = None
        self._footer: Optional[str] = None

    def set_title(self, title: str) -> "StructuredMessageBuilder":
        self._title = title
        return self

    def set_description(self, description: str) -> "StructuredMessageBuilder":
        self._description = description
        return self

    def append_description(self, text: str) -> "StructuredMessageBuilder":
        self._description = f"{self._description or ''}{text}"
        return self

    def add_field(self, name: str, value: str, inline: bool = False) -> "StructuredMessageBuilder":
        self._fields.append(MessageField(name=name, value=value, inline=inline))
        return self

    def set_color(self, color: str) -> "StructuredMessageBuilder":
        self._color = color
        return self

    def set_footer(self, footer: str) -> "StructuredMessageBuilder":
        self._footer = footer
        return self

    def is_empty(self) -> bool:
        return self.build().is_empty()

    def build(self) -> StructuredMessage:
        return StructuredMessage(
            title=self._title,
            description=self._description,
            fields=tuple(self._fields),
            color=self._color,
            footer=self._footer,
        )


class MessageStyle(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


STYLE_COLORS = {
    MessageStyle.INFO: "#3498db",
    MessageStyle.SUCCESS: "#2ecc71",
    MessageStyle.WARNING: "#f1c40f",
    MessageStyle.ERROR: "#e74c3c",
}

STYLE_ICONS = {
    MessageStyle.INFO: ":information_source:",
    MessageStyle.SUCCESS: ":white_check_mark:",
    MessageStyle.WARNING: ":warning:",
    MessageStyle.ERROR: ":x:",
}


@dataclass
class MessageConvention:
    """House style for bot replies: a styled title plus description and fields.

    Command handlers use the classmethod shortcuts instead of picking colors
    and icons themselves.
    """

    style: MessageStyle
    title: str
    description: Optional[str] = None
    fields: List[MessageField] = field(default_factory=list)
    footer: Optional[str] = None

    @classmethod
    def info(cls, title: str, description: Optional[str] = None) -> "MessageConvention":
        return cls(MessageStyle.INFO, title, description)

    @classmethod
    def success(cls, title: str, description: Optional[str] = None) -> "MessageConvention":
        return cls(MessageStyle.SUCCESS, title, description)

    @classmethod
    def warning(cls, title: str, description: Optional[str] = None) -> "MessageConvention":
        return cls(MessageStyle.WARNING, title, description)

    @classmethod
    def error(cls, title: str, description: Optional[str] = None) -> "MessageConvention":
        return cls(MessageStyle.ERROR, title, description)

    def add_field(self, name: str, value: str, inline: bool = False) -> "MessageConvention":
        self.fields.append(MessageField(name=name, value=value, inline=inline))
        return self

    def to_message(self) -> StructuredMessage:
        title = f"{STYLE_ICONS[self.style]} {self.title}" if self.title else None
        return StructuredMessage(
            title=title,
            description=self.description,
            fields=tuple(self.fields),
            color=STYLE_COLORS[self.style],
            footer=self.footer,
        )


ResponsePayload = Union[str, StructuredMessage, StructuredMessageBuilder, MessageConvention]


class PayloadKind(str, Enum):
    TEXT = "text"
    STRUCTURED = "structured"
    STRUCTURED_BUILDER = "structured_builder"
    STRUCTURED_CONVENTION = "structured_convention"


@dataclass(frozen=True)
class OutboundPayload:
    """Normalised form of every payload shape handed to the transport."""

    kind: PayloadKind
    text: Optional[str] = None
    message: Optional[StructuredMessage] = None
    denied_mentions: FrozenSet[MentionType] = frozenset()

    @property
    def is_structured(self) -> bool:
        return self.message is not None


def normalize_payload(payload: ResponsePayload) -> OutboundPayload:
    """Collapse one of the accepted payload shapes into an :class:`OutboundPayload`.

    Raises:
        ValueError: the payload carries no content.
        TypeError: the payload is not one of the accepted shapes.
    """
    if isinstance(payload, str):
        if not payload.strip():
            raise ValueError("Cannot respond with an empty message")
        return OutboundPayload(kind=PayloadKind.TEXT, text=payload, denied_mentions=BROAD_MENTIONS)

    if isinstance(payload, StructuredMessage):
        kind, message = PayloadKind.STRUCTURED, payload
    elif isinstance(payload, StructuredMessageBuilder):
        kind, message = PayloadKind.STRUCTURED_BUILDER, payload.build()
    elif isinstance(payload, MessageConvention):
        kind, message = PayloadKind.STRUCTURED_CONVENTION, payload.to_message()
    else:
        raise TypeError(f"Unsupported response payload: {type(payload).__name__}")

    if message.is_empty():
        raise ValueError("Cannot respond with an empty structured message")
    return OutboundPayload(kind=kind, message=message, denied_mentions=BROAD_MENTIONS)
