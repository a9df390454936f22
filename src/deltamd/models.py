"""Public data models for deltamd.

This module contains the operation types of a delta, the closed
:class:`AttributeSet` that replaces the editor's open attribute bag, and
the result and warning types returned by the converters.  Operations and
attribute sets are frozen so they can be compared and hashed freely.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Union


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ListKind(str, Enum):
    """List flavour carried by a ``list`` line attribute."""

    ORDERED = "ordered"
    BULLET = "bullet"


PLAIN_CODE = "plain"
"""``code-block`` value for a code block without a language."""


# ---------------------------------------------------------------------------
# Attributes
# ---------------------------------------------------------------------------

_CODE_BLOCK_KEYS = ("code-block", "codeBlock")

_KNOWN_WIRE_KEYS: frozenset[str] = frozenset({
    "bold", "italic", "link", "header", "list", "blockquote", "alt",
    *_CODE_BLOCK_KEYS,
})


@dataclass(frozen=True)
class AttributeSet:
    """Formatting attributes of one insert operation.

    Inline attributes (``bold``, ``italic``, ``link``) apply to the text
    they are attached to.  Block attributes (``header``, ``list``,
    ``blockquote``, ``code_block``) are carried by a line-break insert and
    declare the type of the line that just ended.  ``image_alt`` belongs to
    image embeds.
    """

    bold: bool = False
    italic: bool = False
    link: str | None = None
    header: int | None = None
    list: ListKind | None = None
    blockquote: bool = False
    code_block: str | None = None
    image_alt: str | None = None

    # -- classification ---------------------------------------------------

    @property
    def has_block_format(self) -> bool:
        return bool(
            self.header or self.list or self.blockquote or self.code_block
        )

    @property
    def code_language(self) -> str | None:
        """Language of a code line, ``None`` for plain code or no code."""
        if not self.code_block or self.code_block == PLAIN_CODE:
            return None
        return self.code_block

    def inline_only(self) -> AttributeSet:
        return AttributeSet(bold=self.bold, italic=self.italic, link=self.link)

    def block_only(self) -> AttributeSet:
        return AttributeSet(
            header=self.header,
            list=self.list,
            blockquote=self.blockquote,
            code_block=self.code_block,
        )

    def merge(self, **changes: Any) -> AttributeSet:
        return replace(self, **changes)

    # -- wire format ------------------------------------------------------

    @classmethod
    def from_wire(cls, raw: Mapping[str, Any] | None) -> tuple[AttributeSet, list[str]]:
        """Parse a wire attribute dict.

        Returns the attribute set and the sorted keys that were not
        recognised.  Values of the wrong type are dropped.
        """
        if not raw:
            return cls(), []

        unknown = sorted(str(key) for key in raw if key not in _KNOWN_WIRE_KEYS)

        link = raw.get("link")
        alt = raw.get("alt")
        return cls(
            bold=raw.get("bold") is True,
            italic=raw.get("italic") is True,
            link=link if isinstance(link, str) and link else None,
            header=_parse_header(raw.get("header")),
            list=_parse_list_kind(raw.get("list")),
            blockquote=raw.get("blockquote") is True,
            code_block=_parse_code_block(raw),
            image_alt=alt if isinstance(alt, str) and alt else None,
        ), unknown

    def to_wire(self) -> dict[str, Any]:
        """Return the Quill wire attribute dict (only set attributes)."""
        wire: dict[str, Any] = {}
        if self.bold:
            wire["bold"] = True
        if self.italic:
            wire["italic"] = True
        if self.link:
            wire["link"] = self.link
        if self.header:
            wire["header"] = self.header
        if self.list:
            wire["list"] = self.list.value
        if self.blockquote:
            wire["blockquote"] = True
        if self.code_block:
            wire["code-block"] = self.code_block
        if self.image_alt:
            wire["alt"] = self.image_alt
        return wire


def _parse_header(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str) and value.isdigit():
        value = int(value)
    if isinstance(value, int) and value > 0:
        return value
    return None


def _parse_list_kind(value: Any) -> ListKind | None:
    if not value:
        return None
    if value == ListKind.ORDERED.value:
        return ListKind.ORDERED
    # "checked"/"unchecked" task lists degrade to plain bullets
    return ListKind.BULLET


def _parse_code_block(raw: Mapping[str, Any]) -> str | None:
    for key in _CODE_BLOCK_KEYS:
        value = raw.get(key)
        if value is True:
            return PLAIN_CODE
        if isinstance(value, str) and value:
            return value
    return None


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class InsertText:
    """Insert a run of text.  ``"\\n"`` on its own is a line break."""

    text: str
    attributes: AttributeSet = field(default_factory=AttributeSet)

    @property
    def is_line_break(self) -> bool:
        return self.text == "\n"

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {"insert": self.text}
        attrs = self.attributes.to_wire()
        if attrs:
            wire["attributes"] = attrs
        return wire


@dataclass(frozen=True)
class InsertEmbed:
    """Insert an embed; only ``image`` embeds are converted."""

    url: str
    attributes: AttributeSet = field(default_factory=AttributeSet)
    embed_kind: str = "image"

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {"insert": {self.embed_kind: self.url}}
        attrs = self.attributes.to_wire()
        if attrs:
            wire["attributes"] = attrs
        return wire


@dataclass(frozen=True)
class Retain:
    length: int
    attributes: AttributeSet = field(default_factory=AttributeSet)

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {"retain": self.length}
        attrs = self.attributes.to_wire()
        if attrs:
            wire["attributes"] = attrs
        return wire


@dataclass(frozen=True)
class Delete:
    length: int

    def to_wire(self) -> dict[str, Any]:
        return {"delete": self.length}


Operation = Union[InsertText, InsertEmbed, Retain, Delete]


# ---------------------------------------------------------------------------
# Conversion warnings and results
# ---------------------------------------------------------------------------

@dataclass
class ConversionWarning:
    """A non-fatal issue encountered during conversion.

    Warnings are accumulated in result objects so callers can inspect
    them after the conversion completes.

    Attributes
    ----------
    code:
        A machine-readable warning code (e.g. ``"DUPLICATE_SIBLING"``).
    message:
        A human-readable description of the issue.
    context:
        Arbitrary structured data for diagnostics.
    """

    code: str
    message: str
    context: dict = field(default_factory=dict)


@dataclass
class MarkdownResult:
    """Result of the save path (delta → Markdown).

    Attributes
    ----------
    markdown:
        The rendered Markdown.  Always a string, possibly empty.
    warnings:
        Non-fatal issues found while parsing or building the tree.
    used_fallback:
        ``True`` when the printer failed and *markdown* is the plain-text
        extraction of the original operations.
    """

    markdown: str
    warnings: list[ConversionWarning] = field(default_factory=list)
    used_fallback: bool = False


@dataclass
class DeltaResult:
    """Result of the load path (Markdown → delta)."""

    operations: list[Operation] = field(default_factory=list)
    warnings: list[ConversionWarning] = field(default_factory=list)
    used_fallback: bool = False

    def to_wire(self) -> dict[str, Any]:
        """Return the delta as ``{"ops": [...]}`` for the editor."""
        return {"ops": [op.to_wire() for op in self.operations]}
