"""Document tree nodes.

The tree sits between the two wire formats: the save path builds it from
delta operations and prints it as Markdown; the load path parses Markdown
into it and walks it to emit operations.  Node kinds form a closed set;
Markdown constructs outside that set are carried by :class:`UnknownNode`.

Every node class exposes a ``type`` tag used by the dispatch tables of the
converters.  Nodes are mutable dataclasses (code blocks grow while the tree
is built) and compare structurally, which is what the duplicate-sibling
guard relies on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union


@dataclass
class Root:
    type: ClassVar[str] = "root"
    children: list[Node] = field(default_factory=list)


@dataclass
class Paragraph:
    type: ClassVar[str] = "paragraph"
    children: list[Node] = field(default_factory=list)


@dataclass
class Heading:
    type: ClassVar[str] = "heading"
    depth: int = 1
    children: list[Node] = field(default_factory=list)


@dataclass
class List:
    type: ClassVar[str] = "list"
    ordered: bool = False
    children: list[Node] = field(default_factory=list)


@dataclass
class ListItem:
    type: ClassVar[str] = "list_item"
    children: list[Node] = field(default_factory=list)


@dataclass
class Blockquote:
    type: ClassVar[str] = "blockquote"
    children: list[Node] = field(default_factory=list)


@dataclass
class CodeBlock:
    type: ClassVar[str] = "code_block"
    value: str = ""
    language: str | None = None


@dataclass
class Image:
    type: ClassVar[str] = "image"
    url: str = ""
    alt: str = ""


@dataclass
class Link:
    type: ClassVar[str] = "link"
    url: str = ""
    children: list[Node] = field(default_factory=list)


@dataclass
class Strong:
    type: ClassVar[str] = "strong"
    children: list[Node] = field(default_factory=list)


@dataclass
class Emphasis:
    type: ClassVar[str] = "emphasis"
    children: list[Node] = field(default_factory=list)


@dataclass
class Text:
    type: ClassVar[str] = "text"
    value: str = ""


@dataclass
class LineBreak:
    type: ClassVar[str] = "line_break"


@dataclass
class UnknownNode:
    """A parsed Markdown construct with no dedicated node kind.

    ``kind`` is the parser's token type (``"thematic_break"``,
    ``"codespan"``, ``"table"`` ...).  Consumers recurse into ``children``
    when present and fall back to ``value`` for leaves.
    """

    type: ClassVar[str] = "unknown"
    kind: str = ""
    children: list[Node] | None = None
    value: str | None = None


Node = Union[
    Root, Paragraph, Heading, List, ListItem, Blockquote, CodeBlock,
    Image, Link, Strong, Emphasis, Text, LineBreak, UnknownNode,
]

BLOCK_TYPES: frozenset[str] = frozenset({
    "paragraph", "heading", "list", "list_item", "blockquote", "code_block",
})


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def is_blank(node: Node) -> bool:
    """True for block nodes that hold no content at all.

    Blank nodes are what empty editor lines leave behind: an empty
    paragraph, a blockquote of empty paragraphs, or a list whose items
    are all empty.
    """
    if isinstance(node, Paragraph):
        return not node.children
    if isinstance(node, (Blockquote, ListItem)):
        return all(is_blank(child) for child in node.children)
    if isinstance(node, List):
        return all(is_blank(item) for item in node.children)
    return False


def extract_text(node: Node) -> str:
    """Concatenate the text of *node* and its descendants."""
    if isinstance(node, Text):
        return node.value
    if isinstance(node, CodeBlock):
        return node.value
    if isinstance(node, Image):
        return node.alt
    if isinstance(node, UnknownNode) and node.children is None:
        return node.value or ""
    children = getattr(node, "children", None) or []
    return "".join(extract_text(child) for child in children)


def node_to_dict(node: Node) -> dict[str, Any]:
    """Serialise *node* to plain dicts for debug dumps and snapshots."""
    result: dict[str, Any] = {"type": node.type}
    for name, value in vars(node).items():
        if name == "children":
            if value is not None:
                result["children"] = [node_to_dict(child) for child in value]
        elif value is not None:
            result[name] = value
    return result
