"""Print a document tree as Markdown through mistune's Markdown renderer.

The tree is first mapped to mistune AST tokens (the same token shapes
``mistune.create_markdown(renderer="ast")`` produces), then printed with
:class:`mistune.renderers.markdown.MarkdownRenderer`.  The printer
configuration is fixed: tight lists, ``config.bullet`` for bullets,
``1.``-style ordered markers, one space between marker and content, fenced
code blocks.

Top-level blocks are printed one at a time and joined with a blank line,
so a paragraph following a list never becomes a lazy continuation line.
A list directly following a list of the same kind switches to the
alternate marker (``*``/``-``, ``.``/``)``) so the two read back as two
lists.

Text must read back as the same text.  Inline markers and backslashes
before punctuation are escaped, and whitespace at the edges of a line or
of an emphasis run is moved outside the run or dropped.
"""

from __future__ import annotations

import re
from collections.abc import Callable as _Callable
from typing import Any

from mistune.core import BlockState
from mistune.renderers.markdown import MarkdownRenderer

from deltamd.config import DeltaMdConfig
from deltamd.errors import DeltaMdUnsupportedNodeError
from deltamd.nodes import (
    Blockquote,
    CodeBlock,
    Emphasis,
    Heading,
    Image,
    LineBreak,
    Link,
    List,
    ListItem,
    Node,
    Paragraph,
    Root,
    Strong,
    Text,
)

# A backslash is literal unless it precedes ASCII punctuation; one at the
# end of a run may meet punctuation from the next token.
_BACKSLASH_RE = re.compile(r"\\(?=[!-/:-@\[-`{-~]|$)")

# Characters that open inline constructs.  ``_`` only delimits emphasis at
# a word edge, ``#`` only closes an ATX heading when followed by space.
_INLINE_MARKER_RE = re.compile(
    r"[*`\[\]~]|#(?=\s|$)|(?<![0-9A-Za-z])_|_(?![0-9A-Za-z])",
)

_ALTERNATE_BULLETS: dict[str, str] = {
    "*": "-",
    "-": "*",
    "+": "*",
    ".": ")",
    ")": ".",
}


def escape_text(raw: str) -> str:
    """Escape *raw* so mistune parses it back as the same literal text."""
    raw = _BACKSLASH_RE.sub(r"\\\\", raw)
    return _INLINE_MARKER_RE.sub(r"\\\g<0>", raw)


class EditorMarkdownRenderer(MarkdownRenderer):
    """mistune's Markdown renderer with full text escaping and visible
    empty blockquotes."""

    NAME = "deltamd"

    def text(self, token: dict[str, Any], state: BlockState) -> str:
        return escape_text(token["raw"])

    def block_quote(self, token: dict[str, Any], state: BlockState) -> str:
        if not self.render_children(token, state).strip():
            return ">\n\n"
        return super().block_quote(token, state)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def tree_to_tokens(root: Root, config: DeltaMdConfig) -> list[dict]:
    """Map a document tree to mistune block tokens.

    Raises
    ------
    DeltaMdUnsupportedNodeError
        If the tree contains a node without a token mapping.
    """
    return [_block_token(node, config) for node in root.children]


def print_markdown(
    tokens: list[dict],
    renderer: MarkdownRenderer | None = None,
) -> str:
    """Render mistune block tokens to Markdown text.

    Returns ``""`` for an empty document, otherwise the blocks separated by
    blank lines with a single trailing newline.  Blocks that render empty
    are dropped; a list printed right after a list of the same kind gets
    the alternate marker.
    """
    renderer = renderer or EditorMarkdownRenderer()
    state = BlockState()
    blocks: list[str] = []
    previous: dict | None = None
    for token in tokens:
        if _continues_list(previous, token):
            token = {**token, "bullet": _ALTERNATE_BULLETS[previous["bullet"]]}
        text = renderer.render_token(token, state).rstrip()
        if text:
            blocks.append(text)
            previous = token
    if not blocks:
        return ""
    return "\n\n".join(blocks) + "\n"


def _continues_list(previous: dict | None, token: dict) -> bool:
    return (
        previous is not None
        and previous["type"] == "list"
        and token["type"] == "list"
        and previous["attrs"]["ordered"] == token["attrs"]["ordered"]
        and previous["bullet"] == token["bullet"]
    )


# ---------------------------------------------------------------------------
# Block tokens
# ---------------------------------------------------------------------------

def _block_token(node: Node, config: DeltaMdConfig) -> dict:
    mapper = _BLOCK_MAPPERS.get(node.type)
    if mapper is None:
        raise DeltaMdUnsupportedNodeError(
            f"No Markdown mapping for block node '{node.type}'",
            context={"node_type": getattr(node, "kind", node.type)},
        )
    return mapper(node, config)


def _paragraph_token(node: Paragraph, config: DeltaMdConfig) -> dict:
    return {"type": "paragraph", "children": _line_tokens(node.children)}


def _heading_token(node: Heading, config: DeltaMdConfig) -> dict:
    return {
        "type": "heading",
        "attrs": {"level": node.depth},
        "style": "atx",
        "children": _line_tokens(node.children),
    }


def _list_token(node: List, config: DeltaMdConfig) -> dict:
    return {
        "type": "list",
        "tight": True,
        "bullet": "." if node.ordered else config.bullet,
        "attrs": {"depth": 0, "ordered": node.ordered},
        "children": [_list_item_token(item, config) for item in node.children],
    }


def _list_item_token(node: Node, config: DeltaMdConfig) -> dict:
    if not isinstance(node, ListItem):
        raise DeltaMdUnsupportedNodeError(
            f"List child must be a list item, got '{node.type}'",
            context={"node_type": node.type},
        )
    children: list[dict] = []
    for child in node.children:
        if isinstance(child, Paragraph):
            # tight lists hold block_text, not paragraphs
            children.append({"type": "block_text", "children": _line_tokens(child.children)})
        else:
            children.append(_block_token(child, config))
    return {"type": "list_item", "children": children}


def _blockquote_token(node: Blockquote, config: DeltaMdConfig) -> dict:
    return {
        "type": "block_quote",
        "children": [_block_token(child, config) for child in node.children],
    }


def _code_token(node: CodeBlock, config: DeltaMdConfig) -> dict:
    return {
        "type": "block_code",
        "raw": node.value,
        "style": "fenced",
        "attrs": {"info": node.language or ""},
    }


_BlockMapper = _Callable[[Any, DeltaMdConfig], dict]

_BLOCK_MAPPERS: dict[str, _BlockMapper] = {
    "paragraph": _paragraph_token,
    "heading": _heading_token,
    "list": _list_token,
    "blockquote": _blockquote_token,
    "code_block": _code_token,
}


# ---------------------------------------------------------------------------
# Inline tokens
# ---------------------------------------------------------------------------

def _line_tokens(nodes: list[Node]) -> list[dict]:
    """Inline tokens of one block with whitespace trimmed at line edges.

    Leading indentation would turn a line into an indented code block and
    trailing spaces into a hard break; the parser drops both anyway.
    """
    lines: list[list[dict]] = [[]]
    for token in _inline_tokens(nodes):
        if token["type"] == "linebreak":
            lines.append([])
        else:
            lines[-1].append(token)

    trimmed: list[dict] = []
    for index, line in enumerate(lines):
        if index:
            trimmed.append({"type": "linebreak"})
        _, inner, _ = _split_edge_whitespace(line)
        trimmed.extend(inner)
    return trimmed


def _inline_tokens(nodes: list[Node]) -> list[dict]:
    tokens: list[dict] = []
    for node in nodes:
        tokens.extend(_inline_token(node))
    return _merge_adjacent(tokens)


def _inline_token(node: Node) -> list[dict]:
    if isinstance(node, Text):
        return [_text_token(node.value)] if node.value else []
    if isinstance(node, Strong):
        return _delimited_tokens("strong", node.children)
    if isinstance(node, Emphasis):
        return _delimited_tokens("emphasis", node.children)
    if isinstance(node, Link):
        return [{
            "type": "link",
            "attrs": {"url": node.url},
            "children": _inline_tokens(node.children),
        }]
    if isinstance(node, Image):
        return [_image_token(node)]
    if isinstance(node, LineBreak):
        return [{"type": "linebreak"}]
    raise DeltaMdUnsupportedNodeError(
        f"No Markdown mapping for inline node '{node.type}'",
        context={"node_type": getattr(node, "kind", node.type)},
    )


def _image_token(node: Image) -> dict:
    """Image token whose title repeats the alt text.

    The title is printed in double quotes with ``"`` and ``\\`` escaped
    (``![say "hi"](u "say \\"hi\\"")``).  Only the alt text is read back,
    so the title never changes the loaded image.
    """
    attrs: dict[str, Any] = {"url": node.url}
    if node.alt:
        attrs["title"] = node.alt
    return {
        "type": "image",
        "attrs": attrs,
        "children": [_text_token(node.alt)],
    }


def _delimited_tokens(kind: str, nodes: list[Node]) -> list[dict]:
    # "** a**" is not emphasis, so edge whitespace goes outside the run
    lead, inner, trail = _split_edge_whitespace(_inline_tokens(nodes))
    tokens: list[dict] = []
    if lead:
        tokens.append(_text_token(lead))
    if inner:
        tokens.append({"type": kind, "children": inner})
    if trail:
        tokens.append(_text_token(trail))
    return tokens


def _split_edge_whitespace(tokens: list[dict]) -> tuple[str, list[dict], str]:
    """Split leading and trailing whitespace off the outer text tokens."""
    inner = list(tokens)
    lead = trail = ""
    while inner and inner[0]["type"] == "text":
        raw = inner[0]["raw"]
        stripped = raw.lstrip()
        lead += raw[:len(raw) - len(stripped)]
        if stripped:
            inner[0] = _text_token(stripped)
            break
        inner.pop(0)
    while inner and inner[-1]["type"] == "text":
        raw = inner[-1]["raw"]
        stripped = raw.rstrip()
        trail = raw[len(stripped):] + trail
        if stripped:
            inner[-1] = _text_token(stripped)
            break
        inner.pop()
    return lead, inner, trail


def _merge_adjacent(tokens: list[dict]) -> list[dict]:
    """Join neighbouring tokens of the same kind.

    Two strong runs side by side would print as ``**a****b**``.
    """
    merged: list[dict] = []
    for token in tokens:
        previous = merged[-1] if merged else None
        if previous is None or previous["type"] != token["type"]:
            merged.append(token)
        elif token["type"] == "text":
            merged[-1] = _text_token(previous["raw"] + token["raw"])
        elif token["type"] in ("strong", "emphasis") or (
            token["type"] == "link" and previous["attrs"] == token["attrs"]
        ):
            merged[-1] = {
                **previous,
                "children": _merge_adjacent(previous["children"] + token["children"]),
            }
        else:
            merged.append(token)
    return merged


def _text_token(raw: str) -> dict:
    return {"type": "text", "raw": raw}
