"""Parse Markdown and normalize it to a document tree.

This module wraps mistune v3's AST renderer and maps its raw token stream
onto the closed node set of :mod:`deltamd.nodes`.

Mapped block tokens:
    heading, paragraph, block_text, block_quote, list, list_item,
    task_list_item, block_code

Mapped inline tokens:
    text, strong, emphasis, link, image, softbreak, linebreak

Everything else (thematic breaks, code spans, strikethrough, tables, raw
HTML ...) becomes an :class:`UnknownNode` that keeps its children and raw
text, so later stages can still recover the content.
"""

from __future__ import annotations

from collections.abc import Callable as _Callable

import mistune

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
    UnknownNode,
    extract_text,
)

# Types that should be silently skipped during normalization
_SKIP_TYPES: frozenset[str] = frozenset({
    "blank_line",
})


class ASTNormalizer:
    """Parse Markdown and normalize to a :class:`Root` document tree."""

    def __init__(self) -> None:
        self._parser = mistune.create_markdown(
            renderer="ast",
            plugins=[
                "strikethrough",
                "table",
                "task_lists",
                "url",
            ],
        )

    def parse(self, markdown: str) -> Root:
        """Parse *markdown* and return its document tree."""
        raw_tokens = self._parser(markdown)
        if isinstance(raw_tokens, str):
            return Root()
        return Root(children=self._normalize_tokens(raw_tokens))

    def _normalize_tokens(self, tokens: list[dict]) -> list[Node]:
        """Walk the token list and normalize every node."""
        result: list[Node] = []
        for token in tokens:
            normalized = self._normalize_token(token)
            if normalized is not None:
                result.append(normalized)
        return result

    def _normalize_token(self, token: dict) -> Node | None:
        """Normalize a single token, returning None if it should be skipped."""
        raw_type = token.get("type", "")

        if raw_type in _SKIP_TYPES:
            return None

        handler = _TOKEN_HANDLERS.get(raw_type)
        if handler is not None:
            return handler(self, token)

        return self._normalize_unknown(token)

    def _children(self, token: dict) -> list[Node]:
        return self._normalize_tokens(token.get("children") or [])

    # -- blocks -----------------------------------------------------------

    def _normalize_heading(self, token: dict) -> Node:
        level = token.get("attrs", {}).get("level", 1)
        return Heading(depth=level, children=self._children(token))

    def _normalize_paragraph(self, token: dict) -> Node:
        return Paragraph(children=self._children(token))

    def _normalize_block_quote(self, token: dict) -> Node:
        return Blockquote(children=self._children(token))

    def _normalize_list(self, token: dict) -> Node:
        ordered = bool(token.get("attrs", {}).get("ordered", False))
        return List(ordered=ordered, children=self._children(token))

    def _normalize_list_item(self, token: dict) -> Node:
        return ListItem(children=self._children(token))

    def _normalize_block_code(self, token: dict) -> Node:
        # mistune v3 stores code in "raw" with its trailing newline
        raw_code = token.get("raw", "")
        if raw_code.endswith("\n"):
            raw_code = raw_code[:-1]
        info = (token.get("attrs") or {}).get("info") or ""
        language = info.split()[0] if info.strip() else None
        return CodeBlock(value=raw_code, language=language)

    # -- inlines ----------------------------------------------------------

    def _normalize_text(self, token: dict) -> Node:
        return Text(value=token.get("raw", ""))

    def _normalize_strong(self, token: dict) -> Node:
        return Strong(children=self._children(token))

    def _normalize_emphasis(self, token: dict) -> Node:
        return Emphasis(children=self._children(token))

    def _normalize_link(self, token: dict) -> Node:
        url = token.get("attrs", {}).get("url", "")
        return Link(url=url, children=self._children(token))

    def _normalize_image(self, token: dict) -> Node:
        url = token.get("attrs", {}).get("url", "")
        alt = "".join(extract_text(child) for child in self._children(token))
        return Image(url=url, alt=alt)

    def _normalize_softbreak(self, token: dict) -> Node:
        # Soft break in markdown = single newline, rendered as a space
        return Text(value=" ")

    def _normalize_linebreak(self, token: dict) -> Node:
        return LineBreak()

    def _normalize_unknown(self, token: dict) -> Node:
        children = token.get("children")
        raw = token.get("raw")
        return UnknownNode(
            kind=token.get("type", ""),
            children=self._normalize_tokens(children) if children is not None else None,
            value=raw if isinstance(raw, str) else None,
        )


_TokenHandler = _Callable[[ASTNormalizer, dict], Node]

_TOKEN_HANDLERS: dict[str, _TokenHandler] = {
    "heading": ASTNormalizer._normalize_heading,
    "paragraph": ASTNormalizer._normalize_paragraph,
    # Internal mistune type for tight list content
    "block_text": ASTNormalizer._normalize_paragraph,
    "block_quote": ASTNormalizer._normalize_block_quote,
    "list": ASTNormalizer._normalize_list,
    "list_item": ASTNormalizer._normalize_list_item,
    "task_list_item": ASTNormalizer._normalize_list_item,
    "block_code": ASTNormalizer._normalize_block_code,
    "text": ASTNormalizer._normalize_text,
    "strong": ASTNormalizer._normalize_strong,
    "emphasis": ASTNormalizer._normalize_emphasis,
    "link": ASTNormalizer._normalize_link,
    "image": ASTNormalizer._normalize_image,
    "softbreak": ASTNormalizer._normalize_softbreak,
    "linebreak": ASTNormalizer._normalize_linebreak,
}
