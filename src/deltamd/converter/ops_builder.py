"""Walk a document tree and emit delta operations.

This is the load-path counterpart of
:mod:`deltamd.converter.tree_builder`.  The walk carries two attribute
sets down the tree:

- *inline* attributes, contributed by ``Strong``/``Emphasis``/``Link`` and
  attached to every text insert below them;
- *block* attributes, contributed by ``Heading``/``List``/``Blockquote``/
  ``CodeBlock`` and attached to the ``"\\n"`` insert that ends each line.

Nested lists are flattened: a line takes the kind of its innermost list.
"""

from __future__ import annotations

from collections.abc import Callable as _Callable
from typing import Any

from deltamd.config import MAX_HEADER_LEVEL, DeltaMdConfig
from deltamd.converter.inline import unwrap_attributes
from deltamd.models import (
    PLAIN_CODE,
    AttributeSet,
    ConversionWarning,
    InsertEmbed,
    InsertText,
    ListKind,
    Operation,
)
from deltamd.nodes import (
    BLOCK_TYPES,
    Blockquote,
    CodeBlock,
    Heading,
    Image,
    LineBreak,
    List,
    ListItem,
    Node,
    Paragraph,
    Root,
    Text,
    UnknownNode,
)

_PLAIN = AttributeSet()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build_operations(
    root: Root,
    config: DeltaMdConfig,
) -> tuple[list[Operation], list[ConversionWarning]]:
    """Convert a document tree to delta operations.

    Parameters
    ----------
    root:
        The tree, usually from
        :meth:`~deltamd.converter.ast_normalizer.ASTNormalizer.parse`.
    config:
        Converter configuration (``heading_overflow`` applies here).

    Returns
    -------
    tuple[list[Operation], list[ConversionWarning]]
        (operations, warnings)
    """
    ctx = _OpsContext(config)
    previous: Node | None = None
    for child in root.children:
        if _is_list_continuation(previous, child):
            # an empty plain line keeps the editor from joining the lists
            ctx.emit_break(_PLAIN)
        _emit_block(child, _PLAIN, ctx)
        previous = child
    return ctx.operations, ctx.warnings


def _is_list_continuation(previous: Node | None, node: Node) -> bool:
    return (
        isinstance(previous, List)
        and isinstance(node, List)
        and previous.ordered == node.ordered
    )


class _OpsContext:
    """Running state of one walk.

    ``line_open`` is true while content has been emitted since the last
    line break.
    """

    __slots__ = ("config", "line_open", "operations", "warnings")

    def __init__(self, config: DeltaMdConfig) -> None:
        self.config = config
        self.operations: list[Operation] = []
        self.warnings: list[ConversionWarning] = []
        self.line_open = False

    def emit_text(self, text: str, attributes: AttributeSet) -> None:
        if not text:
            return
        previous = self.operations[-1] if self.line_open and self.operations else None
        if (
            isinstance(previous, InsertText)
            and not previous.is_line_break
            and previous.attributes == attributes
        ):
            self.operations[-1] = InsertText(previous.text + text, attributes)
        else:
            self.operations.append(InsertText(text, attributes))
        self.line_open = True

    def emit_embed(self, url: str, alt: str) -> None:
        self.operations.append(
            InsertEmbed(url=url, attributes=AttributeSet(image_alt=alt or None)),
        )
        self.line_open = True

    def emit_break(self, block_attrs: AttributeSet) -> None:
        self.operations.append(InsertText("\n", block_attrs.block_only()))
        self.line_open = False

    def add_warning(self, code: str, message: str, **context: Any) -> None:
        self.warnings.append(ConversionWarning(
            code=code, message=message, context=dict(context),
        ))


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------

def _emit_block(node: Node, block_attrs: AttributeSet, ctx: _OpsContext) -> None:
    handler = _BLOCK_HANDLERS.get(node.type)
    if handler is not None:
        handler(node, block_attrs, ctx)
        return
    # Inline content at block level, e.g. a bare image
    _emit_inline(node, _PLAIN, block_attrs, ctx)
    if ctx.line_open:
        ctx.emit_break(block_attrs)


def _emit_paragraph(node: Paragraph, block_attrs: AttributeSet, ctx: _OpsContext) -> None:
    _emit_inlines(node.children, _PLAIN, block_attrs, ctx)
    ctx.emit_break(block_attrs)


def _emit_heading(node: Heading, block_attrs: AttributeSet, ctx: _OpsContext) -> None:
    depth = max(node.depth, 1)

    if depth > MAX_HEADER_LEVEL:
        policy = ctx.config.heading_overflow
        ctx.add_warning(
            "HEADING_OVERFLOW",
            f"Heading level {depth} exceeds {MAX_HEADER_LEVEL}; policy '{policy}' applied.",
            level=depth,
            policy=policy,
        )
        if policy == "paragraph":
            _emit_inlines(node.children, _PLAIN.merge(bold=True), block_attrs, ctx)
            ctx.emit_break(block_attrs)
            return
        depth = MAX_HEADER_LEVEL

    _emit_inlines(node.children, _PLAIN, block_attrs.merge(header=depth), ctx)
    ctx.emit_break(block_attrs.merge(header=depth))


def _emit_list(node: List, block_attrs: AttributeSet, ctx: _OpsContext) -> None:
    kind = ListKind.ORDERED if node.ordered else ListKind.BULLET
    item_attrs = block_attrs.merge(list=kind)
    for item in node.children:
        _emit_block(item, item_attrs, ctx)


def _emit_list_item(node: ListItem, block_attrs: AttributeSet, ctx: _OpsContext) -> None:
    if not node.children:
        ctx.emit_break(block_attrs)
        return
    for child in node.children:
        _emit_block(child, block_attrs, ctx)


def _emit_blockquote(node: Blockquote, block_attrs: AttributeSet, ctx: _OpsContext) -> None:
    quote_attrs = block_attrs.merge(blockquote=True)
    if not node.children:
        ctx.emit_break(quote_attrs)
        return
    for child in node.children:
        _emit_block(child, quote_attrs, ctx)


def _emit_code_block(node: CodeBlock, block_attrs: AttributeSet, ctx: _OpsContext) -> None:
    code_attrs = block_attrs.merge(code_block=node.language or PLAIN_CODE)
    for line in node.value.split("\n"):
        ctx.emit_text(line, _PLAIN)
        ctx.emit_break(code_attrs)


def _emit_unknown_block(node: UnknownNode, block_attrs: AttributeSet, ctx: _OpsContext) -> None:
    if node.children is not None:
        for child in node.children:
            if child.type in BLOCK_TYPES or isinstance(child, UnknownNode):
                _emit_block(child, block_attrs, ctx)
            else:
                _emit_inline(child, _PLAIN, block_attrs, ctx)
        if ctx.line_open:
            ctx.emit_break(block_attrs)
        return

    if node.value:
        for line in node.value.rstrip("\n").split("\n"):
            ctx.emit_text(line, _PLAIN)
            ctx.emit_break(block_attrs)
        return

    _skip_unsupported(node, ctx)


_BlockHandler = _Callable[[Any, AttributeSet, _OpsContext], None]

_BLOCK_HANDLERS: dict[str, _BlockHandler] = {
    "paragraph": _emit_paragraph,
    "heading": _emit_heading,
    "list": _emit_list,
    "list_item": _emit_list_item,
    "blockquote": _emit_blockquote,
    "code_block": _emit_code_block,
    "unknown": _emit_unknown_block,
}


# ---------------------------------------------------------------------------
# Inlines
# ---------------------------------------------------------------------------

def _emit_inlines(
    nodes: list[Node],
    inline_attrs: AttributeSet,
    block_attrs: AttributeSet,
    ctx: _OpsContext,
) -> None:
    for node in nodes:
        _emit_inline(node, inline_attrs, block_attrs, ctx)


def _emit_inline(
    node: Node,
    inline_attrs: AttributeSet,
    block_attrs: AttributeSet,
    ctx: _OpsContext,
) -> None:
    if isinstance(node, Text):
        ctx.emit_text(node.value, inline_attrs)
    elif isinstance(node, Image):
        ctx.emit_embed(node.url, node.alt)
    elif isinstance(node, LineBreak):
        ctx.emit_break(block_attrs)
    elif isinstance(node, UnknownNode):
        if node.children is not None:
            _emit_inlines(node.children, inline_attrs, block_attrs, ctx)
        elif node.value:
            ctx.emit_text(node.value.replace("\n", " "), inline_attrs)
        else:
            _skip_unsupported(node, ctx)
    elif node.type in BLOCK_TYPES:
        _emit_block(node, block_attrs, ctx)
    else:
        children = getattr(node, "children", None) or []
        _emit_inlines(children, unwrap_attributes(node, inline_attrs), block_attrs, ctx)


def _skip_unsupported(node: UnknownNode, ctx: _OpsContext) -> None:
    ctx.add_warning(
        "UNSUPPORTED_NODE",
        f"Markdown construct '{node.kind}' has no editor equivalent and was skipped.",
        node_type=node.kind,
    )
