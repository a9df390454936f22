"""Build a document tree from a linear delta operation stream.

Block structure in a delta is carried by line breaks: the attributes of a
``"\\n"`` insert declare the type of the line that just ended.  The builder
therefore accumulates inline nodes into an open paragraph and decides what
that paragraph becomes when the next break arrives:

- ``header`` -> :class:`Heading` (depth clamped to 1..3)
- ``code-block`` -> :class:`CodeBlock`, merged into a preceding code block
  of the same language
- ``list`` -> :class:`ListItem` in the current or a new :class:`List`
- ``blockquote`` -> :class:`Blockquote`
- no block attribute -> :class:`Paragraph`

Retain and delete operations carry no content and are skipped.  The
builder never raises on typed operations; odd input degrades to plain
paragraphs and is reported through :class:`ConversionWarning`.
"""

from __future__ import annotations

from collections.abc import Iterable

from deltamd.config import MAX_HEADER_LEVEL, DeltaMdConfig
from deltamd.converter.inline import wrap_inline
from deltamd.models import (
    AttributeSet,
    ConversionWarning,
    InsertEmbed,
    InsertText,
    ListKind,
    Operation,
)
from deltamd.nodes import (
    Blockquote,
    CodeBlock,
    Heading,
    Image,
    List,
    ListItem,
    Node,
    Paragraph,
    Root,
    is_blank,
)

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build_tree(
    operations: Iterable[Operation],
    config: DeltaMdConfig,
) -> tuple[Root, list[ConversionWarning]]:
    """Convert delta operations to a document tree.

    Parameters
    ----------
    operations:
        Typed operations, usually from
        :func:`~deltamd.converter.delta_parser.parse_delta`.
    config:
        Converter configuration.

    Returns
    -------
    tuple[Root, list[ConversionWarning]]
        (root, warnings)
    """
    ctx = _BuildContext(config)
    for op in operations:
        _process_operation(op, ctx)

    if ctx.paragraph is not None:
        ctx.root.children.append(ctx.paragraph)
        ctx.paragraph = None

    return ctx.root, ctx.warnings


class _BuildContext:
    """Running state of one build pass."""

    __slots__ = ("config", "current_list", "line_text", "paragraph", "root", "warnings")

    def __init__(self, config: DeltaMdConfig) -> None:
        self.config = config
        self.root = Root()
        self.paragraph: Paragraph | None = None
        self.current_list: List | None = None
        self.line_text = ""
        self.warnings: list[ConversionWarning] = []

    def ensure_paragraph(self) -> Paragraph:
        if self.paragraph is None:
            self.paragraph = Paragraph()
        return self.paragraph

    def append_block(self, node: Node) -> None:
        self.root.children.append(node)

    def last_block(self) -> Node | None:
        return self.root.children[-1] if self.root.children else None

    def add_warning(self, code: str, message: str, **context: object) -> None:
        self.warnings.append(ConversionWarning(
            code=code, message=message, context=dict(context),
        ))


# ---------------------------------------------------------------------------
# Operation dispatch
# ---------------------------------------------------------------------------

def _process_operation(op: Operation, ctx: _BuildContext) -> None:
    if isinstance(op, InsertEmbed):
        if op.embed_kind == "image":
            ctx.ensure_paragraph().children.append(
                Image(url=op.url, alt=op.attributes.image_alt or ""),
            )
        return

    if not isinstance(op, InsertText):
        # retain / delete
        return

    if op.is_line_break:
        _process_line_break(op.attributes, ctx)
    elif "\n" in op.text:
        _process_multiline_text(op, ctx)
    elif op.text:
        _append_text(op.text, op.attributes, ctx)


def _append_text(text: str, attributes: AttributeSet, ctx: _BuildContext) -> None:
    ctx.ensure_paragraph().children.append(wrap_inline(text, attributes))
    ctx.line_text += text


def _process_multiline_text(op: InsertText, ctx: _BuildContext) -> None:
    """Split an insert with embedded newlines into lines.

    Each newline ends the line before it right away.  The break takes the
    insert's own block attributes when it has some (``"a\\n"`` tagged as
    code) and is plain otherwise, so a header carried by a later ``"\\n"``
    only ever applies to the last line.
    """
    inline_attrs = op.attributes.inline_only()
    break_attrs = op.attributes.block_only() if op.attributes.has_block_format else AttributeSet()

    *complete, tail = op.text.split("\n")
    for line in complete:
        if line:
            _append_text(line, inline_attrs, ctx)
        _process_line_break(break_attrs, ctx)
    if tail:
        _append_text(tail, inline_attrs, ctx)


# ---------------------------------------------------------------------------
# Line breaks
# ---------------------------------------------------------------------------

def _process_line_break(attributes: AttributeSet, ctx: _BuildContext) -> None:
    paragraph = ctx.paragraph

    if paragraph is None:
        _process_empty_line(attributes, ctx)
    elif attributes.header:
        _emit_heading(paragraph, attributes.header, ctx)
    elif attributes.code_block:
        _emit_code_line(ctx.line_text, attributes.code_language, ctx)
    elif attributes.list:
        _emit_list_item(ListItem(children=[paragraph]), attributes.list, ctx, dedupe=True)
    elif attributes.blockquote:
        _emit_blockquote(Blockquote(children=[paragraph]), ctx, dedupe=True)
    else:
        ctx.append_block(paragraph)

    if not attributes.has_block_format:
        ctx.current_list = None

    ctx.paragraph = None
    ctx.line_text = ""


def _process_empty_line(attributes: AttributeSet, ctx: _BuildContext) -> None:
    """A break with nothing before it only matters for structural lines."""
    if attributes.code_block:
        _emit_code_line("", attributes.code_language, ctx)
    elif attributes.list:
        _emit_list_item(ListItem(children=[Paragraph()]), attributes.list, ctx, dedupe=False)
    elif attributes.blockquote:
        _emit_blockquote(Blockquote(children=[Paragraph()]), ctx, dedupe=False)


def _emit_heading(paragraph: Paragraph, level: int, ctx: _BuildContext) -> None:
    depth = min(max(level, 1), MAX_HEADER_LEVEL)
    if depth != level:
        ctx.add_warning(
            "HEADER_LEVEL_CLAMPED",
            f"Header level {level} is outside 1-{MAX_HEADER_LEVEL}; used {depth}.",
            level=level,
        )
    ctx.append_block(Heading(depth=depth, children=paragraph.children))


def _emit_code_line(
    text: str,
    language: str | None,
    ctx: _BuildContext,
) -> None:
    target = _find_mergeable_code_block(language, ctx)
    if target is not None:
        target.value += "\n" + text
    else:
        ctx.append_block(CodeBlock(value=text, language=language))


def _find_mergeable_code_block(language: str | None, ctx: _BuildContext) -> CodeBlock | None:
    """The code block a new line of *language* continues, if any.

    ``"previous"`` only looks at the last top-level node.  ``"scan"`` walks
    back over blank nodes left by empty editor lines and stops at the first
    node with content.
    """
    if ctx.config.code_block_merge == "previous":
        candidates = ctx.root.children[-1:]
    else:
        candidates = ctx.root.children

    for node in reversed(candidates):
        if isinstance(node, CodeBlock):
            return node if node.language == language else None
        if not is_blank(node):
            return None
    return None


def _ensure_list(kind: ListKind, ctx: _BuildContext) -> List:
    """The list a new item of *kind* belongs to.

    The current list is continued only while it is still the last
    top-level node and has the same orderedness.
    """
    ordered = kind is ListKind.ORDERED
    current = ctx.current_list
    if current is None or current.ordered != ordered or ctx.last_block() is not current:
        current = List(ordered=ordered)
        ctx.append_block(current)
        ctx.current_list = current
    return current


def _emit_list_item(item: ListItem, kind: ListKind, ctx: _BuildContext, *, dedupe: bool) -> None:
    target = _ensure_list(kind, ctx)
    if dedupe and _is_duplicate(item, target.children, ctx):
        return
    target.children.append(item)


def _emit_blockquote(quote: Blockquote, ctx: _BuildContext, *, dedupe: bool) -> None:
    if dedupe and _is_duplicate(quote, ctx.root.children, ctx):
        return
    ctx.append_block(quote)


def _is_duplicate(node: Node, siblings: list[Node], ctx: _BuildContext) -> bool:
    if not ctx.config.dedupe_siblings or not siblings or siblings[-1] != node:
        return False
    ctx.add_warning(
        "DUPLICATE_SIBLING",
        f"Skipped a {node.type} identical to the one before it.",
        node_type=node.type,
    )
    return True
