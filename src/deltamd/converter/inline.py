"""Wrap inline text in formatting nodes according to its attributes.

The nesting order is fixed, innermost first::

    Text -> Strong (bold) -> Emphasis (italic) -> Link (link)

so ``bold + italic + link`` becomes ``Link(Emphasis(Strong(Text)))`` and
prints as ``[***x***](url)``.  Changing the order changes the emphasis
markers in the printed Markdown, so it is part of the output contract.
"""

from __future__ import annotations

from deltamd.models import AttributeSet
from deltamd.nodes import Emphasis, Link, Node, Strong, Text


def wrap_inline(text: str, attributes: AttributeSet) -> Node:
    """Return *text* as a ``Text`` node wrapped per *attributes*."""
    node: Node = Text(value=text)

    if attributes.bold:
        node = Strong(children=[node])

    if attributes.italic:
        node = Emphasis(children=[node])

    if attributes.link:
        node = Link(url=attributes.link, children=[node])

    return node


def unwrap_attributes(node: Node, inherited: AttributeSet) -> AttributeSet:
    """Inline attributes contributed by a formatting *node*.

    The inverse of :func:`wrap_inline`, used when walking a tree back into
    operations.  Non-formatting nodes leave *inherited* unchanged.
    """
    if isinstance(node, Strong):
        return inherited.merge(bold=True)
    if isinstance(node, Emphasis):
        return inherited.merge(italic=True)
    if isinstance(node, Link):
        return inherited.merge(link=node.url or None)
    return inherited
