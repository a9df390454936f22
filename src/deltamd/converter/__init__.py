"""Delta ↔ Markdown conversion pipeline.

Public API:

- :class:`DeltaToMarkdownConverter` — delta operations → Markdown.
- :class:`MarkdownToDeltaConverter` — Markdown → delta operations.
- :class:`ASTNormalizer` — parse Markdown into the document tree.
- :func:`parse_delta` — wire delta → typed operations.
- :func:`build_tree` — operations → document tree.
- :func:`build_operations` — document tree → operations.
- :func:`tree_to_tokens` / :func:`print_markdown` — document tree → Markdown.
"""

from deltamd.converter.ast_normalizer import ASTNormalizer
from deltamd.converter.delta_parser import extract_plain_text, operations_to_wire, parse_delta
from deltamd.converter.delta_to_md import DeltaToMarkdownConverter
from deltamd.converter.inline import wrap_inline
from deltamd.converter.md_printer import print_markdown, tree_to_tokens
from deltamd.converter.md_to_delta import MarkdownToDeltaConverter
from deltamd.converter.ops_builder import build_operations
from deltamd.converter.tree_builder import build_tree

__all__ = [
    "ASTNormalizer",
    "DeltaToMarkdownConverter",
    "MarkdownToDeltaConverter",
    "build_operations",
    "build_tree",
    "extract_plain_text",
    "operations_to_wire",
    "parse_delta",
    "print_markdown",
    "tree_to_tokens",
    "wrap_inline",
]
