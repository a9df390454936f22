"""deltamd — Convert rich-text editor deltas to Markdown and back.

Public re-exports
-----------------

* **Converters:** :class:`DeltaToMarkdownConverter`,
  :class:`MarkdownToDeltaConverter` and the :func:`delta_to_markdown` /
  :func:`markdown_to_delta` shortcuts
* **Editor glue:** :class:`EditorAdapter`
* **Configuration:** :class:`DeltaMdConfig`
* **Errors:** Every :class:`DeltaMdError` subclass and :class:`ErrorCode`
* **Models:** Operations, attribute sets, results and warnings

Usage::

    from deltamd import delta_to_markdown, markdown_to_delta

    markdown = delta_to_markdown({"ops": [{"insert": "Hello\\n"}]})
    delta = markdown_to_delta("# Title\\n\\nBody")
"""

from __future__ import annotations

from typing import Any

# ── Editor glue ─────────────────────────────────────────────────────────
from deltamd.adapter import EDITOR_FORMATS, Editor, EditorAdapter, FormField, toolbar_options

# ── Configuration ───────────────────────────────────────────────────────
from deltamd.config import MAX_HEADER_LEVEL, DeltaMdConfig

# ── Converters ──────────────────────────────────────────────────────────
from deltamd.converter.delta_to_md import DeltaToMarkdownConverter
from deltamd.converter.md_to_delta import MarkdownToDeltaConverter

# ── Errors ──────────────────────────────────────────────────────────────
from deltamd.errors import (
    DeltaMdConversionError,
    DeltaMdError,
    DeltaMdMalformedDeltaError,
    DeltaMdParseError,
    DeltaMdRenderError,
    DeltaMdUnsupportedNodeError,
    ErrorCode,
)

# ── Models ──────────────────────────────────────────────────────────────
from deltamd.models import (
    AttributeSet,
    ConversionWarning,
    Delete,
    DeltaResult,
    InsertEmbed,
    InsertText,
    ListKind,
    MarkdownResult,
    Operation,
    Retain,
)


def delta_to_markdown(delta: Any, config: DeltaMdConfig | None = None) -> str:
    """Convert a wire delta to Markdown text.

    Shortcut for ``DeltaToMarkdownConverter(config).convert(delta).markdown``.
    Never raises; see :class:`MarkdownResult` for warnings and fallback
    information.
    """
    return DeltaToMarkdownConverter(config or DeltaMdConfig()).convert(delta).markdown


def markdown_to_delta(markdown: str, config: DeltaMdConfig | None = None) -> dict[str, Any]:
    """Convert Markdown text to a wire delta ``{"ops": [...]}``."""
    return MarkdownToDeltaConverter(config or DeltaMdConfig()).convert(markdown).to_wire()


# ── Public surface ──────────────────────────────────────────────────────

__all__ = [
    # Converters
    "DeltaToMarkdownConverter",
    "MarkdownToDeltaConverter",
    "delta_to_markdown",
    "markdown_to_delta",
    # Editor glue
    "EditorAdapter",
    "Editor",
    "FormField",
    "EDITOR_FORMATS",
    "toolbar_options",
    # Configuration
    "DeltaMdConfig",
    "MAX_HEADER_LEVEL",
    # Error base + code enum
    "DeltaMdError",
    "ErrorCode",
    # Conversion errors
    "DeltaMdConversionError",
    "DeltaMdMalformedDeltaError",
    "DeltaMdRenderError",
    "DeltaMdParseError",
    "DeltaMdUnsupportedNodeError",
    # Models — operations
    "AttributeSet",
    "ListKind",
    "InsertText",
    "InsertEmbed",
    "Retain",
    "Delete",
    "Operation",
    # Models — results
    "ConversionWarning",
    "MarkdownResult",
    "DeltaResult",
]
