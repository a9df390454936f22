"""Converter configuration for deltamd.

:class:`DeltaMdConfig` captures every tuneable knob of the two conversion
directions.  Instances are passed to
:class:`~deltamd.converter.delta_to_md.DeltaToMarkdownConverter`,
:class:`~deltamd.converter.md_to_delta.MarkdownToDeltaConverter` and
:class:`~deltamd.adapter.EditorAdapter`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

MAX_HEADER_LEVEL = 3
"""Deepest heading the editor toolbar offers (``header`` 1..3)."""

BULLET_CHARS: tuple[str, ...] = ("*", "-", "+")


@dataclass
class DeltaMdConfig:
    """Complete configuration for both conversion directions.

    Every parameter has a default, so ``DeltaMdConfig()`` is a working
    configuration.

    Parameters
    ----------
    bullet:
        Marker used when printing unordered lists.  Ordered lists always
        use ``1.``-style markers.
    heading_overflow:
        Markdown → delta only: how to handle headings of level 4 and
        above, which the editor cannot represent.

        * ``"downgrade"`` — clamp to ``header: 3``.
        * ``"paragraph"`` — emit a bold plain line.
    code_block_merge:
        Delta → Markdown only: which preceding code block a code line may
        merge into.

        * ``"scan"`` — the most recent code block among the trailing
          top-level nodes, skipping blank nodes (empty paragraphs, empty
          blockquotes, lists of empty items).
        * ``"previous"`` — only the literal last top-level node.
    dedupe_siblings:
        Skip a list item or blockquote that is structurally identical to
        the sibling appended just before it.
    metrics:
        Optional :class:`~deltamd.observability.metrics.MetricsHook`.
    debug_dump_ast:
        Write the document tree as JSON to *stderr* on each conversion.
    debug_dump_ops:
        Write the operation list as JSON to *stderr* on each conversion.
    """

    # ── Printing ────────────────────────────────────────────────────────
    bullet: Literal["*", "-", "+"] = "*"

    # ── Headings ────────────────────────────────────────────────────────
    heading_overflow: Literal["downgrade", "paragraph"] = "downgrade"

    # ── Block structure ─────────────────────────────────────────────────
    code_block_merge: Literal["scan", "previous"] = "scan"

    dedupe_siblings: bool = True

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    # ── Debug ───────────────────────────────────────────────────────────
    debug_dump_ast: bool = False

    debug_dump_ops: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.bullet not in BULLET_CHARS:
            raise ValueError(f"bullet must be one of {BULLET_CHARS}, got {self.bullet!r}")
        if self.heading_overflow not in ("downgrade", "paragraph"):
            raise ValueError(
                f"heading_overflow must be 'downgrade' or 'paragraph', got {self.heading_overflow!r}"
            )
        if self.code_block_merge not in ("scan", "previous"):
            raise ValueError(
                f"code_block_merge must be 'scan' or 'previous', got {self.code_block_merge!r}"
            )
