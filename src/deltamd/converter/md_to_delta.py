"""Load path: Markdown to delta operations.

:class:`MarkdownToDeltaConverter` orchestrates the pipeline:

1. **Parse** — mistune parses raw Markdown; :class:`ASTNormalizer` maps
   the tokens onto the document tree.
2. **Build** — :func:`build_operations` walks the tree and emits the
   operations the editor is seeded with.

A parser failure never reaches the caller: it is logged and the whole
input is returned as one plain text insert, so the editor still shows the
stored text.
"""

from __future__ import annotations

import json
import logging
import sys
import time

from deltamd.config import DeltaMdConfig
from deltamd.converter.ast_normalizer import ASTNormalizer
from deltamd.converter.delta_parser import operations_to_wire
from deltamd.converter.ops_builder import build_operations
from deltamd.errors import DeltaMdParseError
from deltamd.models import ConversionWarning, DeltaResult, InsertText
from deltamd.nodes import Root, node_to_dict
from deltamd.observability import NoopMetricsHook, get_logger, log_event

log = get_logger("deltamd.converter", level=logging.WARNING)

_DIRECTION = "markdown_to_delta"


class MarkdownToDeltaConverter:
    """Convert Markdown text to editor deltas.

    Parameters
    ----------
    config:
        Converter configuration (heading overflow policy, metrics, debug
        dumps).

    Examples
    --------
    >>> converter = MarkdownToDeltaConverter(DeltaMdConfig())
    >>> converter.convert("# Hello\\n\\nWorld").to_wire()["ops"][1]
    {'insert': '\\n', 'attributes': {'header': 1}}
    """

    def __init__(self, config: DeltaMdConfig) -> None:
        self._config = config
        self._metrics = config.metrics or NoopMetricsHook()
        self._normalizer = ASTNormalizer()

    def convert(self, markdown: str) -> DeltaResult:
        """Full pipeline: parse -> normalize -> build operations, never raising.

        Parameters
        ----------
        markdown:
            Raw Markdown text, typically the stored value of a form field.

        Returns
        -------
        DeltaResult
            The operations, any warnings, and whether the literal-text
            fallback was used.
        """
        started = time.perf_counter()
        tags = {"direction": _DIRECTION}
        markdown = markdown or ""

        try:
            tree = self.parse(markdown)
        except DeltaMdParseError as exc:
            log_event(
                log, logging.ERROR, exc.message,
                exc_info=True,
                direction=_DIRECTION,
                **exc.context,
            )
            log_event(log, logging.WARNING, "falling back to literal text", direction=_DIRECTION)
            result = DeltaResult(
                operations=[InsertText(markdown)] if markdown else [],
                warnings=[ConversionWarning(
                    code="PARSE_FALLBACK",
                    message="Markdown parsing failed; the text was loaded verbatim.",
                    context=dict(exc.context),
                )],
                used_fallback=True,
            )
        else:
            operations, warnings = build_operations(tree, self._config)
            self._dump_operations(operations)
            result = DeltaResult(operations=operations, warnings=warnings)

        self._metrics.increment("deltamd.conversions_total", tags=tags)
        if result.used_fallback:
            self._metrics.increment("deltamd.fallbacks_total", tags=tags)
        if result.warnings:
            self._metrics.increment(
                "deltamd.conversion_warnings_total", len(result.warnings), tags=tags,
            )
        self._metrics.timing(
            "deltamd.conversion_duration_ms",
            (time.perf_counter() - started) * 1000,
            tags=tags,
        )
        log_event(
            log, logging.DEBUG, "markdown converted",
            direction=_DIRECTION,
            operations=len(result.operations),
            warnings=len(result.warnings),
            used_fallback=result.used_fallback,
        )
        return result

    def parse(self, markdown: str) -> Root:
        """Parse *markdown* into a document tree.

        Raises
        ------
        DeltaMdParseError
            If the Markdown parser fails.
        """
        try:
            tree = self._normalizer.parse(markdown)
        except Exception as exc:
            raise DeltaMdParseError(
                "Markdown parser failed",
                context={"length": len(markdown)},
                cause=exc,
            ) from exc

        if self._config.debug_dump_ast:
            print(
                "[deltamd] Document tree:",
                json.dumps(node_to_dict(tree), indent=2, ensure_ascii=False),
                file=sys.stderr,
            )
        return tree

    def _dump_operations(self, operations: list) -> None:
        if self._config.debug_dump_ops:
            print(
                "[deltamd] Delta operations:",
                json.dumps(operations_to_wire(operations)["ops"], indent=2, ensure_ascii=False),
                file=sys.stderr,
            )
