"""Save path: delta operations to Markdown.

:class:`DeltaToMarkdownConverter` orchestrates the three-stage pipeline:

1. **Parse** — :func:`parse_delta` turns the wire delta into typed
   operations.
2. **Build** — :func:`build_tree` reconstructs the block structure.
3. **Print** — :func:`tree_to_tokens` + :func:`print_markdown` produce the
   Markdown text through mistune.

The save path must always yield a string.  A malformed delta becomes an
empty document; a printer failure is logged and replaced by the plain text
of the original operations.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from collections.abc import Iterable
from typing import Any

from deltamd.config import DeltaMdConfig
from deltamd.converter.delta_parser import extract_plain_text, operations_to_wire, parse_delta
from deltamd.converter.md_printer import print_markdown, tree_to_tokens
from deltamd.converter.tree_builder import build_tree
from deltamd.errors import DeltaMdMalformedDeltaError, DeltaMdRenderError
from deltamd.models import ConversionWarning, MarkdownResult, Operation
from deltamd.nodes import Root, node_to_dict
from deltamd.observability import NoopMetricsHook, get_logger, log_event

log = get_logger("deltamd.converter", level=logging.WARNING)

_DIRECTION = "delta_to_markdown"


class DeltaToMarkdownConverter:
    """Convert editor deltas to Markdown text.

    Parameters
    ----------
    config:
        Converter configuration (bullet marker, merge policy, metrics,
        debug dumps).

    Examples
    --------
    >>> converter = DeltaToMarkdownConverter(DeltaMdConfig())
    >>> converter.convert({"ops": [
    ...     {"insert": "Title"},
    ...     {"insert": "\\n", "attributes": {"header": 1}},
    ...     {"insert": "Body\\n"},
    ... ]}).markdown
    '# Title\\n\\nBody\\n'
    """

    def __init__(self, config: DeltaMdConfig) -> None:
        self._config = config
        self._metrics = config.metrics or NoopMetricsHook()

    def convert(self, delta: Any) -> MarkdownResult:
        """Full pipeline: parse -> build tree -> print, never raising.

        Parameters
        ----------
        delta:
            ``{"ops": [...]}`` or a list of operation records.

        Returns
        -------
        MarkdownResult
            The Markdown, the warnings collected on the way, and whether
            the plain-text fallback was used.
        """
        started = time.perf_counter()
        tags = {"direction": _DIRECTION}
        warnings: list[ConversionWarning] = []

        try:
            operations, parse_warnings = parse_delta(delta)
        except DeltaMdMalformedDeltaError as exc:
            log_event(log, logging.WARNING, exc.message, direction=_DIRECTION, **exc.context)
            warnings.append(ConversionWarning(
                code=exc.code, message=exc.message, context=dict(exc.context),
            ))
            operations, parse_warnings = [], []
        warnings.extend(parse_warnings)

        tree, build_warnings = self.build_tree(operations)
        warnings.extend(build_warnings)

        markdown, used_fallback = self._print_or_fallback(tree, operations)
        if used_fallback:
            warnings.append(ConversionWarning(
                code="RENDER_FALLBACK",
                message="Markdown printing failed; plain text was used instead.",
            ))

        self._metrics.increment("deltamd.conversions_total", tags=tags)
        if used_fallback:
            self._metrics.increment("deltamd.fallbacks_total", tags=tags)
        if warnings:
            self._metrics.increment(
                "deltamd.conversion_warnings_total", len(warnings), tags=tags,
            )
        self._metrics.timing(
            "deltamd.conversion_duration_ms",
            (time.perf_counter() - started) * 1000,
            tags=tags,
        )
        log_event(
            log, logging.DEBUG, "delta converted",
            direction=_DIRECTION,
            operations=len(operations),
            warnings=len(warnings),
            used_fallback=used_fallback,
        )
        return MarkdownResult(markdown=markdown, warnings=warnings, used_fallback=used_fallback)

    def build_tree(self, operations: Iterable[Operation]) -> tuple[Root, list[ConversionWarning]]:
        """Build the document tree, honouring the debug dump flags."""
        operations = list(operations)
        if self._config.debug_dump_ops:
            print(
                "[deltamd] Delta operations:",
                json.dumps(operations_to_wire(operations)["ops"], indent=2, ensure_ascii=False),
                file=sys.stderr,
            )

        tree, warnings = build_tree(operations, self._config)

        if self._config.debug_dump_ast:
            print(
                "[deltamd] Document tree:",
                json.dumps(node_to_dict(tree), indent=2, ensure_ascii=False),
                file=sys.stderr,
            )
        return tree, warnings

    def render(self, tree: Root, operations: Iterable[Operation] = ()) -> str:
        """Print *tree* as Markdown.

        If the printer fails for any reason the failure is logged and the
        trimmed plain text of *operations* (the original delta, not the
        tree) is returned instead.
        """
        markdown, _ = self._print_or_fallback(tree, list(operations))
        return markdown

    def _print_or_fallback(self, tree: Root, operations: list[Operation]) -> tuple[str, bool]:
        try:
            return self._print(tree), False
        except Exception as exc:
            log_event(
                log, logging.ERROR, "Markdown printing failed",
                exc_info=True,
                direction=_DIRECTION,
                error=repr(exc),
            )
            log_event(log, logging.WARNING, "falling back to plain text extraction", direction=_DIRECTION)
            return extract_plain_text(operations), True

    def _print(self, tree: Root) -> str:
        try:
            return print_markdown(tree_to_tokens(tree, self._config))
        except DeltaMdRenderError:
            raise
        except Exception as exc:
            raise DeltaMdRenderError(
                "Markdown printer rejected the document tree",
                context={"node_count": len(tree.children)},
                cause=exc,
            ) from exc
