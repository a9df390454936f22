"""Tests for the load-path pipeline: Markdown → delta."""

from __future__ import annotations

import pytest

from deltamd.config import DeltaMdConfig
from deltamd.converter.md_to_delta import MarkdownToDeltaConverter
from deltamd.errors import DeltaMdParseError
from deltamd.models import InsertText


class RecordingMetricsHook:
    """A metrics backend that records all calls for assertion."""

    def __init__(self) -> None:
        self.increments: list[tuple[str, int, dict | None]] = []
        self.timings: list[tuple[str, float, dict | None]] = []

    def increment(self, name, value=1, tags=None):
        self.increments.append((name, value, tags))

    def timing(self, name, ms, tags=None):
        self.timings.append((name, ms, tags))

    def gauge(self, name, value, tags=None):
        pass


@pytest.fixture
def broken_parser(monkeypatch, to_delta):
    def boom(markdown):
        raise RuntimeError("parser exploded")

    monkeypatch.setattr(to_delta._normalizer, "parse", boom)
    return to_delta


class TestConvert:

    def test_heading_and_paragraph(self, to_delta):
        result = to_delta.convert("# Hello\n\nWorld")
        assert result.to_wire() == {"ops": [
            {"insert": "Hello"},
            {"insert": "\n", "attributes": {"header": 1}},
            {"insert": "World"},
            {"insert": "\n"},
        ]}
        assert result.warnings == []
        assert result.used_fallback is False

    def test_lists_and_code(self, to_delta):
        ops = to_delta.convert("* a\n* b\n\n```py\nx = 1\n```\n").to_wire()["ops"]
        assert ops == [
            {"insert": "a"},
            {"insert": "\n", "attributes": {"list": "bullet"}},
            {"insert": "b"},
            {"insert": "\n", "attributes": {"list": "bullet"}},
            {"insert": "x = 1"},
            {"insert": "\n", "attributes": {"code-block": "py"}},
        ]

    def test_inline_formatting(self, to_delta):
        ops = to_delta.convert("Plain **bold** [link](http://e)").to_wire()["ops"]
        assert ops == [
            {"insert": "Plain "},
            {"insert": "bold", "attributes": {"bold": True}},
            {"insert": " "},
            {"insert": "link", "attributes": {"link": "http://e"}},
            {"insert": "\n"},
        ]

    def test_empty_markdown(self, to_delta):
        assert to_delta.convert("").operations == []

    def test_none_is_treated_as_empty(self, to_delta):
        assert to_delta.convert(None).operations == []

    def test_heading_overflow_warning(self, to_delta):
        result = to_delta.convert("#### Deep")
        assert result.operations[1].is_line_break
        assert result.operations[1].attributes.header == 3
        assert [w.code for w in result.warnings] == ["HEADING_OVERFLOW"]

    def test_heading_overflow_policy_from_config(self):
        converter = MarkdownToDeltaConverter(DeltaMdConfig(heading_overflow="paragraph"))
        ops = converter.convert("##### Deep").to_wire()["ops"]
        assert ops == [
            {"insert": "Deep", "attributes": {"bold": True}},
            {"insert": "\n"},
        ]


class TestFallback:

    def test_parser_failure_loads_literal_text(self, broken_parser):
        result = broken_parser.convert("# not *parsed*")
        assert result.operations == [InsertText("# not *parsed*")]
        assert result.used_fallback is True
        assert result.warnings[0].code == "PARSE_FALLBACK"
        assert result.warnings[0].context == {"length": 14}

    def test_parse_raises_wrapped_error(self, broken_parser):
        with pytest.raises(DeltaMdParseError) as exc_info:
            broken_parser.parse("x")
        assert isinstance(exc_info.value.cause, RuntimeError)

    def test_fallback_metrics(self, monkeypatch):
        hook = RecordingMetricsHook()
        converter = MarkdownToDeltaConverter(DeltaMdConfig(metrics=hook))
        monkeypatch.setattr(converter._normalizer, "parse", lambda markdown: 1 / 0)
        converter.convert("x")
        names = [name for name, _, _ in hook.increments]
        assert names == [
            "deltamd.conversions_total",
            "deltamd.fallbacks_total",
            "deltamd.conversion_warnings_total",
        ]
        assert all(tags == {"direction": "markdown_to_delta"} for _, _, tags in hook.increments)


class TestObservability:

    def test_metrics_are_emitted(self):
        hook = RecordingMetricsHook()
        MarkdownToDeltaConverter(DeltaMdConfig(metrics=hook)).convert("x")
        assert [name for name, _, _ in hook.increments] == ["deltamd.conversions_total"]
        assert hook.timings[0][0] == "deltamd.conversion_duration_ms"

    def test_debug_dumps(self, capsys):
        converter = MarkdownToDeltaConverter(DeltaMdConfig(debug_dump_ast=True, debug_dump_ops=True))
        converter.convert("# T")
        err = capsys.readouterr().err
        assert "[deltamd] Document tree:" in err
        assert "[deltamd] Delta operations:" in err
        assert '"depth": 1' in err
