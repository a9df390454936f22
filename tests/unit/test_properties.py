"""Property-based tests for deltamd using Hypothesis.

These tests verify invariant properties of the tree builder and the two
conversion directions.  They complement the example-based unit tests by
exercising the code with a wide range of randomly generated inputs.
"""

from __future__ import annotations

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

import deltamd.converter.delta_to_md as delta_to_md_module
from deltamd import delta_to_markdown, markdown_to_delta
from deltamd.config import DeltaMdConfig
from deltamd.converter.delta_parser import parse_delta
from deltamd.converter.md_to_delta import MarkdownToDeltaConverter
from deltamd.converter.tree_builder import build_tree
from deltamd.models import InsertText
from deltamd.nodes import Blockquote, CodeBlock, List, is_blank

# ---------------------------------------------------------------------------
# Reusable strategies
# ---------------------------------------------------------------------------

_plain_words_st = st.from_regex(r"[A-Za-z]{1,8}( [A-Za-z]{1,8}){0,3}", fullmatch=True)

# Words with Markdown punctuation and leading indentation, which the printer
# must escape or drop so the text reads back unchanged.
_words_st = st.from_regex(
    r" {0,5}[A-Za-z\\*_#`]{1,8}( [A-Za-z\\*_#`]{1,8}){0,3}", fullmatch=True,
)

_BLOCK_FORMATS: list[dict | None] = [
    None,
    {"header": 1},
    {"header": 2},
    {"header": 3},
    {"list": "bullet"},
    {"list": "ordered"},
    {"blockquote": True},
    {"code-block": "js"},
    {"code-block": True},
]

_line_st = st.tuples(
    _words_st,
    st.sampled_from(_BLOCK_FORMATS),
    st.booleans(),
    st.booleans(),
)

# An empty plain line, which ends the current list
_EMPTY_LINE = ("", None, False, False)

_list_line_st = st.tuples(
    _words_st,
    st.sampled_from([{"list": "bullet"}, {"list": "ordered"}]),
    st.booleans(),
    st.booleans(),
)

# Arbitrary (possibly odd) attribute dicts for robustness tests.
_attrs_st = st.fixed_dictionaries({}, optional={
    "bold": st.booleans(),
    "italic": st.booleans(),
    "link": st.sampled_from(["http://e", ""]),
    "header": st.integers(min_value=-1, max_value=8),
    "list": st.sampled_from(["bullet", "ordered", "checked"]),
    "blockquote": st.booleans(),
    "code-block": st.sampled_from([True, "js", "python"]),
    "color": st.just("red"),
})

_record_st = st.one_of(
    st.builds(
        lambda text, attrs: {"insert": text, "attributes": attrs},
        st.text(alphabet="ab \n*#>", max_size=12),
        _attrs_st,
    ),
    st.builds(lambda attrs: {"insert": "\n", "attributes": attrs}, _attrs_st),
    st.just({"insert": {"image": "http://x/c.png"}, "attributes": {"alt": "cat"}}),
    st.just({"retain": 3}),
    st.just({"delete": 1}),
)


def _ops_from_lines(lines) -> list[dict]:
    ops: list[dict] = []
    for text, block, bold, italic in lines:
        inline: dict = {}
        if block is None or "code-block" not in block:
            if bold:
                inline["bold"] = True
            if italic:
                inline["italic"] = True
        if text:
            ops.append({"insert": text, "attributes": inline} if inline else {"insert": text})
        ops.append({"insert": "\n", "attributes": block} if block else {"insert": "\n"})
    return ops


# ---------------------------------------------------------------------------
# Tree builder invariants
# ---------------------------------------------------------------------------


class TestTreeBuilderProperties:

    @given(records=st.lists(_record_st, max_size=40))
    @settings(max_examples=200)
    def test_no_adjacent_code_blocks_of_same_language(self, records):
        ops, _ = parse_delta(records)
        root, _ = build_tree(ops, DeltaMdConfig())
        for left, right in zip(root.children, root.children[1:]):
            if isinstance(left, CodeBlock) and isinstance(right, CodeBlock):
                assert left.language != right.language

    @given(records=st.lists(_record_st, max_size=40))
    @settings(max_examples=200)
    def test_no_duplicate_content_siblings(self, records):
        ops, _ = parse_delta(records)
        root, _ = build_tree(ops, DeltaMdConfig())
        for left, right in zip(root.children, root.children[1:]):
            if isinstance(left, Blockquote) and not is_blank(right):
                assert left != right
        for node in root.children:
            if isinstance(node, List):
                for left, right in zip(node.children, node.children[1:]):
                    if not is_blank(right):
                        assert left != right

    @given(records=st.lists(_record_st, max_size=40))
    @settings(max_examples=200)
    def test_headings_stay_within_editor_levels(self, records):
        ops, _ = parse_delta(records)
        root, _ = build_tree(ops, DeltaMdConfig())
        for node in root.children:
            if node.type == "heading":
                assert 1 <= node.depth <= 3


# ---------------------------------------------------------------------------
# Conversion properties
# ---------------------------------------------------------------------------


class TestConversionProperties:

    @given(lines=st.lists(_plain_words_st, min_size=1, max_size=8))
    def test_plain_lines_become_paragraphs(self, lines):
        markdown = delta_to_markdown({"ops": [{"insert": "\n".join(lines) + "\n"}]})
        assert markdown == "\n\n".join(lines) + "\n"

    @given(records=st.lists(_record_st, max_size=40))
    @settings(max_examples=200)
    def test_save_path_always_returns_text(self, records):
        assert isinstance(delta_to_markdown({"ops": records}), str)

    @given(text=st.text(max_size=200))
    @settings(max_examples=200, suppress_health_check=[HealthCheck.too_slow])
    def test_load_path_never_raises(self, text):
        result = MarkdownToDeltaConverter(DeltaMdConfig()).convert(text)
        for op in result.operations:
            if isinstance(op, InsertText) and not op.is_line_break:
                assert not op.attributes.has_block_format

    @given(lines=st.lists(st.one_of(_line_st, st.just(_EMPTY_LINE)), min_size=1, max_size=12))
    @settings(max_examples=200, deadline=None)
    def test_save_load_save_is_idempotent(self, lines):
        first = delta_to_markdown({"ops": _ops_from_lines(lines)})
        second = delta_to_markdown(markdown_to_delta(first))
        assert second == first

    @given(lines=st.lists(st.one_of(_list_line_st, st.just(_EMPTY_LINE)), min_size=1, max_size=12))
    @settings(max_examples=100, deadline=None)
    def test_lists_split_by_empty_lines_are_idempotent(self, lines):
        first = delta_to_markdown({"ops": _ops_from_lines(lines)})
        second = delta_to_markdown(markdown_to_delta(first))
        assert second == first

    @given(records=st.lists(_record_st, max_size=20))
    def test_printer_failure_returns_trimmed_plain_text(self, records):
        def boom(tokens, renderer=None):
            raise RuntimeError("printer exploded")

        ops, _ = parse_delta(records)
        expected = "".join(op.text for op in ops if isinstance(op, InsertText)).strip()
        with pytest.MonkeyPatch.context() as mp:
            mp.setattr(delta_to_md_module, "print_markdown", boom)
            assert delta_to_markdown({"ops": records}) == expected
