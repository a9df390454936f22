"""Tests for the error hierarchy: codes, context and pickling."""

from __future__ import annotations

import pickle
from typing import ClassVar

import pytest

from deltamd.errors import (
    DeltaMdConversionError,
    DeltaMdError,
    DeltaMdMalformedDeltaError,
    DeltaMdParseError,
    DeltaMdRenderError,
    DeltaMdUnsupportedNodeError,
    ErrorCode,
)

# =========================================================================
# 1. TestErrorCodeCompleteness
# =========================================================================


class TestErrorCodeCompleteness:
    """Verify every ErrorCode enum member has a matching error subclass."""

    _CODE_TO_CLASS: ClassVar[dict[ErrorCode, type[DeltaMdError]]] = {
        ErrorCode.CONVERSION_ERROR: DeltaMdConversionError,
        ErrorCode.MALFORMED_DELTA: DeltaMdMalformedDeltaError,
        ErrorCode.RENDER_ERROR: DeltaMdRenderError,
        ErrorCode.PARSE_ERROR: DeltaMdParseError,
        ErrorCode.UNSUPPORTED_NODE: DeltaMdUnsupportedNodeError,
    }

    def test_every_error_code_has_a_subclass(self):
        for code in ErrorCode:
            assert code in self._CODE_TO_CLASS, f"ErrorCode.{code.name} has no mapped class"

    @pytest.mark.parametrize("code", list(ErrorCode))
    def test_error_class_sets_correct_code(self, code: ErrorCode):
        cls = self._CODE_TO_CLASS[code]
        if cls is DeltaMdConversionError:
            err = cls(code=code, message="test")
        else:
            err = cls(message="test")
        assert err.code == code

    def test_conversion_errors_share_a_base(self):
        for cls in self._CODE_TO_CLASS.values():
            assert issubclass(cls, DeltaMdConversionError)
            assert issubclass(cls, DeltaMdError)

    def test_no_duplicate_error_codes(self):
        values = [e.value for e in ErrorCode]
        assert len(values) == len(set(values))


# =========================================================================
# 2. TestErrorAttributes
# =========================================================================


class TestErrorAttributes:

    def test_context_defaults_to_empty_dict(self):
        assert DeltaMdRenderError("boom").context == {}

    def test_cause_is_chained(self):
        cause = ValueError("inner")
        err = DeltaMdParseError("outer", context={"length": 3}, cause=cause)
        assert err.cause is cause
        assert err.__cause__ is cause
        assert str(err) == "outer"

    def test_repr_includes_context(self):
        err = DeltaMdUnsupportedNodeError("no mapping", context={"node_type": "table"})
        text = repr(err)
        assert text.startswith("DeltaMdUnsupportedNodeError(code=")
        assert "message='no mapping'" in text
        assert text.endswith("context={'node_type': 'table'})")

    def test_repr_without_context(self):
        err = DeltaMdError(code="TEST", message="plain")
        assert repr(err) == "DeltaMdError(code='TEST', message='plain')"


# =========================================================================
# 3. TestErrorPickling
# =========================================================================


class TestErrorPickling:
    """Verify errors can be pickled/unpickled for multiprocessing support."""

    @pytest.mark.parametrize(
        ("cls", "kwargs"),
        [
            (DeltaMdMalformedDeltaError, {"message": "no ops", "context": {"received_type": "str"}}),
            (DeltaMdRenderError, {"message": "printer failed", "context": {"node_count": 3}}),
            (DeltaMdParseError, {"message": "parser failed", "context": {"length": 10}}),
            (DeltaMdUnsupportedNodeError, {"message": "unsupported"}),
        ],
    )
    def test_pickle_round_trip(self, cls, kwargs):
        err = cls(**kwargs)
        restored = pickle.loads(pickle.dumps(err))
        assert type(restored) is cls
        assert restored.code == err.code
        assert restored.message == err.message
        assert restored.context == err.context
