"""Error hierarchy for deltamd.

Every error class inherits from :class:`DeltaMdError`.  Each carries a
machine-readable ``code`` (from :class:`ErrorCode`), a human-readable
``message``, an optional structured ``context`` dict, and an optional
``cause`` (chained exception).

Conversion errors are raised *inside* the pipeline and recovered at the
converter boundary: :class:`~deltamd.converter.delta_to_md.DeltaToMarkdownConverter`
and :class:`~deltamd.converter.md_to_delta.MarkdownToDeltaConverter` never
let them escape to the caller.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes for every error the package can raise."""

    CONVERSION_ERROR = "CONVERSION_ERROR"
    MALFORMED_DELTA = "MALFORMED_DELTA"
    RENDER_ERROR = "RENDER_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    UNSUPPORTED_NODE = "UNSUPPORTED_NODE"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class DeltaMdError(Exception):
    """Base exception for all deltamd errors.

    Parameters
    ----------
    code:
        A value from :class:`ErrorCode` (or any string) identifying the
        error category.
    message:
        A developer-friendly description of what went wrong.
    context:
        Arbitrary structured data providing extra diagnostic detail.
        Keys and expected types are documented per subclass.
    cause:
        The underlying exception, if this error wraps another.
    """

    def __init__(
        self,
        code: str,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.code: str = code
        self.message: str = message
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}{ctx})"


# ---------------------------------------------------------------------------
# Conversion errors
# ---------------------------------------------------------------------------

class DeltaMdConversionError(DeltaMdError):
    """Base class for errors during delta/Markdown conversion.

    Context varies by subclass.
    """

    def __init__(
        self,
        code: str = ErrorCode.CONVERSION_ERROR,
        message: str = "Conversion error",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            context=context,
            cause=cause,
        )


class DeltaMdMalformedDeltaError(DeltaMdConversionError):
    """The wire delta has no usable ``ops`` list.

    Context keys: ``received_type``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.MALFORMED_DELTA,
            message=message,
            context=context,
            cause=cause,
        )


class DeltaMdRenderError(DeltaMdConversionError):
    """The Markdown printer rejected the document tree.

    Context keys: ``node_count``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.RENDER_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class DeltaMdParseError(DeltaMdConversionError):
    """The Markdown parser failed on the input text.

    Context keys: ``length``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.PARSE_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class DeltaMdUnsupportedNodeError(DeltaMdConversionError):
    """A document node has no Markdown printer mapping.

    Context keys: ``node_type``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.UNSUPPORTED_NODE,
            message=message,
            context=context,
            cause=cause,
        )
