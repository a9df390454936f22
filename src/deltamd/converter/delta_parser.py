"""Parse Quill-style wire deltas into typed operations, and back.

A wire delta is ``{"ops": [...]}`` (a bare list of records is accepted
too).  Each record is one of::

    {"insert": "text", "attributes": {...}}
    {"insert": {"image": "https://..."}, "attributes": {"alt": "..."}}
    {"retain": 3, "attributes": {...}}
    {"delete": 2}

Records that cannot be interpreted are skipped with a warning; a delta
without an ``ops`` list raises :class:`DeltaMdMalformedDeltaError`.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from deltamd.errors import DeltaMdMalformedDeltaError
from deltamd.models import (
    AttributeSet,
    ConversionWarning,
    Delete,
    InsertEmbed,
    InsertText,
    Operation,
    Retain,
)


def parse_delta(raw: Any) -> tuple[list[Operation], list[ConversionWarning]]:
    """Convert a wire delta to a list of :data:`Operation` objects.

    Parameters
    ----------
    raw:
        ``{"ops": [...]}`` or a list of operation records.

    Returns
    -------
    tuple[list[Operation], list[ConversionWarning]]
        (operations, warnings)

    Raises
    ------
    DeltaMdMalformedDeltaError
        If *raw* carries no list of operation records.
    """
    if isinstance(raw, Mapping):
        records = raw.get("ops")
    else:
        records = raw

    if not isinstance(records, list):
        raise DeltaMdMalformedDeltaError(
            "Delta has no 'ops' list",
            context={"received_type": type(raw).__name__},
        )

    operations: list[Operation] = []
    warnings: list[ConversionWarning] = []
    reported_keys: set[str] = set()

    for index, record in enumerate(records):
        op = _parse_record(record, index, warnings, reported_keys)
        if op is not None:
            operations.append(op)

    return operations, warnings


def _parse_record(
    record: Any,
    index: int,
    warnings: list[ConversionWarning],
    reported_keys: set[str],
) -> Operation | None:
    if not isinstance(record, Mapping):
        warnings.append(_malformed(index, "operation is not an object"))
        return None

    raw_attrs = record.get("attributes")
    if raw_attrs is not None and not isinstance(raw_attrs, Mapping):
        raw_attrs = None
    attributes, unknown = AttributeSet.from_wire(raw_attrs)
    for key in unknown:
        if key not in reported_keys:
            reported_keys.add(key)
            warnings.append(ConversionWarning(
                code="UNKNOWN_ATTRIBUTE",
                message=f"Attribute '{key}' is not supported and was ignored.",
                context={"attribute": key, "index": index},
            ))

    if "insert" in record:
        insert = record["insert"]
        if isinstance(insert, str):
            return InsertText(text=insert, attributes=attributes)
        if isinstance(insert, Mapping):
            return _parse_embed(insert, attributes, index, warnings)
        warnings.append(_malformed(index, "insert is neither text nor an embed"))
        return None

    if "retain" in record:
        length = record["retain"]
        if isinstance(length, int) and not isinstance(length, bool):
            return Retain(length=length, attributes=attributes)
        warnings.append(_malformed(index, "retain length is not an integer"))
        return None

    if "delete" in record:
        length = record["delete"]
        if isinstance(length, int) and not isinstance(length, bool):
            return Delete(length=length)
        warnings.append(_malformed(index, "delete length is not an integer"))
        return None

    warnings.append(_malformed(index, "operation has no insert, retain or delete"))
    return None


def _parse_embed(
    insert: Mapping[str, Any],
    attributes: AttributeSet,
    index: int,
    warnings: list[ConversionWarning],
) -> Operation | None:
    url = insert.get("image")
    if isinstance(url, str):
        return InsertEmbed(url=url, attributes=attributes)

    kinds = ", ".join(sorted(str(key) for key in insert)) or "empty"
    warnings.append(ConversionWarning(
        code="UNSUPPORTED_EMBED",
        message=f"Embed '{kinds}' is not supported and was skipped.",
        context={"embed": kinds, "index": index},
    ))
    return None


def _malformed(index: int, reason: str) -> ConversionWarning:
    return ConversionWarning(
        code="MALFORMED_OPERATION",
        message=f"Operation {index} was skipped: {reason}.",
        context={"index": index, "reason": reason},
    )


def operations_to_wire(operations: Iterable[Operation]) -> dict[str, Any]:
    """Return ``{"ops": [...]}`` for *operations*."""
    return {"ops": [op.to_wire() for op in operations]}


def extract_plain_text(operations: Iterable[Operation]) -> str:
    """Concatenate every text insert, trimmed of surrounding whitespace.

    This is the save path's last resort when the Markdown printer fails.
    """
    return "".join(
        op.text for op in operations if isinstance(op, InsertText)
    ).strip()
