"""Wire rich-text editors to Markdown form fields.

A host page stores Markdown in plain form fields and edits it with a
delta-based editor.  :class:`EditorAdapter` connects the two:

- :meth:`EditorAdapter.attach` seeds an editor from the field's stored
  Markdown (load path) and remembers the pairing;
- :meth:`EditorAdapter.submit` converts the editor contents back to
  Markdown (save path) and writes them into the field.

The editor and the field are only known through the :class:`Editor` and
:class:`FormField` protocols, so any UI toolkit (or a test double) can be
plugged in.  Attachment state lives on the adapter instance.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

from deltamd.config import DeltaMdConfig
from deltamd.converter.delta_to_md import DeltaToMarkdownConverter
from deltamd.converter.md_to_delta import MarkdownToDeltaConverter
from deltamd.observability import get_logger, log_event

log = get_logger("deltamd.adapter", level=logging.WARNING)

EDITOR_FORMATS: tuple[str, ...] = (
    "bold",
    "italic",
    "link",
    "header",
    "list",
    "blockquote",
    "code",
    "code-block",
    "image",
)
"""Formats the editor is allowed to produce: the Markdown-compatible subset."""


def toolbar_options() -> list[list[Any]]:
    """Return the editor toolbar layout restricted to Markdown formats."""
    return [
        [{"header": 1}, {"header": 2}, {"header": 3}],
        ["bold", "italic", "code"],
        ["link", "image", "blockquote", "code-block"],
        [{"list": "ordered"}, {"list": "bullet"}],
        ["clean"],
    ]


@runtime_checkable
class Editor(Protocol):
    """A delta-based rich-text editor."""

    def get_contents(self) -> Any:
        """Return the current document as a wire delta."""
        ...

    def set_contents(self, delta: dict[str, Any]) -> None:
        """Replace the document with a wire delta."""
        ...


@runtime_checkable
class FormField(Protocol):
    """A form field holding Markdown text."""

    name: str
    value: str


class EditorAdapter:
    """Attach editors to form fields and convert on load and submit.

    Parameters
    ----------
    config:
        Converter configuration shared by both directions.  Defaults to
        ``DeltaMdConfig()``.
    """

    def __init__(self, config: DeltaMdConfig | None = None) -> None:
        self._config = config or DeltaMdConfig()
        self._to_markdown = DeltaToMarkdownConverter(self._config)
        self._to_delta = MarkdownToDeltaConverter(self._config)
        # id(field) -> (field, editor); the field is kept so its id stays unique
        self._sessions: dict[int, tuple[FormField, Editor]] = {}

    def is_attached(self, field: FormField) -> bool:
        return id(field) in self._sessions

    def attach(self, field: FormField, editor: Editor) -> bool:
        """Seed *editor* from *field* and remember the pairing.

        Returns
        -------
        bool
            ``True`` when the editor was attached.  ``False`` when *field*
            already has an editor or seeding the editor failed; the failure
            is logged and the field is left untouched.
        """
        if self.is_attached(field):
            return False

        initial = field.value or ""
        try:
            if initial:
                editor.set_contents(self._to_delta.convert(initial).to_wire())
        except Exception as exc:
            log_event(
                log, logging.ERROR, "failed to initialise editor",
                exc_info=True,
                field=getattr(field, "name", ""),
                error=repr(exc),
            )
            return False

        self._sessions[id(field)] = (field, editor)
        return True

    def attach_all(self, pairs: Iterable[tuple[FormField, Editor]]) -> int:
        """Attach every ``(field, editor)`` pair; return how many succeeded."""
        count = 0
        for field, editor in pairs:
            if self.attach(field, editor):
                count += 1
        if count:
            log_event(log, logging.INFO, "editors attached", count=count)
        return count

    def submit(self, field: FormField) -> str:
        """Write the attached editor's contents into *field* as Markdown.

        Raises
        ------
        KeyError
            If no editor is attached to *field*.
        """
        try:
            _, editor = self._sessions[id(field)]
        except KeyError:
            raise KeyError(f"no editor attached to field {getattr(field, 'name', '')!r}") from None

        markdown = self._to_markdown.convert(editor.get_contents()).markdown
        field.value = markdown
        return markdown

    def detach(self, field: FormField) -> None:
        self._sessions.pop(id(field), None)
