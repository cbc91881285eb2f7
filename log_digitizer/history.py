"""
Undo/redo history over immutable Document snapshots.

The history is linear: committing after an undo discards the undone tail.
Loading a preset overwrites the whole history with a single snapshot.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from .data_model import Document

logger = logging.getLogger(__name__)

Mutator = Callable[[Document], Document]
Listener = Callable[[bool, bool], None]


@dataclass(frozen=True)
class _Entry:
    document: Document
    description: str = ""


class HistoryStore:
    def __init__(self, initial: Optional[Document] = None, description: str = "New document") -> None:
        self._entries: List[_Entry] = []
        self._cursor = -1
        self._listeners: List[Listener] = []
        if initial is not None:
            self._entries.append(_Entry(initial, description))
            self._cursor = 0

    # ---------- queries ----------

    @property
    def cursor(self) -> int:
        return self._cursor

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def snapshots(self) -> List[Document]:
        return [e.document for e in self._entries]

    @property
    def current(self) -> Document:
        if self._cursor < 0:
            raise RuntimeError("History has no snapshot yet.")
        return self._entries[self._cursor].document

    @property
    def current_description(self) -> str:
        if 0 <= self._cursor < len(self._entries):
            return self._entries[self._cursor].description
        return ""

    def can_undo(self) -> bool:
        return self._cursor > 0

    def can_redo(self) -> bool:
        return self._cursor < len(self._entries) - 1

    # ---------- edits ----------

    def commit(self, mutator: Mutator, description: str = "") -> Document:
        """Apply `mutator` to the current snapshot and append the result."""
        new_doc = mutator(self.current)
        if not isinstance(new_doc, Document):
            raise TypeError(f"Mutator must return a Document, got {type(new_doc).__name__}")
        del self._entries[self._cursor + 1:]
        self._entries.append(_Entry(new_doc, description))
        self._cursor = len(self._entries) - 1
        logger.debug("commit %r (index %d, total %d)", description, self._cursor, len(self._entries))
        self._notify_listeners()
        return new_doc

    def overwrite(self, document: Document, description: str = "Load preset") -> None:
        self._entries = [_Entry(document, description)]
        self._cursor = 0
        logger.debug("history overwritten: %r", description)
        self._notify_listeners()

    def undo(self) -> Document:
        if self.can_undo():
            self._cursor -= 1
            logger.debug("undo to %r (index %d)", self.current_description, self._cursor)
            self._notify_listeners()
        return self.current

    def redo(self) -> Document:
        if self.can_redo():
            self._cursor += 1
            logger.debug("redo to %r (index %d)", self.current_description, self._cursor)
            self._notify_listeners()
        return self.current

    # ---------- listeners ----------

    def add_listener(self, callback: Listener) -> None:
        """callback receives (can_undo, can_redo) after every history change."""
        self._listeners.append(callback)

    def remove_listener(self, callback: Listener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify_listeners(self) -> None:
        can_undo, can_redo = self.can_undo(), self.can_redo()
        for callback in list(self._listeners):
            try:
                callback(can_undo, can_redo)
            except Exception:
                logger.exception("history listener failed")
