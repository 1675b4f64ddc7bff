from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import List, Optional

from domain.models import (
    HistoryEntry,
    ImageField,
    PaymentPlanField,
    TextField,
    VirtualPage,
)

HISTORY_LIMIT = 50


@dataclass(frozen=True)
class Collections:
    text_fields: List[TextField]
    image_fields: List[ImageField]
    payment_plans: List[PaymentPlanField]
    virtual_pages: List[VirtualPage]


def capture(
    text_fields: Sequence[TextField],
    image_fields: Sequence[ImageField],
    payment_plans: Sequence[PaymentPlanField],
    virtual_pages: Sequence[VirtualPage],
) -> HistoryEntry:
    return HistoryEntry(
        text_fields=tuple(item.model_copy(deep=True) for item in text_fields),
        image_fields=tuple(item.model_copy(deep=True) for item in image_fields),
        payment_plans=tuple(item.model_copy(deep=True) for item in payment_plans),
        virtual_pages=tuple(item.model_copy(deep=True) for item in virtual_pages),
    )


def restore(entry: HistoryEntry) -> Collections:
    return Collections(
        text_fields=[item.model_copy(deep=True) for item in entry.text_fields],
        image_fields=[item.model_copy(deep=True) for item in entry.image_fields],
        payment_plans=[item.model_copy(deep=True) for item in entry.payment_plans],
        virtual_pages=[item.model_copy(deep=True) for item in entry.virtual_pages],
    )


class HistoryManager:
    """Linear undo/redo over full snapshots of the four mutable collections.

    Entries hold the state captured *before* each meaningful mutation. The
    cursor equals ``len(entries)`` while the live state is newer than every
    entry; the first undo from there records the live state as the redo tip.
    Every later undo refreshes the entry under the cursor with the live state,
    so edits made without a snapshot survive a redo.
    """

    def __init__(self, limit: int = HISTORY_LIMIT) -> None:
        self.limit = limit
        self._entries: List[HistoryEntry] = []
        self._cursor = 0

    @property
    def entries(self) -> tuple[HistoryEntry, ...]:
        return tuple(self._entries)

    @property
    def size(self) -> int:
        return len(self._entries)

    @property
    def position(self) -> int:
        return self._cursor

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._entries) - 1

    def clear(self) -> None:
        self._entries = []
        self._cursor = 0

    def snapshot(self, entry: HistoryEntry) -> None:
        del self._entries[self._cursor :]
        self._entries.append(entry)
        if len(self._entries) > self.limit:
            del self._entries[0 : len(self._entries) - self.limit]
        self._cursor = len(self._entries)

    def undo(self, live: HistoryEntry) -> Optional[Collections]:
        if self._cursor == 0:
            return None
        if self._cursor == len(self._entries):
            self._entries.append(live)
        else:
            self._entries[self._cursor] = live
        self._cursor -= 1
        return restore(self._entries[self._cursor])

    def redo(self) -> Optional[Collections]:
        if not self.can_redo:
            return None
        self._cursor += 1
        return restore(self._entries[self._cursor])
