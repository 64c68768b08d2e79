"""
Position Remapping
===================

Translates original-text offsets into live-text offsets after a
sequence of accepted edits.

Algorithm (fold over the ledger in acceptance order):
    For each edit {start, end, delta, new_text} (original coordinates):
        1. pos <= start          → unaffected
        2. pos >  end            → shift by delta
        3. start < pos <= end    → snap to the end of the inserted
                                   replacement (no interpolation)

Because pending suggestions never overlap accepted ones, every
edit located before a position contributes its delta exactly once,
whatever the acceptance order. The snap in case 3 is expressed
relative to the running value so that it also lands in live
coordinates when earlier edits precede the replaced span.

The ledger is an explicit append-only sequence and `remap_position`
is a pure function of (position, ledger).
"""

from __future__ import annotations

from typing import Iterable, Iterator

from redline.schemas.suggestion import AcceptedEdit


class EditLedger:
    """
    Ordered, append-only record of accepted edits.

    Usage:
        ledger = EditLedger()
        ledger.append(AcceptedEdit.for_suggestion(suggestion))
        live_start = remap_position(other.start, ledger)
    """

    def __init__(self, edits: Iterable[AcceptedEdit] = ()):
        self._edits: list[AcceptedEdit] = list(edits)

    def append(self, edit: AcceptedEdit) -> None:
        self._edits.append(edit)

    def __iter__(self) -> Iterator[AcceptedEdit]:
        return iter(self._edits)

    def __len__(self) -> int:
        return len(self._edits)

    def __getitem__(self, index: int) -> AcceptedEdit:
        return self._edits[index]

    @property
    def total_delta(self) -> int:
        """Net change in text length over all accepted edits."""
        return sum(edit.delta for edit in self._edits)

    def snapshot(self) -> tuple[AcceptedEdit, ...]:
        """Immutable copy of the current ledger contents."""
        return tuple(self._edits)


def remap_position(original_pos: int, ledger: Iterable[AcceptedEdit]) -> int:
    """
    Map an original-text offset to its offset in the live text.

    Args:
        original_pos: Offset into the original text.
        ledger: Accepted edits in acceptance order.

    Returns:
        The corresponding offset in the current live text.
    """
    mapped = original_pos
    for edit in ledger:
        if original_pos <= edit.start:
            continue
        if original_pos > edit.end:
            mapped += edit.delta
        else:
            mapped += edit.start + len(edit.new_text) - original_pos
    return mapped


def remap_range(start: int, end: int, ledger: Iterable[AcceptedEdit]) -> tuple[int, int]:
    """Remap both ends of a half-open original-text range."""
    edits = tuple(ledger)
    return remap_position(start, edits), remap_position(end, edits)
