"""
Suggestion Fingerprinting
==========================

Derives a stable identity for a suggestion that does not depend on
its batch id or on its live position:

    fingerprint = "{start}:{end}:{original_phrase}→{replacement_phrase}"

The same logical edit proposed again at the same original-text
coordinates produces the same fingerprint, which is how a rejected
suggestion is recognized when the backend returns it in a later batch.
"""

from __future__ import annotations

from redline.schemas.rejection import RejectionPayload
from redline.schemas.suggestion import Suggestion

FINGERPRINT_ARROW = "→"


def fingerprint(suggestion: Suggestion) -> str:
    """Stable identity of `suggestion`, independent of id and metadata."""
    return (
        f"{suggestion.start}:{suggestion.end}:"
        f"{suggestion.original_phrase}{FINGERPRINT_ARROW}{suggestion.replacement_phrase}"
    )


def range_key(start: int, end: int) -> str:
    """Backend range key, e.g. '4-7'."""
    return f"{start}-{end}"


def _first_set(*values):
    """First value that is not None."""
    for value in values:
        if value is not None:
            return value
    return None


def build_rejection_payload(
    suggestion: Suggestion,
    default_type: str = "grammar",
) -> RejectionPayload:
    """
    Build the caller-facing rejection payload for `suggestion`.

    `suggestion` must be the original (pre-remap) record so that
    `rangeKey` is stable across accepts. Metadata the backend left
    out falls back to the next source; explicit empty strings are kept.
    """
    category = suggestion.category if "category" in suggestion.model_fields_set else None
    return RejectionPayload(
        id=suggestion.id or "",
        start=suggestion.start,
        end=suggestion.end,
        range_key=range_key(suggestion.start, suggestion.end),
        original=suggestion.original_phrase,
        replacement=suggestion.replacement_phrase,
        rule=_first_set(suggestion.rule, category),
        message=_first_set(suggestion.message, suggestion.explanation),
        type=_first_set(suggestion.type, default_type),
    )
