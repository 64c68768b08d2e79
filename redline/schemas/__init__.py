"""
Redline Data Schemas
=====================

Pydantic v2 models implementing the data contracts of the review
engine:

1. Suggestion        — A proposed replacement over the original text
2. AcceptedEdit      — Ledger record of an accepted replacement
3. LiveSuggestion    — A pending suggestion in live-text coordinates
4. RejectionPayload  — Caller-facing record of a rejected suggestion
5. ReviewOutcome     — Audit record of a review session
6. PreviewSegment    — A run of the live-text preview

All schemas support runtime validation, JSON Schema export and
serialization for persistence.
"""

from redline.schemas.suggestion import (
    AcceptedEdit,
    LiveSuggestion,
    Suggestion,
)
from redline.schemas.rejection import RejectionPayload
from redline.schemas.outcome import ReviewOutcome, ReviewState
from redline.schemas.preview import CategoryClass, PreviewSegment

__all__ = [
    # Suggestions
    "AcceptedEdit",
    "LiveSuggestion",
    "Suggestion",
    # Rejections
    "RejectionPayload",
    # Outcome
    "ReviewOutcome",
    "ReviewState",
    # Preview
    "CategoryClass",
    "PreviewSegment",
]
