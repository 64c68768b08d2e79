"""
Suggestion Schema
==================

Defines the structure of a grammar-correction suggestion as it
arrives from the correction backend, the record of an accepted
edit, and the live projection of a suggestion into the coordinate
space of the text being edited.

Design Decisions:
    - Offsets are character offsets into the ORIGINAL text, half-open
      ([start, end)), so that a suggestion's identity never depends on
      edits made after the batch was generated
    - The backend has used several field names over time
      (original / original_phrase, replacement / suggested_phrase);
      all of them are accepted on input
    - Suggestions are frozen: a batch is immutable for the whole session

Data Flow:
    Backend JSON → Suggestion → (ingest) → ReviewSession → LiveSuggestion
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Wire name → field name. First match wins when several are present.
_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "original_phrase": ("original",),
    "replacement_phrase": ("replacement", "suggested_phrase"),
    "rule": ("ruleId", "rule_id"),
}


class Suggestion(BaseModel):
    """
    A proposed text replacement over a range of the original text.

    Invariant:
        0 <= start < end
        (enforced by field constraints and model_validator; the upper
        bound against the document length is checked at ingestion)

    Schema:
        {
          "id": "sugg-0-0",
          "start": 0, "end": 3,
          "original_phrase": "Teh",
          "replacement_phrase": "The",
          "category": "Spelling",
          "explanation": "Common typo."
        }
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Optional[str] = Field(default=None, description="Opaque identifier, unique within a batch")
    start: int = Field(ge=0, description="Start character offset in the original text")
    end: int = Field(gt=0, description="End character offset in the original text (exclusive)")
    original_phrase: str = Field(description="Text expected at [start, end) in the original")
    replacement_phrase: str = Field(description="Text to substitute")
    category: str = Field(default="", description="Display category (e.g. 'Spelling')")
    explanation: str = Field(default="", description="Free-form explanation, passthrough only")
    rule: Optional[str] = Field(default=None, description="Backend rule identifier, if any")
    message: Optional[str] = Field(default=None, description="Backend message, if any")
    type: Optional[str] = Field(default=None, description="Suggestion type, e.g. 'grammar'")

    @model_validator(mode="before")
    @classmethod
    def remap_wire_fields(cls, data: Any) -> Any:
        """Accept the alternative field names used by the correction backend."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for field_name, aliases in _FIELD_ALIASES.items():
            if data.get(field_name) is not None:
                continue
            for alias in aliases:
                if data.get(alias) is not None:
                    data[field_name] = data[alias]
                    break
        # Backends send explicit nulls for empty metadata
        for field_name in ("category", "explanation"):
            if field_name in data and data[field_name] is None:
                del data[field_name]
        return data

    @model_validator(mode="after")
    def validate_range(self) -> "Suggestion":
        """Ensure the range is non-empty."""
        if self.start >= self.end:
            raise ValueError(
                f"Suggestion start ({self.start}) must be < end ({self.end})"
            )
        return self

    @property
    def length(self) -> int:
        """Length of the replaced range in the original text."""
        return self.end - self.start

    @property
    def delta(self) -> int:
        """Change in text length if this suggestion is applied."""
        return len(self.replacement_phrase) - self.length


class AcceptedEdit(BaseModel):
    """
    Record of one accepted replacement, keyed by original-text offsets.

    Immutable once created. Records are appended in acceptance
    order to an EditLedger and used only for position remapping.

    Invariant:
        delta == len(new_text) - (end - start)
    """
    model_config = ConfigDict(frozen=True)

    start: int = Field(ge=0, description="Original-text start of the replaced range")
    end: int = Field(ge=0, description="Original-text end of the replaced range")
    delta: int = Field(description="len(new_text) - (end - start)")
    new_text: str = Field(description="Inserted replacement text")

    @model_validator(mode="after")
    def validate_delta(self) -> "AcceptedEdit":
        expected = len(self.new_text) - (self.end - self.start)
        if self.start > self.end:
            raise ValueError(f"Edit start ({self.start}) must be <= end ({self.end})")
        if self.delta != expected:
            raise ValueError(f"Edit delta ({self.delta}) must equal {expected}")
        return self

    @classmethod
    def for_suggestion(cls, suggestion: Suggestion) -> "AcceptedEdit":
        """Build the ledger record for accepting `suggestion`."""
        return cls(
            start=suggestion.start,
            end=suggestion.end,
            delta=suggestion.delta,
            new_text=suggestion.replacement_phrase,
        )


class LiveSuggestion(BaseModel):
    """
    A pending suggestion projected into live-text coordinates.

    `start`/`end` index into the current live text; `source` keeps
    the untouched original record (original-text coordinates), which
    is what fingerprints and rejection payloads are computed from.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    start: int
    end: int
    source: Suggestion

    @property
    def original_start(self) -> int:
        return self.source.start

    @property
    def original_end(self) -> int:
        return self.source.end

    @property
    def original_phrase(self) -> str:
        return self.source.original_phrase

    @property
    def replacement_phrase(self) -> str:
        return self.source.replacement_phrase

    @property
    def category(self) -> str:
        return self.source.category

    @property
    def explanation(self) -> str:
        return self.source.explanation
