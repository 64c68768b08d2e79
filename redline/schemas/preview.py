"""
Preview Schema
===============

Segments of the live-text preview. The preview is the live text
split into plain runs and highlighted runs, one highlighted run per
pending suggestion, in position order. Hosts render highlighted runs
as underlines colored by category class.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class CategoryClass(str, Enum):
    """
    Display class of a suggestion category.

    - CORRECTNESS: objective errors (spelling, grammar, punctuation…)
    - STYLE:       stylistic improvements (clarity, word choice…)
    - OTHER:       unknown or empty category
    """
    CORRECTNESS = "correctness"
    STYLE = "style"
    OTHER = "other"


class PreviewSegment(BaseModel):
    """A run of the live text, plain or tied to a pending suggestion."""
    text: str = Field(description="Segment text (slice of the live text)")
    start: int = Field(ge=0, description="Live-text start offset")
    end: int = Field(ge=0, description="Live-text end offset (exclusive)")
    suggestion_id: Optional[str] = Field(default=None, description="Pending suggestion id, if highlighted")
    category_class: Optional[CategoryClass] = Field(default=None)
    active: bool = Field(default=False, description="True for the active suggestion")

    @property
    def is_highlight(self) -> bool:
        return self.suggestion_id is not None
