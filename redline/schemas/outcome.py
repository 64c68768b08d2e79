"""
Review Outcome Schema
======================

Session state enumeration and the audit record produced when a
review session ends.

The ReviewOutcome summarizes what happened in one review pass:
which suggestions were accepted, which were rejected, what is
left, and the committed text. It carries an integrity hash over
its own content so a stored outcome can be checked for tampering.

Data Flow:
    ReviewSession → ReviewOutcome → host (persist / display)
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from redline.utils import compute_content_hash


class ReviewState(str, Enum):
    """
    Lifecycle state of a review session.

    - REVIEWING: suggestions remain pending
    - RESOLVED:  every suggestion was accepted or rejected (terminal)
    - CLOSED:    the host closed the review early (terminal)
    """
    REVIEWING = "reviewing"
    RESOLVED = "resolved"
    CLOSED = "closed"


class ReviewOutcome(BaseModel):
    """
    Audit record of a finished (or in-progress) review session.

    The integrity hash is computed over all fields except
    `integrity_hash` itself.
    """
    session_id: str = Field(description="Review session identifier")
    state: ReviewState = Field(description="Session state when the outcome was taken")
    original_text: str = Field(description="Text the batch was generated against")
    final_text: str = Field(description="Committed (live) text")
    changed: bool = Field(description="True if final_text differs from original_text")
    accepted: list[str] = Field(
        default_factory=list,
        description="Fingerprints of accepted suggestions, in acceptance order"
    )
    rejected: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Rejection payloads (wire format), in rejection order"
    )
    remaining: int = Field(default=0, ge=0, description="Suggestions still pending")
    dropped: int = Field(default=0, ge=0, description="Suggestions dropped at ingestion")
    config_hash: str = Field(default="", description="Hash of the configuration used")
    timestamp: str = Field(
        default_factory=lambda: time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        description="ISO 8601 timestamp"
    )
    integrity_hash: str = Field(default="", description="SHA-256 of outcome content")

    @property
    def num_accepted(self) -> int:
        return len(self.accepted)

    @property
    def num_rejected(self) -> int:
        return len(self.rejected)

    def compute_integrity_hash(self) -> str:
        """SHA-256 over the outcome content, excluding the hash field."""
        content = self.model_dump(mode="json", exclude={"integrity_hash"})
        return compute_content_hash(content)

    def seal(self) -> "ReviewOutcome":
        """Compute and store the integrity hash. Returns self."""
        self.integrity_hash = self.compute_integrity_hash()
        return self

    def verify_integrity(self) -> bool:
        """True if the stored hash matches the current content."""
        if not self.integrity_hash:
            return False
        return self.integrity_hash == self.compute_integrity_hash()
