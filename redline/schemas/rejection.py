"""
Rejection Schema
=================

The caller-facing record produced when a user rejects a suggestion.
It is stored in the per-document rejection store (keyed by the
suggestion fingerprint) and forwarded to the host so the correction
backend can skip the same range on the next request.

The `rangeKey` field keeps its camelCase wire name because the
backend's rejection list is a list of these "start-end" strings.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class RejectionPayload(BaseModel):
    """
    Payload describing a rejected suggestion.

    Coordinates are ALWAYS the suggestion's original (pre-remap)
    offsets, so the same rejection is produced no matter how many
    other suggestions were accepted before it.

    Schema:
        {
          "id": "sugg-0-0",
          "start": 0, "end": 3,
          "rangeKey": "0-3",
          "original": "Teh", "replacement": "The",
          "rule": "Spelling",
          "message": "Common typo.",
          "type": "grammar"
        }
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(description="Suggestion id within its batch")
    start: int = Field(ge=0, description="Original-text start offset")
    end: int = Field(ge=0, description="Original-text end offset")
    range_key: str = Field(alias="rangeKey", description="'{start}-{end}'")
    original: str = Field(description="Original phrase at the range")
    replacement: str = Field(description="Rejected replacement")
    rule: Optional[str] = Field(default=None, description="Rule id or category")
    message: str = Field(default="", description="Message or explanation")
    type: str = Field(default="grammar", description="Suggestion type")

    def to_wire(self) -> dict[str, Any]:
        """Serialize with wire field names (camelCase rangeKey)."""
        return self.model_dump(by_alias=True)
