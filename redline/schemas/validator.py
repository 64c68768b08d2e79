"""
Schema Validator
=================

JSON-schema export and validation for Redline data contracts.

Usage:
    from redline.schemas.validator import validate_suggestion_batch
    errors = validate_suggestion_batch(items, text)
    if errors:
        print("Validation failed:", errors)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from redline.review.ingest import ingest_suggestions
from redline.schemas.outcome import ReviewOutcome
from redline.schemas.rejection import RejectionPayload
from redline.schemas.suggestion import AcceptedEdit, Suggestion

logger = logging.getLogger("redline.schemas.validator")

SCHEMAS = {
    "suggestion": Suggestion,
    "accepted_edit": AcceptedEdit,
    "rejection": RejectionPayload,
    "outcome": ReviewOutcome,
}


def get_json_schema(schema_name: str) -> dict[str, Any]:
    """
    Export the JSON Schema for a Redline data contract.

    Args:
        schema_name: One of "suggestion", "accepted_edit", "rejection", "outcome".

    Returns:
        JSON Schema dict.
    """
    if schema_name not in SCHEMAS:
        raise ValueError(f"Unknown schema: {schema_name}. Use: {list(SCHEMAS.keys())}")
    return SCHEMAS[schema_name].model_json_schema(by_alias=True)


def export_all_schemas(output_dir: str | Path) -> list[Path]:
    """
    Export all JSON Schemas, one `<name>_schema.json` file each.

    Returns:
        Paths of the written files.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths = []
    for name in SCHEMAS:
        path = output_dir / f"{name}_schema.json"
        with open(path, "w", encoding="utf-8") as f:
            json.dump(get_json_schema(name), f, indent=2, ensure_ascii=False)
        logger.info(f"Exported schema: {path}")
        paths.append(path)
    return paths


def validate_suggestion_batch(
    items: Any,
    text: Optional[str] = None,
) -> list[str]:
    """
    Validate a raw suggestion batch.

    Without `text`, only the per-item schema is checked. With `text`,
    ranges, original phrases and overlaps are checked as well.

    Returns:
        List of error messages (empty if valid).
    """
    if isinstance(items, dict) and "edits" in items:
        items = items["edits"]
    if not isinstance(items, list):
        return [f"Expected a list of suggestions, got {type(items).__name__}"]

    errors: list[str] = []
    if text is None:
        for index, item in enumerate(items):
            try:
                Suggestion.model_validate(item)
            except Exception as e:
                errors.append(f"#{index}: schema validation failed: {e}")
        return errors

    result = ingest_suggestions(text, items, require_phrase_match=True)
    for dropped in sorted(result.dropped, key=lambda d: d.index):
        errors.append(f"#{dropped.index}: {dropped.reason}")

    ids = [item.get("id") for item in items if isinstance(item, dict) and item.get("id")]
    if len(ids) != len(set(ids)):
        errors.append("Duplicate suggestion IDs found")
    return errors


def validate_outcome(data: dict[str, Any]) -> list[str]:
    """Validate a ReviewOutcome dict, including its integrity hash."""
    errors: list[str] = []
    try:
        outcome = ReviewOutcome.model_validate(data)
        if outcome.integrity_hash and not outcome.verify_integrity():
            errors.append("Outcome integrity hash mismatch (possible tampering)")
    except Exception as e:
        errors.append(f"Schema validation failed: {e}")
    return errors
