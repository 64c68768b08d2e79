"""
Suggestion Batch Ingestion
===========================

Normalizes a raw batch from the correction backend into an ordered
list of well-formed, non-overlapping Suggestions.

Steps:
    1. Parse each item (dict with any wire aliases, or Suggestion)
    2. Drop malformed items and items outside the original text
    3. Optionally drop items whose original phrase does not match
       the text at their range
    4. Order by (start, end) and drop items overlapping a kept one
    5. Synthesize ids ("sugg-{index}-{start}") for missing/duplicate ids

A bad item never fails the whole batch: it is reported in
`IngestResult.dropped` and logged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from redline.config import IngestConfig, RedlineConfig
from redline.schemas.suggestion import Suggestion

logger = logging.getLogger("redline.review.ingest")


@dataclass
class DroppedSuggestion:
    """An input item that did not make it into the batch."""
    index: int
    reason: str
    raw: Any = None


@dataclass
class IngestResult:
    """Output of `ingest_suggestions`."""
    suggestions: list[Suggestion] = field(default_factory=list)
    dropped: list[DroppedSuggestion] = field(default_factory=list)

    @property
    def num_dropped(self) -> int:
        return len(self.dropped)


def synthesize_id(index: int, start: int) -> str:
    """Deterministic id for a suggestion lacking a usable one."""
    return f"sugg-{index}-{start}"


def _parse(item: Any) -> Suggestion:
    if isinstance(item, Suggestion):
        return item
    return Suggestion.model_validate(item)


def ingest_suggestions(
    original_text: str,
    items: Optional[Iterable[Any]],
    drop_overlapping: bool = True,
    require_phrase_match: bool = False,
    max_suggestions: Optional[int] = None,
) -> IngestResult:
    """
    Normalize a raw suggestion batch against `original_text`.

    Args:
        original_text: Text the batch was generated against.
        items: Raw suggestions (dicts or Suggestion instances).
        drop_overlapping: Drop items overlapping an earlier kept item.
        require_phrase_match: Drop items whose original phrase differs
            from original_text[start:end].
        max_suggestions: Keep at most this many items (by position).

    Returns:
        IngestResult with ordered suggestions and dropped items.
    """
    result = IngestResult()
    candidates: list[tuple[int, Suggestion]] = []

    for index, item in enumerate(items or []):
        try:
            suggestion = _parse(item)
        except ValidationError as e:
            logger.warning(f"Dropping malformed suggestion #{index}: {e.error_count()} error(s)")
            result.dropped.append(DroppedSuggestion(index, f"malformed: {e.errors()[0]['msg']}", item))
            continue

        if suggestion.end > len(original_text):
            logger.warning(
                f"Dropping suggestion #{index}: end={suggestion.end} exceeds "
                f"text length {len(original_text)}"
            )
            result.dropped.append(DroppedSuggestion(index, "out of bounds", item))
            continue

        actual = original_text[suggestion.start:suggestion.end]
        if actual != suggestion.original_phrase:
            if require_phrase_match:
                logger.warning(
                    f"Dropping suggestion #{index}: expected '{suggestion.original_phrase}' "
                    f"at {suggestion.start}-{suggestion.end}, found '{actual}'"
                )
                result.dropped.append(DroppedSuggestion(index, "phrase mismatch", item))
                continue
            logger.debug(
                f"Suggestion #{index} phrase mismatch at {suggestion.start}-{suggestion.end}: "
                f"'{suggestion.original_phrase}' != '{actual}'"
            )

        candidates.append((index, suggestion))

    # Stable sort keeps backend order among identical ranges
    candidates.sort(key=lambda pair: (pair[1].start, pair[1].end))

    seen_ids: set[str] = set()
    last_end = -1
    for index, suggestion in candidates:
        if drop_overlapping and suggestion.start < last_end:
            logger.warning(
                f"Dropping suggestion #{index}: range {suggestion.start}-{suggestion.end} "
                f"overlaps an earlier suggestion"
            )
            result.dropped.append(DroppedSuggestion(index, "overlapping range", suggestion))
            continue
        if max_suggestions is not None and len(result.suggestions) >= max_suggestions:
            result.dropped.append(DroppedSuggestion(index, "batch cap reached", suggestion))
            continue

        if not suggestion.id or suggestion.id in seen_ids:
            new_id = synthesize_id(index, suggestion.start)
            suffix = 1
            while new_id in seen_ids:
                # A backend id already took the synthesized one
                new_id = f"{synthesize_id(index, suggestion.start)}-{suffix}"
                suffix += 1
            suggestion = suggestion.model_copy(update={"id": new_id})
        seen_ids.add(suggestion.id)
        result.suggestions.append(suggestion)
        last_end = max(last_end, suggestion.end)

    if result.dropped:
        logger.info(
            f"Ingested {len(result.suggestions)} suggestions "
            f"({result.num_dropped} dropped)"
        )
    return result


def ingest_with_config(
    original_text: str,
    items: Optional[Iterable[Any]],
    config: RedlineConfig | IngestConfig,
) -> IngestResult:
    """`ingest_suggestions` with options taken from configuration."""
    ingest_cfg = config.ingest if isinstance(config, RedlineConfig) else config
    return ingest_suggestions(
        original_text,
        items,
        drop_overlapping=ingest_cfg.drop_overlapping,
        require_phrase_match=ingest_cfg.require_phrase_match,
        max_suggestions=ingest_cfg.max_suggestions,
    )
