"""
Live Preview
=============

Splits the live text into plain and highlighted segments, one
highlighted segment per pending suggestion, in position order.
Hosts render the segments as a full-text draft with underlines;
the CLI renders them with bracket markers.
"""

from __future__ import annotations

from typing import Optional, Sequence

from redline.review.categories import classify_category
from redline.schemas.preview import PreviewSegment
from redline.schemas.suggestion import LiveSuggestion


def build_preview(
    live_text: str,
    suggestions: Sequence[LiveSuggestion],
    active_id: Optional[str] = None,
) -> list[PreviewSegment]:
    """
    Segment `live_text` around the live ranges of `suggestions`.

    Concatenating the segment texts always reproduces `live_text`.
    A suggestion starting before the end of the previous highlight
    is clipped to the remaining part of its range.
    """
    segments: list[PreviewSegment] = []
    cursor = 0

    for sugg in sorted(suggestions, key=lambda s: (s.start, s.end)):
        start = max(sugg.start, cursor)
        end = min(sugg.end, len(live_text))
        if start > cursor:
            segments.append(PreviewSegment(
                text=live_text[cursor:start], start=cursor, end=start,
            ))
            cursor = start
        if end <= start:
            continue
        segments.append(PreviewSegment(
            text=live_text[start:end],
            start=start,
            end=end,
            suggestion_id=sugg.id,
            category_class=classify_category(sugg.category),
            active=sugg.id == active_id,
        ))
        cursor = end

    if cursor < len(live_text):
        segments.append(PreviewSegment(
            text=live_text[cursor:], start=cursor, end=len(live_text),
        ))
    return segments


def format_preview(segments: Sequence[PreviewSegment]) -> str:
    """Render segments for a terminal: active as [[…]], others as […]."""
    parts = []
    for segment in segments:
        if not segment.is_highlight:
            parts.append(segment.text)
        elif segment.active:
            parts.append(f"[[{segment.text}]]")
        else:
            parts.append(f"[{segment.text}]")
    return "".join(parts)
