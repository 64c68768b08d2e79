"""
Redline Review Engine
======================

Suggestion reconciliation: fingerprinting, position remapping,
batch ingestion, live preview and the review session itself.

Components:
    - fingerprint.py: Stable suggestion identity + rejection payloads
    - remap.py:       Accepted-edit ledger and position remapping
    - ingest.py:      Batch normalization (aliases, bounds, overlaps, ids)
    - categories.py:  Category → display class / color
    - preview.py:     Live-text preview segmentation
    - engine.py:      ReviewSession state machine
"""

from redline.review.engine import ReviewSession
from redline.review.fingerprint import build_rejection_payload, fingerprint, range_key
from redline.review.remap import EditLedger, remap_position, remap_range

__all__ = [
    "EditLedger",
    "ReviewSession",
    "build_rejection_payload",
    "fingerprint",
    "range_key",
    "remap_position",
    "remap_range",
]
