"""
Redline Test Configuration
===========================

Shared fixtures, factories, and helpers for the entire test suite.
"""

from __future__ import annotations

from typing import Any, Optional

import pytest

from redline.config import RedlineConfig, StoreConfig
from redline.review.engine import ReviewSession
from redline.schemas.suggestion import Suggestion
from redline.store.rejections import InMemoryRejectionStore


# ── Markers ─────────────────────────────────────────────────────

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: fast unit tests")
    config.addinivalue_line("markers", "integration: multi-component tests")


# ── Fixtures ────────────────────────────────────────────────────

@pytest.fixture
def config(tmp_path) -> RedlineConfig:
    """Default config with the rejection store under tmp_path."""
    return RedlineConfig(store=StoreConfig(store_dir=tmp_path / "store"))


@pytest.fixture
def store() -> InMemoryRejectionStore:
    return InMemoryRejectionStore()


@pytest.fixture
def abc_text() -> str:
    return "abc def ghi"


@pytest.fixture
def abc_suggestions() -> list[Suggestion]:
    """Two non-overlapping suggestions over 'abc def ghi'."""
    return [
        make_suggestion(0, 3, "abc", "A", suggestion_id="a"),
        make_suggestion(4, 7, "def", "BB", suggestion_id="b"),
    ]


@pytest.fixture
def teh_text() -> str:
    return "Teh cat sat"


@pytest.fixture
def teh_suggestion() -> Suggestion:
    return make_suggestion(0, 3, "Teh", "The", suggestion_id="s1", category="Spelling")


@pytest.fixture
def backend_batch() -> list[dict[str, Any]]:
    """Raw batch as the correction backend returns it (no ids, wire names)."""
    return [
        {
            "start": 0, "end": 3,
            "original_phrase": "Teh", "suggested_phrase": "The",
            "category": "Spelling", "explanation": "Common typo.",
        },
        {
            "start": 8, "end": 11,
            "original": "sat", "replacement": "sits",
            "category": "Grammar", "explanation": None,
        },
    ]


# ── Factories ───────────────────────────────────────────────────

def make_suggestion(
    start: int,
    end: int,
    original: str,
    replacement: str,
    suggestion_id: Optional[str] = None,
    category: str = "Grammar",
    **extra: Any,
) -> Suggestion:
    """Factory for creating test suggestions."""
    return Suggestion(
        id=suggestion_id,
        start=start,
        end=end,
        original_phrase=original,
        replacement_phrase=replacement,
        category=category,
        **extra,
    )


def make_session(
    text: str,
    suggestions: list[Any],
    store: Optional[InMemoryRejectionStore] = None,
    **kwargs: Any,
) -> ReviewSession:
    """Factory for a review session with recorded callbacks.

    Finished texts, rejection payloads and list-empty notifications
    are collected on `session.calls`.
    """
    calls: dict[str, list] = {"finish": [], "reject": [], "empty": []}
    session = ReviewSession(
        text,
        suggestions,
        rejection_store=store if store is not None else InMemoryRejectionStore(),
        on_finish=calls["finish"].append,
        on_reject=calls["reject"].append,
        on_list_empty=lambda: calls["empty"].append(True),
        **kwargs,
    )
    session.calls = calls
    return session
