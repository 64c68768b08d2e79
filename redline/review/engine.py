"""
Suggestion Reconciliation Engine
=================================

Drives one review pass over a batch of grammar suggestions: the
user accepts or rejects suggestions one at a time (or all at once),
pending suggestions keep correct live positions as earlier ones are
applied, and rejections are recorded in the document's rejection
store so they are not resurfaced by later batches.

State Machine:
    REVIEWING ──(pending becomes empty)──→ RESOLVED
    REVIEWING ──(accept_all)─────────────→ RESOLVED
    REVIEWING ──(close)──────────────────→ CLOSED
    RESOLVED and CLOSED are terminal: every command is a no-op.

Invariants:
    1. `original_text` never changes during a session
    2. While suggestions are pending, `active_id` references one of them
       (the first in live order unless the user selected another)
    3. Fingerprints and rejection payloads are computed from the
       original (pre-remap) suggestion records, never from live copies
    4. The finish callback fires on auto-resolution only when the live
       text differs from the original text

Failure Semantics:
    All commands are total. Invalid commands (nothing active, unknown
    id, finished session) are logged at DEBUG and ignored. A rejection
    store that fails to persist is logged; the session carries on.

This module contains no I/O of its own: persistence is delegated to
the injected RejectionStore and to the host's callbacks.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional, Union

from redline.config import AcceptAllStrategy, IngestConfig, RedlineConfig, get_config
from redline.review.fingerprint import build_rejection_payload, fingerprint
from redline.review.ingest import DroppedSuggestion, ingest_with_config
from redline.review.preview import build_preview
from redline.review.remap import EditLedger, remap_range
from redline.schemas.outcome import ReviewOutcome, ReviewState
from redline.schemas.preview import PreviewSegment
from redline.schemas.rejection import RejectionPayload
from redline.schemas.suggestion import AcceptedEdit, LiveSuggestion, Suggestion
from redline.store.rejections import (
    InMemoryRejectionStore,
    RejectionStore,
    RejectionStoreError,
)
from redline.utils import generate_run_id

logger = logging.getLogger("redline.review.engine")

FinishCallback = Callable[[str], None]
RejectCallback = Callable[[RejectionPayload], None]
ListEmptyCallback = Callable[[], None]

SuggestionRef = Union[Suggestion, LiveSuggestion, str]


class ReviewSession:
    """
    One review pass over a suggestion batch.

    Usage:
        session = ReviewSession(
            original_text="Teh cat sat",
            suggestions=[{"start": 0, "end": 3, "original": "Teh", "replacement": "The"}],
            rejection_store=store,
            on_finish=save_text,
        )
        session.accept_active()
        session.live_text        # "The cat sat"
        session.state            # ReviewState.RESOLVED

    Args:
        original_text: Text the batch was generated against.
        suggestions: Raw batch (dicts with wire aliases, or Suggestions).
        rejection_store: Per-document store; in-memory if omitted.
        on_finish: Called with the committed text when the session ends.
        on_reject: Called with each rejection payload.
        on_list_empty: Called when the pending list becomes empty.
        accept_all_strategy: How accept_all combines with earlier accepts.
        default_rejection_type: Payload `type` for untyped suggestions.
        ingest_config: Batch ingestion options.
        session_id: Identifier used in logs and the outcome.
        config_hash: Stamped on the outcome.
    """

    def __init__(
        self,
        original_text: str,
        suggestions: Optional[Iterable[Any]],
        rejection_store: Optional[RejectionStore] = None,
        on_finish: Optional[FinishCallback] = None,
        on_reject: Optional[RejectCallback] = None,
        on_list_empty: Optional[ListEmptyCallback] = None,
        accept_all_strategy: AcceptAllStrategy = AcceptAllStrategy.COMPOSE,
        default_rejection_type: str = "grammar",
        ingest_config: Optional[IngestConfig] = None,
        session_id: Optional[str] = None,
        config_hash: str = "",
    ):
        self.session_id = session_id or generate_run_id()
        self.accept_all_strategy = AcceptAllStrategy(accept_all_strategy)
        self.default_rejection_type = default_rejection_type
        self.config_hash = config_hash

        self._original_text = original_text
        self._live_text = original_text
        self._store = rejection_store if rejection_store is not None else InMemoryRejectionStore()
        self._on_finish = on_finish
        self._on_reject = on_reject
        self._on_list_empty = on_list_empty

        ingested = ingest_with_config(original_text, suggestions, ingest_config or IngestConfig())
        self._dropped: list[DroppedSuggestion] = ingested.dropped
        self._pending: list[Suggestion] = [
            s for s in ingested.suggestions if not self._store.has(fingerprint(s))
        ]
        suppressed = len(ingested.suggestions) - len(self._pending)

        self._ledger = EditLedger()
        self._accepted: list[str] = []
        self._rejected: list[RejectionPayload] = []
        self._active_id: Optional[str] = None
        self._state = ReviewState.REVIEWING if self._pending else ReviewState.RESOLVED
        self._ensure_active()

        logger.info(
            f"Session {self.session_id}: {len(self._pending)} pending, "
            f"{suppressed} previously rejected, {len(self._dropped)} dropped"
        )

    @classmethod
    def from_config(
        cls,
        original_text: str,
        suggestions: Optional[Iterable[Any]],
        config: Optional[RedlineConfig] = None,
        **kwargs: Any,
    ) -> "ReviewSession":
        """Create a session with defaults taken from Redline config."""
        config = config or get_config()
        kwargs.setdefault("accept_all_strategy", config.review.accept_all_strategy)
        kwargs.setdefault("default_rejection_type", config.review.default_rejection_type)
        kwargs.setdefault("ingest_config", config.ingest)
        kwargs.setdefault("config_hash", config.config_hash())
        return cls(original_text, suggestions, **kwargs)

    # ── Read-only views ────────────────────────────────────────────

    @property
    def original_text(self) -> str:
        return self._original_text

    @property
    def live_text(self) -> str:
        return self._live_text

    @property
    def state(self) -> ReviewState:
        return self._state

    @property
    def is_finished(self) -> bool:
        return self._state != ReviewState.REVIEWING

    @property
    def active_id(self) -> Optional[str]:
        return self._active_id

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def dropped(self) -> list[DroppedSuggestion]:
        return list(self._dropped)

    @property
    def ledger(self) -> tuple[AcceptedEdit, ...]:
        return self._ledger.snapshot()

    @property
    def rejection_store(self) -> RejectionStore:
        return self._store

    @property
    def suggestions(self) -> list[LiveSuggestion]:
        """Pending suggestions in ascending live-position order."""
        return [self._to_live(s) for s in self._pending]

    @property
    def active_suggestion(self) -> Optional[LiveSuggestion]:
        base = self._find_pending(self._active_id)
        return self._to_live(base) if base is not None else None

    def preview(self) -> list[PreviewSegment]:
        """Live text split into plain and highlighted segments."""
        return build_preview(self._live_text, self.suggestions, self._active_id)

    def outcome(self) -> ReviewOutcome:
        """Sealed audit record of the session so far."""
        return ReviewOutcome(
            session_id=self.session_id,
            state=self._state,
            original_text=self._original_text,
            final_text=self._live_text,
            changed=self._live_text != self._original_text,
            accepted=list(self._accepted),
            rejected=[p.to_wire() for p in self._rejected],
            remaining=len(self._pending),
            dropped=len(self._dropped),
            config_hash=self.config_hash,
        ).seal()

    # ── Commands ───────────────────────────────────────────────────

    def set_active(self, suggestion_id: str) -> bool:
        """Focus a pending suggestion. Returns False (no-op) if not pending."""
        if self.is_finished or self._find_pending(suggestion_id) is None:
            logger.debug(f"set_active ignored: {suggestion_id!r} is not pending")
            return False
        self._active_id = suggestion_id
        return True

    def navigate(self, direction: int) -> Optional[str]:
        """
        Move focus to the next (+1) or previous (-1) pending suggestion,
        wrapping around. No-op with fewer than two pending suggestions.

        Returns:
            The new active id, or None if nothing moved.
        """
        if self.is_finished or direction not in (1, -1) or len(self._pending) < 2:
            logger.debug(f"navigate({direction}) ignored")
            return None
        ids = [s.id for s in self._pending]
        index = ids.index(self._active_id) if self._active_id in ids else -1
        self._active_id = ids[(index + direction) % len(ids)]
        return self._active_id

    def accept_active(self) -> Optional[LiveSuggestion]:
        """
        Apply the active suggestion to the live text.

        Returns:
            The accepted suggestion (live coordinates before the edit),
            or None if there was nothing to accept.
        """
        active = None if self.is_finished else self.active_suggestion
        if active is None:
            logger.debug("accept ignored: no active suggestion")
            return None

        text = self._live_text
        self._live_text = text[:active.start] + active.replacement_phrase + text[active.end:]
        self._ledger.append(AcceptedEdit.for_suggestion(active.source))
        self._accepted.append(fingerprint(active.source))
        self._pending = [s for s in self._pending if s.id != active.id]

        logger.debug(f"Accepted {active.id} at {active.start}-{active.end}")
        self._after_resolution()
        return active

    def reject_active(self) -> Optional[RejectionPayload]:
        """Reject the active suggestion. See `reject`."""
        return self.reject(self._active_id)

    def reject(self, target: Optional[SuggestionRef]) -> Optional[RejectionPayload]:
        """
        Reject a pending suggestion and remember its fingerprint.

        The fingerprint and payload come from the ORIGINAL record with
        the same id, so live copies can be passed safely. Every pending
        suggestion with the same fingerprint is removed. The live text
        is not touched.

        Args:
            target: Suggestion, LiveSuggestion or suggestion id.

        Returns:
            The rejection payload, or None if `target` is not pending.
        """
        target_id = target if isinstance(target, str) or target is None else target.id
        base = None if self.is_finished else self._find_pending(target_id)
        if base is None:
            logger.debug(f"reject ignored: {target_id!r} is not pending")
            return None

        key = fingerprint(base)
        payload = build_rejection_payload(base, self.default_rejection_type)
        try:
            self._store.put(key, payload)
        except RejectionStoreError as e:
            logger.warning(f"Rejection of {base.id} not persisted: {e}")

        self._rejected.append(payload)
        self._pending = [s for s in self._pending if fingerprint(s) != key]
        logger.debug(f"Rejected {base.id} ({payload.range_key})")

        # Session state stays consistent if the host callback raises
        try:
            if self._on_reject is not None:
                self._on_reject(payload)
        finally:
            self._after_resolution()
        return payload

    def accept_all(self) -> Optional[str]:
        """
        Apply every pending suggestion and end the session.

        Suggestions are applied in ascending start order with a running
        shift. Under COMPOSE they land on the live text at their live
        positions (earlier individual accepts are kept); under
        FROM_ORIGINAL they land on the original text and earlier
        accepts are discarded.

        Returns:
            The final text, or None if the session is already finished.
        """
        if self.is_finished:
            logger.debug("accept_all ignored: session finished")
            return None

        pending = sorted(self._pending, key=lambda s: (s.start, s.end))
        if self.accept_all_strategy == AcceptAllStrategy.FROM_ORIGINAL:
            if self._accepted:
                logger.warning(
                    f"accept_all from original discards {len(self._accepted)} "
                    f"individually accepted suggestion(s)"
                )
            text = self._original_text
            targets = [(s, s.start, s.end) for s in pending]
            self._ledger = EditLedger()
            self._accepted = []
        else:
            text = self._live_text
            targets = [(s, *remap_range(s.start, s.end, self._ledger)) for s in pending]

        shift = 0
        for suggestion, start, end in targets:
            a_start, a_end = start + shift, end + shift
            text = text[:a_start] + suggestion.replacement_phrase + text[a_end:]
            shift += suggestion.delta
            self._ledger.append(AcceptedEdit.for_suggestion(suggestion))
            self._accepted.append(fingerprint(suggestion))

        self._live_text = text
        self._pending = []
        self._active_id = None
        self._state = ReviewState.RESOLVED
        logger.info(f"Session {self.session_id}: accepted all ({len(targets)} applied)")

        if self._on_list_empty is not None:
            self._on_list_empty()
        if self._on_finish is not None:
            self._on_finish(text)
        return text

    def close(self) -> Optional[str]:
        """
        End the review early, flushing the live text to the finish
        callback even if suggestions remain pending.

        Returns:
            The live text, or None if the session was already finished.
        """
        if self.is_finished:
            logger.debug("close ignored: session finished")
            return None
        self._state = ReviewState.CLOSED
        self._active_id = None
        logger.info(
            f"Session {self.session_id}: closed with {len(self._pending)} pending"
        )
        if self._on_finish is not None:
            self._on_finish(self._live_text)
        return self._live_text

    # ── Internals ──────────────────────────────────────────────────

    def _find_pending(self, suggestion_id: Optional[str]) -> Optional[Suggestion]:
        if suggestion_id is None:
            return None
        for suggestion in self._pending:
            if suggestion.id == suggestion_id:
                return suggestion
        return None

    def _to_live(self, suggestion: Suggestion) -> LiveSuggestion:
        start, end = remap_range(suggestion.start, suggestion.end, self._ledger)
        return LiveSuggestion(id=suggestion.id, start=start, end=end, source=suggestion)

    def _ensure_active(self) -> None:
        """Select the first pending suggestion if the active one is gone."""
        if not self._pending:
            self._active_id = None
        elif self._find_pending(self._active_id) is None:
            self._active_id = self._pending[0].id

    def _after_resolution(self) -> None:
        """Re-establish the active selection or resolve the session."""
        if self._pending:
            self._ensure_active()
            return

        self._active_id = None
        self._state = ReviewState.RESOLVED
        changed = self._live_text != self._original_text
        logger.info(
            f"Session {self.session_id}: resolved "
            f"({len(self._accepted)} accepted, {len(self._rejected)} rejected)"
        )
        if self._on_list_empty is not None:
            self._on_list_empty()
        if changed and self._on_finish is not None:
            self._on_finish(self._live_text)
