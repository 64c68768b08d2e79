"""
Review Engine Tests
====================

Tests for the ReviewSession state machine.

Coverage:
    - Accepting remaps the remaining suggestions
    - Rejections are remembered and suppressed in later sessions
    - Accept-all (compose and from-original strategies)
    - Auto-selection, navigation wraparound
    - Auto-finish only when the text changed
    - Every invalid command is a no-op
"""

from __future__ import annotations

import pytest

from redline.config import AcceptAllStrategy, IngestConfig, RedlineConfig, ReviewConfig
from redline.review.engine import ReviewSession
from redline.review.fingerprint import fingerprint
from redline.schemas.outcome import ReviewState
from redline.store.rejections import InMemoryRejectionStore, RejectionStoreError
from tests.conftest import make_session, make_suggestion


@pytest.fixture
def three_text() -> str:
    return "a b c"


@pytest.fixture
def three_suggestions():
    return [
        make_suggestion(0, 1, "a", "X", suggestion_id="x"),
        make_suggestion(2, 3, "b", "YY", suggestion_id="y"),
        make_suggestion(4, 5, "c", "Z", suggestion_id="z"),
    ]


class TestSessionStart:

    def test_initial_state(self, abc_text, abc_suggestions):
        session = make_session(abc_text, abc_suggestions)
        assert session.state == ReviewState.REVIEWING
        assert session.live_text == abc_text
        assert session.pending_count == 2
        assert session.ledger == ()

    def test_first_suggestion_auto_selected(self, abc_text, abc_suggestions):
        session = make_session(abc_text, list(reversed(abc_suggestions)))
        assert session.active_id == "a"

    def test_empty_batch_resolved_without_callbacks(self, abc_text):
        session = make_session(abc_text, [])
        assert session.state == ReviewState.RESOLVED
        assert session.active_suggestion is None
        assert session.calls["finish"] == []
        assert session.calls["empty"] == []

    def test_dropped_items_reported(self, abc_text):
        session = make_session(abc_text, [{"start": 0, "end": 99, "original": "x", "replacement": "y"}])
        assert len(session.dropped) == 1
        assert session.is_finished


class TestAccept:

    def test_accept_remaps_following(self, abc_text, abc_suggestions):
        session = make_session(abc_text, abc_suggestions)
        accepted = session.accept_active()
        assert accepted.id == "a"
        assert session.live_text == "A def ghi"

        remaining = session.suggestions
        assert len(remaining) == 1
        assert (remaining[0].start, remaining[0].end) == (2, 5)
        assert (remaining[0].original_start, remaining[0].original_end) == (4, 7)
        assert session.live_text[remaining[0].start:remaining[0].end] == "def"

    def test_accept_second_at_remapped_position(self, abc_text, abc_suggestions):
        session = make_session(abc_text, abc_suggestions)
        session.accept_active()
        session.accept_active()
        assert session.live_text == "A BB ghi"

    def test_ledger_keyed_by_original_coordinates(self, abc_text, abc_suggestions):
        session = make_session(abc_text, abc_suggestions)
        session.accept_active()
        session.accept_active()
        assert [(e.start, e.end, e.delta, e.new_text) for e in session.ledger] == [
            (0, 3, -2, "A"),
            (4, 7, -1, "BB"),
        ]

    def test_accept_out_of_order(self, abc_text, abc_suggestions):
        session = make_session(abc_text, abc_suggestions)
        session.set_active("b")
        session.accept_active()
        assert session.live_text == "abc BB ghi"
        assert session.active_id == "a"
        session.accept_active()
        assert session.live_text == "A BB ghi"

    def test_adjacent_suggestions(self):
        session = make_session("abcdef", [
            make_suggestion(0, 3, "abc", "Hello", suggestion_id="first"),
            make_suggestion(3, 6, "def", "!", suggestion_id="second"),
        ])
        session.accept_active()
        live = session.active_suggestion
        assert session.live_text[live.start:live.end] == "def"
        session.accept_active()
        assert session.live_text == "Hello!"

    def test_backend_id_matching_synthesized_id(self, abc_text):
        session = make_session(abc_text, [
            {"id": "sugg-1-4", "start": 0, "end": 3, "original": "abc", "replacement": "A"},
            {"start": 4, "end": 7, "original": "def", "replacement": "BB"},
        ])
        session.accept_active()
        assert session.pending_count == 1
        assert session.state == ReviewState.REVIEWING
        session.accept_active()
        assert session.live_text == "A BB ghi"

    def test_accept_with_nothing_active_is_noop(self, abc_text):
        session = make_session(abc_text, [])
        assert session.accept_active() is None
        assert session.live_text == abc_text


class TestReject:

    def test_reject_removes_without_editing(self, teh_text, teh_suggestion):
        session = make_session(teh_text, [teh_suggestion])
        payload = session.reject_active()
        assert payload.range_key == "0-3"
        assert session.live_text == teh_text
        assert session.pending_count == 0

    def test_reject_records_in_store(self, teh_text, teh_suggestion, store):
        session = make_session(teh_text, [teh_suggestion], store=store)
        session.reject_active()
        assert store.has(fingerprint(teh_suggestion))

    def test_reject_callback_receives_payload(self, teh_text, teh_suggestion):
        session = make_session(teh_text, [teh_suggestion])
        session.reject_active()
        assert len(session.calls["reject"]) == 1
        wire = session.calls["reject"][0].to_wire()
        assert wire == {
            "id": "s1", "start": 0, "end": 3, "rangeKey": "0-3",
            "original": "Teh", "replacement": "The",
            "rule": "Spelling", "message": "", "type": "grammar",
        }

    def test_rejected_suppressed_in_next_session(self, teh_text, teh_suggestion, store):
        make_session(teh_text, [teh_suggestion], store=store).reject_active()

        again = make_suggestion(0, 3, "Teh", "The", suggestion_id="other-id")
        session = make_session(teh_text, [again], store=store)
        assert session.suggestions == []
        assert session.state == ReviewState.RESOLVED

    def test_range_key_uses_original_coordinates(self, abc_text, abc_suggestions):
        session = make_session(abc_text, abc_suggestions)
        session.accept_active()
        live_b = session.active_suggestion
        assert (live_b.start, live_b.end) == (2, 5)
        payload = session.reject(live_b)
        assert payload.range_key == "4-7"
        assert (payload.start, payload.end) == (4, 7)

    def test_reject_by_id(self, abc_text, abc_suggestions):
        session = make_session(abc_text, abc_suggestions)
        assert session.reject("b").id == "b"
        assert [s.id for s in session.suggestions] == ["a"]

    def test_reject_unknown_is_noop(self, abc_text, abc_suggestions):
        session = make_session(abc_text, abc_suggestions)
        assert session.reject("missing") is None
        assert session.reject(None) is None
        assert session.pending_count == 2
        assert session.calls["reject"] == []

    def test_reject_twice_is_noop(self, abc_text, abc_suggestions):
        session = make_session(abc_text, abc_suggestions)
        session.reject("a")
        assert session.reject("a") is None
        assert len(session.calls["reject"]) == 1

    def test_reject_removes_duplicate_fingerprints(self):
        session = make_session("Teh cat", [
            make_suggestion(0, 3, "Teh", "The", suggestion_id="one"),
            make_suggestion(0, 3, "Teh", "The", suggestion_id="two"),
        ], ingest_config=IngestConfig(drop_overlapping=False))
        assert session.pending_count == 2
        session.reject("one")
        assert session.pending_count == 0

    def test_store_failure_does_not_break_session(self, abc_text, abc_suggestions):
        class FailingStore(InMemoryRejectionStore):
            def put(self, fingerprint, payload):
                raise RejectionStoreError("disk full")

        session = make_session(abc_text, abc_suggestions, store=FailingStore())
        payload = session.reject_active()
        assert payload is not None
        assert session.pending_count == 1
        assert len(session.calls["reject"]) == 1

    def test_failing_reject_callback_still_removes(self, abc_text, abc_suggestions):
        def explode(payload):
            raise RuntimeError("host failed")

        session = ReviewSession(abc_text, abc_suggestions, on_reject=explode)
        with pytest.raises(RuntimeError):
            session.reject_active()
        assert session.pending_count == 1
        assert session.active_id == "b"
        assert session.accept_active() is not None


class TestAcceptAll:

    def test_accept_all(self, three_text, three_suggestions):
        session = make_session(three_text, three_suggestions)
        assert session.accept_all() == "X YY Z"
        assert session.state == ReviewState.RESOLVED
        assert session.calls["finish"] == ["X YY Z"]
        assert session.calls["empty"] == [True]

    def test_accept_all_after_navigation(self, three_text, three_suggestions):
        session = make_session(three_text, three_suggestions)
        session.navigate(1)
        session.navigate(-1)
        session.set_active("z")
        assert session.accept_all() == "X YY Z"

    def test_accept_all_skips_rejected(self, three_text, three_suggestions):
        session = make_session(three_text, three_suggestions)
        session.reject("y")
        assert session.accept_all() == "X b Z"

    def test_accept_all_composes_with_earlier_accepts(self, three_text, three_suggestions):
        session = make_session(three_text, three_suggestions)
        session.set_active("y")
        session.accept_active()
        assert session.live_text == "a YY c"
        assert session.accept_all() == "X YY Z"
        assert len(session.ledger) == 3

    def test_accept_all_from_original_discards_earlier_accepts(self, three_text, three_suggestions):
        session = make_session(
            three_text, three_suggestions,
            accept_all_strategy=AcceptAllStrategy.FROM_ORIGINAL,
        )
        session.set_active("y")
        session.accept_active()
        assert session.accept_all() == "X b Z"
        assert session.outcome().num_accepted == 2

    def test_accept_all_when_finished_is_noop(self, three_text, three_suggestions):
        session = make_session(three_text, three_suggestions)
        session.accept_all()
        assert session.accept_all() is None
        assert len(session.calls["finish"]) == 1

    def test_accept_all_unchanged_text_still_finishes(self):
        session = make_session("abc", [make_suggestion(0, 3, "abc", "abc", suggestion_id="same")])
        assert session.accept_all() == "abc"
        assert session.calls["finish"] == ["abc"]


class TestNavigation:

    def test_wraparound(self, three_text, three_suggestions):
        session = make_session(three_text, three_suggestions)
        assert session.active_id == "x"
        assert session.navigate(1) == "y"
        assert session.navigate(1) == "z"
        assert session.navigate(1) == "x"

    def test_backwards_wraps(self, three_text, three_suggestions):
        session = make_session(three_text, three_suggestions)
        assert session.navigate(-1) == "z"

    def test_single_suggestion_noop(self, teh_text, teh_suggestion):
        session = make_session(teh_text, [teh_suggestion])
        assert session.navigate(1) is None
        assert session.active_id == "s1"

    def test_invalid_direction_noop(self, three_text, three_suggestions):
        session = make_session(three_text, three_suggestions)
        assert session.navigate(2) is None
        assert session.navigate(0) is None
        assert session.active_id == "x"

    def test_set_active(self, three_text, three_suggestions):
        session = make_session(three_text, three_suggestions)
        assert session.set_active("z")
        assert session.active_suggestion.id == "z"
        assert not session.set_active("missing")
        assert session.active_id == "z"

    def test_active_moves_to_first_after_resolution(self, three_text, three_suggestions):
        session = make_session(three_text, three_suggestions)
        session.set_active("y")
        session.reject_active()
        assert session.active_id == "x"

    def test_order_follows_live_positions(self, three_text, three_suggestions):
        session = make_session(three_text, three_suggestions)
        session.set_active("y")
        session.accept_active()
        starts = [s.start for s in session.suggestions]
        assert starts == sorted(starts)


class TestFinish:

    def test_auto_finish_after_last_accept(self, teh_text, teh_suggestion):
        session = make_session(teh_text, [teh_suggestion])
        session.accept_active()
        assert session.state == ReviewState.RESOLVED
        assert session.calls["finish"] == ["The cat sat"]
        assert session.calls["empty"] == [True]

    def test_no_finish_when_all_rejected(self, abc_text, abc_suggestions):
        session = make_session(abc_text, abc_suggestions)
        session.reject_active()
        session.reject_active()
        assert session.state == ReviewState.RESOLVED
        assert session.calls["finish"] == []
        assert session.calls["empty"] == [True]

    def test_close_flushes_with_pending(self, abc_text, abc_suggestions):
        session = make_session(abc_text, abc_suggestions)
        session.accept_active()
        assert session.close() == "A def ghi"
        assert session.state == ReviewState.CLOSED
        assert session.calls["finish"] == ["A def ghi"]
        assert session.pending_count == 1

    def test_close_unchanged_still_flushes(self, abc_text, abc_suggestions):
        session = make_session(abc_text, abc_suggestions)
        assert session.close() == abc_text
        assert session.calls["finish"] == [abc_text]

    def test_commands_after_close_are_noops(self, abc_text, abc_suggestions):
        session = make_session(abc_text, abc_suggestions)
        session.close()
        assert session.accept_active() is None
        assert session.reject("a") is None
        assert session.navigate(1) is None
        assert not session.set_active("b")
        assert session.accept_all() is None
        assert session.close() is None
        assert session.live_text == abc_text
        assert len(session.calls["finish"]) == 1


class TestViews:

    def test_preview(self, abc_text, abc_suggestions):
        session = make_session(abc_text, abc_suggestions)
        session.accept_active()
        segments = session.preview()
        assert "".join(seg.text for seg in segments) == "A def ghi"
        highlighted = [seg for seg in segments if seg.is_highlight]
        assert [(seg.text, seg.active) for seg in highlighted] == [("def", True)]

    def test_outcome(self, abc_text, abc_suggestions):
        session = make_session(abc_text, abc_suggestions, session_id="sess-1")
        session.accept_active()
        session.reject_active()
        outcome = session.outcome()
        assert outcome.session_id == "sess-1"
        assert outcome.state == ReviewState.RESOLVED
        assert outcome.final_text == "A def ghi"
        assert outcome.changed
        assert outcome.accepted == ["0:3:abc→A"]
        assert outcome.rejected[0]["rangeKey"] == "4-7"
        assert outcome.verify_integrity()


class TestFromConfig:

    def test_strategy_from_config(self, three_text, three_suggestions):
        config = RedlineConfig(
            review=ReviewConfig(
                accept_all_strategy=AcceptAllStrategy.FROM_ORIGINAL,
                default_rejection_type="style",
            )
        )
        session = ReviewSession.from_config(three_text, three_suggestions, config)
        assert session.accept_all_strategy == AcceptAllStrategy.FROM_ORIGINAL
        assert session.default_rejection_type == "style"
        assert session.config_hash == config.config_hash()

    def test_ingest_options_from_config(self, abc_text):
        config = RedlineConfig(ingest=IngestConfig(require_phrase_match=True))
        session = ReviewSession.from_config(
            abc_text, [make_suggestion(0, 3, "xyz", "A")], config,
        )
        assert session.pending_count == 0
        assert len(session.dropped) == 1

    def test_rejection_type_in_payload(self, teh_text, teh_suggestion):
        config = RedlineConfig(review=ReviewConfig(default_rejection_type="style"))
        session = ReviewSession.from_config(teh_text, [teh_suggestion], config)
        assert session.reject_active().type == "style"
