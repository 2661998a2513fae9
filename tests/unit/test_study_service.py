"""
Unit tests for StudyService orchestration.

Uses an in-memory record store so persistence behaviour (what gets
recorded, when, and what happens when the store is down) is observable.
"""

from datetime import timedelta

import pytest

from flashdeck.config import Settings
from flashdeck.core.errors import (
    InvalidSnapshot,
    InvalidTransition,
    ModeUnavailable,
    SessionNotFound,
    SetNotFound,
)
from flashdeck.study.queue_builder import BiasStrategy
from flashdeck.study.quiz_engine import SessionPhase
from flashdeck.study.retention_engine import RetentionStatus
from flashdeck.study.study_service import StudyService


@pytest.fixture
def settings():
    return Settings(_env_file=None, default_user_id="u1", default_strategy="uniform")


@pytest.fixture
def make_service(make_store, settings, rng, clock, now):
    def _make(cards, sessions=(), fail_writes=False):
        store = make_store(cards=cards, sessions=sessions, fail_writes=fail_writes)
        service = StudyService(store, settings=settings, rng=rng, clock=clock, now=lambda: now)
        return service, store

    return _make


def finish_all_correct(service, active):
    quiz = active.quiz
    while not quiz.is_finished:
        view = quiz.view()
        quiz.submit_answer(True if active.policy.matcher == "self_report" else view.expected)
        quiz.advance()
    return service.finish(active)


class TestSnapshot:
    def test_snapshot_validates_raw_records(self, make_service):
        service, _ = make_service(
            [{"id": 2, "front": "b", "back": "B", "position": 1}, {"id": 1, "front": "a", "back": "A"}]
        )
        snap = service.snapshot("set1")

        assert [c.id for c in snap.cards] == ["1", "2"]
        assert snap.user_id == "u1"

    def test_malformed_records(self, make_service):
        service, _ = make_service([{"id": 1, "front": "no back"}])
        with pytest.raises(InvalidSnapshot):
            service.snapshot("set1")

    def test_unknown_set(self, make_service, sample_cards):
        service, _ = make_service(sample_cards)
        with pytest.raises(SetNotFound):
            service.snapshot("missing")

    def test_statistics(self, make_service, sample_cards, session_factory, now):
        history = [session_factory([("c1", True)] * 3, now - timedelta(days=1))]
        service, _ = make_service(sample_cards, history)

        stats = service.statistics("set1")
        assert stats.mastered == 1
        assert stats.study_sessions == 1
        assert stats.retention.days_since_study == 1

        mastery = service.mastery("set1")
        assert mastery["c1"].correct_count == 3


class TestStart:
    def test_start_opens_session_record(self, make_service, sample_cards):
        service, store = make_service(sample_cards)
        active = service.start("set1", mode="write")

        assert store.created == [("set1", "u1", "write")]
        assert active.session_id == "session-1"
        assert active.strategy is BiasStrategy.UNIFORM
        assert active.quiz.phase is SessionPhase.PRESENTING
        assert len(active.quiz.queue) == 5

    def test_weighted_strategy(self, make_service, sample_cards):
        service, _ = make_service(sample_cards)
        active = service.start("set1", mode="write", strategy="personalized")

        assert active.strategy is BiasStrategy.WEIGHTED
        assert len(active.quiz.queue) == 10

    def test_flashcards_open_no_record(self, make_service, sample_cards):
        service, store = make_service(sample_cards)
        active = service.start("set1", mode="flashcards")

        assert active.session_id is None
        assert store.created == []

    def test_choice_mode_needs_four_cards(self, make_service, sample_cards):
        service, _ = make_service(sample_cards[:3])
        with pytest.raises(ModeUnavailable):
            service.start("set1", mode="learn")

    def test_empty_set(self, make_service):
        service, _ = make_service([])
        with pytest.raises(ModeUnavailable):
            service.start("set1", mode="write")

    def test_test_mode_label(self, make_service, sample_cards):
        service, store = make_service(sample_cards)
        service.start("set1", mode="test", test_format="multiple")
        assert store.created[0][2] == "test:multiple"

    def test_weighted_session_flags_focus_cards(
        self, make_service, sample_cards, session_factory
    ):
        history = [session_factory([("c1", True)] * 3 + [("c2", False)])]
        service, _ = make_service(sample_cards, history)

        active = service.start("set1", mode="write", strategy="weighted")
        assert (active.hints.needs_practice, active.hints.new) == (4, 3)
        assert active.is_focus_card("c2")
        assert not active.is_focus_card("c1")

        uniform = service.start("set1", mode="write", strategy="uniform")
        assert not uniform.is_focus_card("c2")


class TestChoices:
    def test_choices_include_expected(self, make_service, sample_cards):
        service, _ = make_service(sample_cards)
        active = service.start("set1", mode="learn")

        options = service.choices_for(active)
        assert active.quiz.view().expected in options
        assert len(options) == 4

    def test_choices_in_typed_mode(self, make_service, sample_cards):
        service, _ = make_service(sample_cards)
        active = service.start("set1", mode="write")
        with pytest.raises(InvalidTransition):
            service.choices_for(active)


class TestFinish:
    def test_completed_session_is_recorded_once(self, make_service, sample_cards):
        service, store = make_service(sample_cards)
        active = service.start("set1", mode="write")

        report = finish_all_correct(service, active)
        again = service.finish(active)

        assert report.persisted
        assert report.stats.correct == 5
        assert again is report
        assert len(store.recorded) == 1
        session_id, outcomes = store.recorded[0]
        assert session_id == "session-1"
        assert outcomes == report.outcomes

    def test_abandoned_session_is_not_recorded(self, make_service, sample_cards):
        service, store = make_service(sample_cards)
        active = service.start("set1", mode="write")
        active.quiz.submit_answer("Paris")
        active.quiz.advance()
        active.quiz.abandon()

        report = service.finish(active)
        assert not report.persisted
        assert report.outcomes == ()
        assert report.phase is SessionPhase.ABANDONED
        assert store.recorded == []

    def test_flashcards_are_never_recorded(self, make_service, sample_cards):
        service, store = make_service(sample_cards)
        active = service.start("set1", mode="flashcards")

        report = finish_all_correct(service, active)
        assert report.stats.correct == 5
        assert not report.persisted
        assert store.recorded == []

    def test_store_failure_keeps_local_summary(self, make_service, sample_cards):
        service, store = make_service(sample_cards, fail_writes=True)
        active = service.start("set1", mode="test")

        report = finish_all_correct(service, active)
        assert not report.persisted
        assert report.stats.percentage == 100
        assert len(report.outcomes) == 5

    def test_finish_while_running(self, make_service, sample_cards):
        service, _ = make_service(sample_cards)
        active = service.start("set1", mode="write")
        with pytest.raises(InvalidTransition, match="finish"):
            service.finish(active)

    def test_recorded_history_feeds_next_statistics(self, make_service, sample_cards, now):
        service, store = make_service(sample_cards)
        for _ in range(3):
            active = service.start("set1", mode="write")
            report = finish_all_correct(service, active)
            store.sessions.append(
                {
                    "id": active.session_id,
                    "startedAt": now,
                    "completedAt": now,
                    "results": [o.model_dump() for o in report.outcomes],
                }
            )

        stats = service.statistics("set1")
        assert stats.mastered == 5
        assert stats.avg_accuracy == 100
        # 1 + 2.5 + 2 + 0.9 = 6.4 -> 6
        assert stats.retention.total_retention_days == 6
        assert stats.retention.status is RetentionStatus.STRONG

    def test_missing_session_record_keeps_local_summary(
        self, make_service, sample_cards, monkeypatch
    ):
        service, store = make_service(sample_cards)
        active = service.start("set1", mode="write")

        def gone(session_id, outcomes):
            raise SessionNotFound(f"Study session not found: {session_id}")

        monkeypatch.setattr(store, "record_session_outcomes", gone)
        report = finish_all_correct(service, active)

        assert not report.persisted
        assert report.stats.correct == 5

    def test_improved_cards(self, make_service, sample_cards):
        service, _ = make_service(sample_cards)
        active = service.start("set1", mode="write")
        quiz = active.quiz
        seen = set()
        # c3 is missed once, then answered correctly on its retry
        while not quiz.is_finished:
            view = quiz.view()
            miss = view.card.id == "c3" and view.card.id not in seen
            quiz.submit_answer("no idea" if miss else view.expected)
            seen.add(view.card.id)
            quiz.advance()

        report = service.finish(active)
        assert report.phase is SessionPhase.COMPLETE
        assert report.improved == 5

    def test_abandoned_session_improves_nothing(self, make_service, sample_cards):
        service, _ = make_service(sample_cards)
        active = service.start("set1", mode="write")
        active.quiz.submit_answer(active.quiz.view().expected)
        active.quiz.advance()
        active.quiz.abandon()

        assert service.finish(active).improved == 0
