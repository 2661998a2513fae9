"""Unit tests for the retention heuristic."""

from datetime import timedelta

import pytest

from flashdeck.study.retention_engine import (
    RetentionEstimate,
    RetentionEstimator,
    RetentionStatus,
    round_half_up,
)


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        "value,expected",
        [(5.5, 6), (4.5, 5), (3.3, 3), (2.49, 2), (0.0, 0), (1 + 2.0 + 1.6 + 0.3 * 3, 6)],
    )
    def test_rounding(self, value, expected):
        assert round_half_up(value) == expected


class TestTotalRetentionDays:
    def test_worked_example(self):
        # 1 + 4*0.5 + 0.8*2 + 3*0.3 = 5.5 -> 6
        assert RetentionEstimator().total_retention_days(4, 80, 3) == 6

    def test_base_only(self):
        assert RetentionEstimator().total_retention_days(0, 0, 0) == 1

    def test_session_bonus_is_capped(self):
        estimator = RetentionEstimator()
        assert estimator.total_retention_days(0, 0, 10) == 4
        assert estimator.total_retention_days(0, 0, 50) == 4


class TestDaysSince:
    def test_whole_days_are_floored(self, now):
        assert RetentionEstimator.days_since(now - timedelta(days=1, hours=23), now) == 1

    def test_none_is_zero(self, now):
        assert RetentionEstimator.days_since(None, now) == 0

    def test_future_timestamp_is_zero(self, now):
        assert RetentionEstimator.days_since(now + timedelta(days=3), now) == 0

    def test_naive_timestamps_are_treated_as_utc(self, now):
        naive = (now - timedelta(days=2)).replace(tzinfo=None)
        assert RetentionEstimator.days_since(naive, now) == 2


class TestEstimate:
    def test_worked_example(self, now):
        estimate = RetentionEstimator().estimate(
            mastered_count=4,
            avg_accuracy=80,
            session_count=3,
            last_session_at=now - timedelta(days=2),
            now=now,
        )
        assert estimate == RetentionEstimate(
            total_retention_days=6, remaining_days=4, days_since_study=2
        )
        assert estimate.status is RetentionStatus.GOOD

    def test_remaining_days_floor_at_zero(self, now):
        estimate = RetentionEstimator().estimate(0, 50, 1, now - timedelta(days=30), now)

        assert estimate.remaining_days == 0
        assert estimate.status is RetentionStatus.WEAK

    def test_remaining_never_exceeds_total(self, now):
        estimate = RetentionEstimator().estimate(10, 100, 20, now, now)
        assert 0 <= estimate.remaining_days <= estimate.total_retention_days


class TestRetentionStatus:
    @pytest.mark.parametrize(
        "days,status",
        [
            (9, RetentionStatus.STRONG),
            (5, RetentionStatus.STRONG),
            (4, RetentionStatus.GOOD),
            (2, RetentionStatus.GOOD),
            (1, RetentionStatus.FADING),
            (0, RetentionStatus.WEAK),
        ],
    )
    def test_thresholds(self, days, status):
        assert RetentionStatus.from_remaining_days(days) is status

    def test_every_status_has_a_message(self):
        for status in RetentionStatus:
            assert status.message
