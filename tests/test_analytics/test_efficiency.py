"""
Tests for program_insights/analytics/efficiency.py.

What we test
------------
average_processing_days():
  - Only Approved beneficiaries with both timestamps count.
  - Turnarounds rounded to whole days, mean rounded half-up.
  - No qualifying beneficiary -> 0 days -> top speed tier (50).

speed_points() / progress_efficiency_points():
  - Tier boundaries.
  - time_progress of 0 is treated as 1 (no division error).

compute_efficiency_score():
  - Sum of both sub-scores, always within [0, 100].
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from program_insights.analytics.efficiency import (
    average_processing_days,
    compute_efficiency_score,
    progress_efficiency_points,
    speed_points,
)

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _approved(make_beneficiary, id_: int, days: float, **kw):
    return make_beneficiary(
        id=id_, status="Approved", created_at=T0, updated_at=T0 + timedelta(days=days), **kw
    )


class TestAverageProcessingDays:
    def test_no_approved_is_zero(self, make_beneficiaries) -> None:
        assert average_processing_days(make_beneficiaries(5, status="Pending")) == 0

    def test_no_approved_gets_top_speed_tier(self, make_beneficiaries) -> None:
        days = average_processing_days(make_beneficiaries(3, status="Rejected"))
        assert speed_points(days) == 50

    def test_missing_timestamps_skipped(self, make_beneficiary) -> None:
        bs = [
            make_beneficiary(id=1, status="Approved", created_at=None),
            make_beneficiary(id=2, status="Approved", updated_at=""),
        ]
        assert average_processing_days(bs) == 0

    def test_mean_of_approved_only(self, make_beneficiary) -> None:
        bs = [
            _approved(make_beneficiary, 1, 2),
            _approved(make_beneficiary, 2, 4),
            make_beneficiary(id=3, status="Pending", created_at=T0,
                             updated_at=T0 + timedelta(days=90)),
        ]
        assert average_processing_days(bs) == 3

    def test_mean_rounds_half_up(self, make_beneficiary) -> None:
        bs = [_approved(make_beneficiary, 1, 1), _approved(make_beneficiary, 2, 2)]
        assert average_processing_days(bs) == 2        # 1.5 -> 2

    def test_each_turnaround_rounded_first(self, make_beneficiary) -> None:
        # 0.4 -> 0 and 0.4 -> 0: mean 0, not round(0.4) of the raw mean
        bs = [_approved(make_beneficiary, 1, 0.4), _approved(make_beneficiary, 2, 0.4)]
        assert average_processing_days(bs) == 0


@pytest.mark.parametrize("days,expected", [
    (0, 50), (1, 50), (2, 40), (3, 40), (4, 30), (7, 30), (8, 20), (14, 20), (15, 10), (90, 10),
])
def test_speed_tiers(days, expected) -> None:
    assert speed_points(days) == expected


@pytest.mark.parametrize("completion,time,expected", [
    (60, 50, 50),     # 1.2
    (50, 50, 40),     # 1.0
    (40, 50, 30),     # 0.8
    (30, 50, 20),     # 0.6
    (29, 50, 10),
    (0, 0, 10),
    (5, 0, 50),       # time 0 -> divisor 1
])
def test_progress_efficiency_tiers(completion, time, expected) -> None:
    assert progress_efficiency_points(completion, time) == expected


class TestEfficiencyScore:
    def test_sum_of_components(self) -> None:
        assert compute_efficiency_score(2, 50, 50) == 80

    def test_bounds(self) -> None:
        for days in (0, 3, 10, 100):
            for time in (0, 30, 100, 200):
                for completion in (0, 40, 100, 300):
                    assert 0 <= compute_efficiency_score(days, time, completion) <= 100

    def test_gathering_example(self) -> None:
        # avg 0 days (top tier) and 50% enrolled vs 31% schedule (ratio 1.61)
        assert compute_efficiency_score(0, 31, 50) == 100
