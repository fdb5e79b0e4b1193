"""
Tests for program_insights/analytics/ranking.py.

What we test
------------
RANKING_WEIGHTS:
  - Sum to 1.00.

compute_global_maxima():
  - Largest total and largest mean amount, both floored at 1.

rank_programs():
  - beneficiary_score normalized to the largest program (80 vs 40 -> 100 / 50).
  - Category filter does not change the normalizers.
  - Sorted by overall_score descending; ties keep input order.
  - growth_rate / growth_score from the trailing 30-day window.
  - Badges: trending, top-rated, excellent (uncapped), high-performer.
  - Zero capacity gives completion 0.

filter_by_category() / top_programs():
  - Substring, case-insensitive, falls back to beneficiary type, then "General".
  - Truncation to N.
"""

from __future__ import annotations

from datetime import timedelta

import pytest

from program_insights.analytics.ranking import (
    RANKING_WEIGHTS,
    compute_global_maxima,
    filter_by_category,
    rank_programs,
    top_programs,
)


def test_ranking_weights_sum_to_one() -> None:
    assert sum(RANKING_WEIGHTS.values()) == pytest.approx(1.0)


# ── Helpers ────────────────────────────────────────────────────────────────────

def _members(make_beneficiary, program_id, count, start_id=0, **kw):
    return [
        make_beneficiary(id=start_id + i, program_id=program_id, **kw) for i in range(count)
    ]


@pytest.fixture
def two_programs(make_program, make_beneficiary):
    programs = [
        make_program(id=1, name="Big", assistance_type="Financial"),
        make_program(id=2, name="Small", assistance_type="Educational"),
    ]
    beneficiaries = (
        _members(make_beneficiary, 1, 80, start_id=1000)
        + _members(make_beneficiary, 2, 40, start_id=2000)
    )
    return programs, beneficiaries


# ── Maxima ────────────────────────────────────────────────────────────────────

class TestGlobalMaxima:
    def test_empty_floors_at_one(self) -> None:
        m = compute_global_maxima([], [])
        assert m.max_total == 1
        assert m.max_average_amount == 1.0

    def test_largest_values(self, make_program, make_beneficiary) -> None:
        programs = [make_program(id=1), make_program(id=2)]
        bs = (
            _members(make_beneficiary, 1, 3, start_id=10, amount=100)
            + _members(make_beneficiary, 2, 1, start_id=20, amount=900)
        )
        m = compute_global_maxima(programs, bs)
        assert m.max_total == 3
        assert m.max_average_amount == pytest.approx(900.0)

    def test_orphan_beneficiaries_ignored(self, make_program, make_beneficiary) -> None:
        bs = _members(make_beneficiary, 99, 50, amount=5000)
        m = compute_global_maxima([make_program(id=1)], bs)
        assert m.max_total == 1


# ── rank_programs ─────────────────────────────────────────────────────────────

class TestRankPrograms:
    def test_beneficiary_score_normalized(self, two_programs, now) -> None:
        programs, bs = two_programs
        ranked = rank_programs(programs, bs, now)
        scores = {r.program.name: r.metrics.beneficiary_score for r in ranked}
        assert scores == {"Big": 100.0, "Small": 50.0}
        assert [r.program.name for r in ranked] == ["Big", "Small"]

    def test_filter_keeps_global_scale(self, two_programs, now) -> None:
        programs, bs = two_programs
        ranked = rank_programs(programs, bs, now, category="educ")
        assert [r.program.name for r in ranked] == ["Small"]
        assert ranked[0].metrics.beneficiary_score == 50.0

    def test_ties_keep_input_order(self, make_program, now) -> None:
        programs = [make_program(id=i, name=f"P{i}") for i in (3, 1, 2)]
        ranked = rank_programs(programs, [], now)
        assert [r.program.name for r in ranked] == ["P3", "P1", "P2"]

    def test_empty_program_scores(self, make_program, now) -> None:
        r = rank_programs([make_program()], [], now)[0]
        assert r.count == 0
        assert r.metrics.payment_score == 0
        assert r.metrics.growth_rate == 0
        assert r.metrics.growth_score == 50.0
        assert r.overall_score == pytest.approx(5.0)
        assert r.badges == ()

    def test_zero_capacity_completion_zero(self, make_program, make_beneficiary, now) -> None:
        program = make_program(max_beneficiaries=0)
        r = rank_programs([program], _members(make_beneficiary, 1, 5), now)[0]
        assert r.metrics.completion_score == 0
        assert r.metrics.completion_rate == 0

    def test_high_performer(self, make_program, make_beneficiary, now) -> None:
        program = make_program(max_beneficiaries=100)
        bs = _members(make_beneficiary, 1, 100, is_paid=True, amount=1000)
        r = rank_programs([program], bs, now)[0]
        # 35 + 25 + 15 + 15 + 0.10 * 50
        assert r.overall_score == pytest.approx(95.0)
        assert r.badges == ("top-rated", "excellent", "high-performer")
        assert r.metrics.avg_amount == 1000
        assert r.metrics.total_amount == pytest.approx(100_000.0)

    def test_excellent_uses_uncapped_completion(self, make_program, make_beneficiary, now) -> None:
        program = make_program(max_beneficiaries=10)
        r = rank_programs([program], _members(make_beneficiary, 1, 12), now)[0]
        assert r.metrics.completion_score == 100.0
        assert r.metrics.completion_rate == 120.0
        assert "excellent" in r.badges

    def test_growth_and_trending(self, make_program, make_beneficiary, now) -> None:
        old = now - timedelta(days=60)
        bs = (
            _members(make_beneficiary, 1, 10, start_id=1)
            + _members(make_beneficiary, 1, 5, start_id=100, created_at=old)
        )
        r = rank_programs([make_program()], bs, now)[0]
        assert r.metrics.growth_rate == pytest.approx(100.0)
        assert r.metrics.growth_score == 100.0
        assert "trending" in r.badges

    def test_shrinking_program_growth_floor(self, make_program, make_beneficiary, now) -> None:
        old = now - timedelta(days=60)
        bs = _members(make_beneficiary, 1, 4, created_at=old)
        r = rank_programs([make_program()], bs, now)[0]
        assert r.metrics.growth_rate == pytest.approx(-100.0)
        assert r.metrics.growth_score == 0.0

    def test_growth_window_configurable(self, make_program, make_beneficiary, now) -> None:
        bs = (
            _members(make_beneficiary, 1, 2, start_id=1, created_at=now - timedelta(days=10))
            + _members(make_beneficiary, 1, 2, start_id=10, created_at=now - timedelta(days=40))
        )
        wide = rank_programs([make_program()], bs, now)[0]
        narrow = rank_programs([make_program()], bs, now, growth_window_days=7)[0]
        assert wide.metrics.growth_rate == pytest.approx(0.0)
        assert narrow.metrics.growth_rate == pytest.approx(-100.0)

    def test_idempotent(self, two_programs, now) -> None:
        programs, bs = two_programs
        assert rank_programs(programs, bs, now) == rank_programs(programs, bs, now)


# ── Category filter / truncation ──────────────────────────────────────────────

class TestFilterByCategory:
    @pytest.mark.parametrize("category", [None, "", "all", "ALL"])
    def test_all_keeps_everything(self, make_program, category) -> None:
        programs = [make_program(id=1), make_program(id=2)]
        assert filter_by_category(programs, category) == programs

    def test_case_insensitive_substring(self, make_program) -> None:
        programs = [
            make_program(id=1, assistance_type="Financial"),
            make_program(id=2, assistance_type="Medical"),
        ]
        assert [p.id for p in filter_by_category(programs, "FIN")] == [1]

    def test_falls_back_to_beneficiary_type(self, make_program) -> None:
        p = make_program(assistance_type="", beneficiary_type="PWD")
        assert filter_by_category([p], "pwd") == [p]

    def test_untyped_program_is_general(self, make_program) -> None:
        p = make_program(assistance_type=None, beneficiary_type="")
        assert p.category == "General"
        assert filter_by_category([p], "general") == [p]


@pytest.mark.parametrize("n,expected", [(3, 3), (1, 1), (10, 5), (0, 0), (-1, 0)])
def test_top_programs(make_program, now, n, expected) -> None:
    ranked = rank_programs([make_program(id=i) for i in range(5)], [], now)
    assert len(top_programs(ranked, n)) == expected
