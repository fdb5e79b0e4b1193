"""
Tests for program_insights/analytics/portfolio.py.

What we test
------------
build_portfolio_summary():
  - Effective-status counts (all three keys always present).
  - Portfolio totals: beneficiaries, paid / pending, payment rate, amounts.
  - Date range, average health and its explanation tier.
  - Portfolio suggestions list affected programs; "no new programs" rule
    depends on program created_at.
  - Empty portfolio degrades to zeros and the fallback suggestion.

compute_program_health():
  - Agrees with the single-program report's health score.

programs_by_status():
  - Filters on effective status (case-insensitive).
  - days_in_status floors whole days since updated_at (0 when unknown).

most_active_program():
  - All-time, year and month periods; ties go to the first program.
  - Invalid period / missing year raise ValueError.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from program_insights.analytics.metrics import beneficiaries_for
from program_insights.analytics.portfolio import (
    build_portfolio_summary,
    compute_program_health,
    most_active_program,
    programs_by_status,
)
from program_insights.analytics.report import build_program_report


@pytest.fixture
def portfolio(make_program, make_beneficiary):
    programs = [
        make_program(id=1, name="Rice Subsidy", stored_status="ongoing"),
        make_program(
            id=2, name="School Supplies", stored_status="ongoing",
            start_date="2023-11-01", end_date="2023-11-30", payout_date="2023-12-15",
            max_beneficiaries=2, updated_at=None,
        ),
        make_program(
            id=3, name="Livelihood Draft", stored_status="draft",
            start_date=None, end_date=None, payout_date=None,
        ),
    ]
    beneficiaries = [
        make_beneficiary(id=10, program_id=1, status="Approved", amount=1000),
        make_beneficiary(id=11, program_id=1, status="Pending", amount=1000),
        make_beneficiary(id=12, program_id=1, status="Disbursed", amount=1000),
        make_beneficiary(id=20, program_id=2, status="Completed", amount=500, is_paid=True),
        make_beneficiary(id=21, program_id=2, status="Approved", amount=500, is_paid=True),
    ]
    return programs, beneficiaries


# ── build_portfolio_summary ───────────────────────────────────────────────────

class TestPortfolioSummary:
    def test_status_counts(self, portfolio, now) -> None:
        s = build_portfolio_summary(*portfolio, now)
        assert s.status_counts == {"draft": 1, "ongoing": 1, "complete": 1}

    def test_totals(self, portfolio, now) -> None:
        s = build_portfolio_summary(*portfolio, now)
        assert s.total_programs == 3
        assert s.total_beneficiaries == 5
        assert s.paid_count == 3
        assert s.pending_count == 2
        assert s.payment_rate == 60
        assert s.total_amount == pytest.approx(4000.0)
        assert s.average_amount == 800

    def test_date_range(self, portfolio, now) -> None:
        s = build_portfolio_summary(*portfolio, now)
        assert s.earliest_start == datetime(2023, 11, 1, tzinfo=timezone.utc)
        assert s.latest_end == datetime(2024, 1, 31, tzinfo=timezone.utc)

    def test_average_health(self, portfolio, now) -> None:
        s = build_portfolio_summary(*portfolio, now)
        scores = [row.health_score for row in s.programs]
        assert len(scores) == 3
        assert s.average_health_score == int(sum(scores) / 3 + 0.5)
        assert s.health_explanation.tier in {"excellent", "good", "needs-attention", "critical"}

    def test_suggestions(self, portfolio, now) -> None:
        s = build_portfolio_summary(*portfolio, now)
        by_title = {x.title: x for x in s.suggestions}
        assert by_title["Draft Programs"].affected_programs == ("Livelihood Draft",)
        assert "No Recent Activity" in by_title

    def test_recent_program_silences_activity_rule(self, portfolio, make_program, now) -> None:
        programs, bs = portfolio
        fresh = make_program(id=9, name="Fresh", created_at=now - timedelta(days=2))
        s = build_portfolio_summary([*programs, fresh], bs, now)
        assert "No Recent Activity" not in [x.title for x in s.suggestions]

    def test_empty_portfolio(self, now) -> None:
        s = build_portfolio_summary([], [], now)
        assert s.total_programs == 0
        assert s.status_counts == {"draft": 0, "ongoing": 0, "complete": 0}
        assert s.payment_rate == 0
        assert s.average_amount == 0
        assert s.average_health_score == 0
        assert s.earliest_start is None
        assert s.health_explanation.tier == "critical"
        assert [x.title for x in s.suggestions] == ["All Systems Running Smoothly"]

    def test_status_counts_stay_within_known_statuses(self, make_program, now) -> None:
        programs = [
            make_program(id=1, stored_status="Active"),
            make_program(id=2, stored_status="complete"),
        ]
        s = build_portfolio_summary(programs, [], now)
        assert s.status_counts == {"draft": 1, "ongoing": 1, "complete": 0}

    def test_idempotent(self, portfolio, now) -> None:
        assert build_portfolio_summary(*portfolio, now) == build_portfolio_summary(*portfolio, now)


def test_program_health_agrees_with_report(portfolio, now) -> None:
    programs, bs = portfolio
    for program in programs:
        members = beneficiaries_for(program, bs)
        row = compute_program_health(program, members, now)
        report = build_program_report(program, members, now)
        assert row.health_score == report.health.final
        assert row.effective_status == report.effective_status
        assert row.phase == report.timeline.phase


# ── programs_by_status ────────────────────────────────────────────────────────

class TestProgramsByStatus:
    def test_ongoing(self, portfolio, now) -> None:
        rows = programs_by_status(*portfolio, "ongoing", now)
        assert [r.program_name for r in rows] == ["Rice Subsidy"]
        row = rows[0]
        assert row.beneficiary_count == 3
        assert row.paid_count == 1
        assert row.payment_rate == pytest.approx(33.33)
        assert row.days_in_status == 4              # 2024-01-10 09:00 -> 01-15 00:00

    def test_complete_without_updated_at(self, portfolio, now) -> None:
        rows = programs_by_status(*portfolio, "COMPLETE", now)
        assert [r.program_name for r in rows] == ["School Supplies"]
        assert rows[0].days_in_status == 0
        assert rows[0].payment_rate == 100.0

    def test_draft_without_beneficiaries(self, portfolio, now) -> None:
        rows = programs_by_status(*portfolio, "draft", now)
        assert rows[0].payment_rate == 0.0
        assert rows[0].beneficiary_count == 0

    def test_unknown_status_empty(self, portfolio, now) -> None:
        assert programs_by_status(*portfolio, "archived", now) == []


# ── most_active_program ───────────────────────────────────────────────────────

class TestMostActive:
    @pytest.fixture
    def dated(self, make_program, make_beneficiary):
        programs = [
            make_program(id=1, name="A", created_at="2023-03-01"),
            make_program(id=2, name="B", created_at="2024-01-01"),
        ]
        bs = [
            make_beneficiary(id=1, program_id=1, created_at="2023-03-05"),
            make_beneficiary(id=2, program_id=1, created_at="2023-04-05"),
            make_beneficiary(id=3, program_id=1, created_at="2024-01-03"),
            make_beneficiary(id=4, program_id=2, created_at="2024-01-02"),
            make_beneficiary(id=5, program_id=2, created_at="2024-01-03"),
            make_beneficiary(id=6, program_id=2, created_at=None),
        ]
        return programs, bs

    def test_all_time(self, dated) -> None:
        best = most_active_program(*dated)
        assert best.count == 3
        assert best.name == "A"                     # tie 3-3: first program wins

    def test_year(self, dated) -> None:
        best = most_active_program(*dated, period="year", year=2024)
        assert (best.name, best.count) == ("B", 2)

    def test_month(self, dated) -> None:
        best = most_active_program(*dated, period="month", year=2023, month=3)
        assert (best.name, best.count) == ("A", 1)

    def test_month_without_month_is_all_time(self, dated) -> None:
        assert most_active_program(*dated, period="month", month=0).count == 3

    def test_nothing_in_period(self, dated) -> None:
        best = most_active_program(*dated, period="year", year=2020)
        assert (best.name, best.count) == ("", 0)

    def test_invalid_period(self, dated) -> None:
        with pytest.raises(ValueError, match="period"):
            most_active_program(*dated, period="week")

    def test_year_required(self, dated) -> None:
        with pytest.raises(ValueError, match="year"):
            most_active_program(*dated, period="year")
