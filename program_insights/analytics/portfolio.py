"""
Portfolio overview across every program.

Builds the numbers behind the programs dashboard: effective-status counts,
a phase-weighted health row per program, the portfolio's average health and
its plain-language tier, and the portfolio-level suggestions.  Also provides
the drill-down helpers the dashboard calls on demand:

    programs_by_status()   -> rows for one effective status
    most_active_program()  -> program with the most beneficiaries in a period

Per-program health uses the same engines as the program detail report so
the two screens can never disagree about a program's score.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from program_insights.analytics.health import (
    HealthExplanation,
    compute_health_score,
    explain_health_score,
)
from program_insights.analytics.metrics import (
    beneficiaries_for,
    compute_program_metrics,
    effective_status,
    is_paid,
    is_pending,
)
from program_insights.analytics.phases import compute_phase_timeline
from program_insights.analytics.suggestions import (
    PortfolioFacts,
    ProgramHealth,
    Suggestion,
    generate_portfolio_suggestions,
)
from program_insights.models.records import Beneficiary, Program
from program_insights.taxonomy.status import EffectiveStatus
from program_insights.utils.numeric import round_half_up, round_to
from program_insights.utils.time_utils import days_ago, ensure_utc

logger = logging.getLogger(__name__)

RECENT_PROGRAM_WINDOW_DAYS = 7
VALID_PERIODS = frozenset({"all", "year", "month"})


@dataclass(frozen=True)
class PortfolioSummary:
    """Aggregate view of all programs.

    Attributes:
        generated_for:        The ``now`` the summary was computed at.
        total_programs:       Number of programs.
        total_beneficiaries:  Number of beneficiaries across all programs.
        status_counts:        Effective status -> number of programs.
        earliest_start:       Earliest program start date, if any.
        latest_end:           Latest program end date, if any.
        paid_count:           Paid beneficiaries across all programs.
        pending_count:        Pending beneficiaries across all programs.
        payment_rate:         Portfolio paid share, whole percent.
        total_amount:         Sum of all beneficiary amounts.
        average_amount:       Mean beneficiary amount, whole units.
        programs:             One health row per program.
        average_health_score: Mean of per-program health, whole points.
        health_explanation:   Plain-language tier for the average.
        suggestions:          Portfolio-level recommendations (never empty).
    """

    generated_for:        datetime
    total_programs:       int
    total_beneficiaries:  int
    status_counts:        dict[str, int]
    earliest_start:       Optional[datetime]
    latest_end:           Optional[datetime]
    paid_count:           int
    pending_count:        int
    payment_rate:         int
    total_amount:         float
    average_amount:       int
    programs:             tuple[ProgramHealth, ...]
    average_health_score: int
    health_explanation:   HealthExplanation
    suggestions:          tuple[Suggestion, ...]


@dataclass(frozen=True)
class StatusDrillDownRow:
    """One program in the "programs by status" drill-down."""

    program_id:        object
    program_name:      str
    beneficiary_count: int
    paid_count:        int
    payment_rate:      float
    days_in_status:    int


@dataclass(frozen=True)
class MostActiveProgram:
    """Program with the most beneficiaries in a period (empty name if none)."""

    name:  str
    count: int


def compute_program_health(
    program: Program,
    beneficiaries: Sequence[Beneficiary],
    now: datetime,
) -> ProgramHealth:
    """Phase-weighted health row for one program (beneficiaries pre-filtered)."""
    metrics  = compute_program_metrics(program, beneficiaries)
    timeline = compute_phase_timeline(program, now)
    score = compute_health_score(
        completion_percentage=metrics.completion_percentage,
        time_progress=timeline.time_progress,
        payment_rate=metrics.payment_rate,
        status_counts=metrics.status_counts,
        phase=timeline.phase,
        gathering_progress=timeline.gathering.progress,
    )
    return ProgramHealth(
        program_id=program.id,
        program_name=program.name,
        health_score=score,
        completion_rate=metrics.exact_completion_pct,
        payment_rate=metrics.exact_payment_pct,
        beneficiary_count=metrics.total,
        max_beneficiaries=program.max_beneficiaries or 0,
        effective_status=effective_status(program, beneficiaries),
        phase=timeline.phase,
    )


def build_portfolio_summary(
    programs: Sequence[Program],
    beneficiaries: Sequence[Beneficiary],
    now: datetime,
    recent_window_days: int = RECENT_PROGRAM_WINDOW_DAYS,
) -> PortfolioSummary:
    """Compute the portfolio overview.

    Args:
        programs:           All programs.
        beneficiaries:      All beneficiaries.
        now:                Reference instant.
        recent_window_days: Window for the "no new programs" rule.

    Returns:
        PortfolioSummary.
    """
    now = ensure_utc(now)

    rows = tuple(
        compute_program_health(p, beneficiaries_for(p, beneficiaries), now)
        for p in programs
    )

    status_counts: dict[str, int] = {s.value: 0 for s in EffectiveStatus}
    status_counts.update(Counter(r.effective_status for r in rows))

    starts = [p.start_date for p in programs if p.start_date is not None]
    ends   = [p.end_date for p in programs if p.end_date is not None]

    total = len(beneficiaries)
    paid_count    = sum(1 for b in beneficiaries if is_paid(b))
    pending_count = sum(1 for b in beneficiaries if is_pending(b))
    total_amount  = sum(b.amount for b in beneficiaries)

    average_health = (
        round_half_up(sum(r.health_score for r in rows) / len(rows)) if rows else 0
    )

    cutoff = days_ago(now, recent_window_days)
    recently_created = sum(
        1 for p in programs if p.created_at is not None and p.created_at >= cutoff
    )
    suggestions = generate_portfolio_suggestions(
        PortfolioFacts(
            programs=rows,
            recently_created_count=recently_created,
            window_days=recent_window_days,
        )
    )

    logger.info(
        "Portfolio summary | programs=%d | beneficiaries=%d | avg_health=%d | "
        "suggestions=%d",
        len(rows), total, average_health, len(suggestions),
    )

    return PortfolioSummary(
        generated_for=now,
        total_programs=len(programs),
        total_beneficiaries=total,
        status_counts=status_counts,
        earliest_start=min(starts) if starts else None,
        latest_end=max(ends) if ends else None,
        paid_count=paid_count,
        pending_count=pending_count,
        payment_rate=round_half_up(paid_count / total * 100) if total > 0 else 0,
        total_amount=total_amount,
        average_amount=round_half_up(total_amount / total) if total > 0 else 0,
        programs=rows,
        average_health_score=average_health,
        health_explanation=explain_health_score(average_health),
        suggestions=tuple(suggestions),
    )


def programs_by_status(
    programs: Sequence[Program],
    beneficiaries: Sequence[Beneficiary],
    status: str,
    now: datetime,
) -> list[StatusDrillDownRow]:
    """Drill-down rows for every program whose effective status is ``status``.

    ``days_in_status`` counts whole days (floored) since the program record
    was last updated; 0 when ``updated_at`` is unknown.
    """
    now = ensure_utc(now)
    wanted = status.lower()
    rows: list[StatusDrillDownRow] = []
    for program in programs:
        members = beneficiaries_for(program, beneficiaries)
        if effective_status(program, members) != wanted:
            continue
        paid = sum(1 for b in members if is_paid(b))
        if program.updated_at is not None:
            days_in_status = math.floor((now - program.updated_at).total_seconds() / 86_400)
        else:
            days_in_status = 0
        rows.append(
            StatusDrillDownRow(
                program_id=program.id,
                program_name=program.name,
                beneficiary_count=len(members),
                paid_count=paid,
                payment_rate=round_to(paid / len(members) * 100) if members else 0.0,
                days_in_status=days_in_status,
            )
        )
    return rows


def most_active_program(
    programs: Sequence[Program],
    beneficiaries: Sequence[Beneficiary],
    period: str = "all",
    year: Optional[int] = None,
    month: int = 0,
) -> MostActiveProgram:
    """Return the program with the most beneficiaries in a period.

    With ``period="all"`` nothing is filtered.  With ``"year"`` or
    ``"month"``, programs and beneficiaries are restricted to those created
    in ``year``, and in ``month`` when ``month`` is 1-12.  Records without
    ``created_at`` are dropped by any period filter.  The first program to
    reach the highest count wins ties.

    Raises:
        ValueError: If ``period`` is unknown, or ``year`` is missing for a
            non-``"all"`` period.
    """
    if period not in VALID_PERIODS:
        raise ValueError(f"period must be one of {sorted(VALID_PERIODS)}, got '{period}'.")

    # A month period without a month selected shows all time.
    if period == "month" and not 1 <= month <= 12:
        period = "all"

    if period != "all":
        if year is None:
            raise ValueError(f"year is required for period '{period}'.")

        def in_period(ts: Optional[datetime]) -> bool:
            if ts is None or ts.year != year:
                return False
            return not (1 <= month <= 12) or ts.month == month

        programs = [p for p in programs if in_period(p.created_at)]
        beneficiaries = [b for b in beneficiaries if in_period(b.created_at)]

    best = MostActiveProgram(name="", count=0)
    for program in programs:
        count = len(beneficiaries_for(program, beneficiaries))
        if count > best.count:
            best = MostActiveProgram(name=program.name, count=count)
    return best
