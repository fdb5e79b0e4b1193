"""
Program ranking: weighted 5-factor composite score across all programs,
sorted into a leaderboard with badges.

Score formula (weighted sum, range 0-100)
-----------------------------------------
    overall = (
        beneficiary_score   * 0.35   # reach, normalized to the largest program
        + completion_score  * 0.25   # enrollment vs. capacity, capped at 100
        + payment_score     * 0.15   # paid share
        + impact_score      * 0.15   # mean amount, normalized to the largest
        + growth_score      * 0.10   # last-30-day vs. earlier enrollment
    )

Component explanations
----------------------
beneficiary_score : total / max(total across ALL programs, 1) * 100
completion_score  : min(total / max_beneficiaries * 100, 100); 0 without capacity
payment_score     : paid / total * 100
impact_score      : mean amount / max(mean amount across ALL programs, 1) * 100
growth_score      : clamp(growth_rate + 50, 0, 100), where
                    growth_rate = (recent - previous) / previous * 100
                    (0 when previous == 0), recent = created in last 30 days.

Both normalizers come from ``compute_global_maxima()``, a single reduction
over every program that runs before any per-program scoring and before the
category filter is applied.

Badges (independent, non-exclusive)
-----------------------------------
    trending       : growth_rate > 20
    top-rated      : payment % >= 90
    excellent      : uncapped completion % >= 95
    high-performer : overall >= 85

Usage flow
----------
1. rank_programs(programs, beneficiaries, now, category=None)
   -> list[RankedProgram]  (sorted, best first)
2. top_programs(ranked, n=3)
   -> list[RankedProgram]
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from program_insights.analytics.metrics import (
    compute_program_metrics,
    count_created_since,
)
from program_insights.models.records import Beneficiary, Program
from program_insights.taxonomy.status import Badge
from program_insights.utils.numeric import clamp, round_half_up, round_to

RANKING_WEIGHTS: dict[str, float] = {
    "beneficiary": 0.35,
    "completion":  0.25,
    "payment":     0.15,
    "impact":      0.15,
    "growth":      0.10,
}

GROWTH_WINDOW_DAYS = 30
ALL_CATEGORIES = "all"


@dataclass(frozen=True)
class RankingMaxima:
    """Portfolio-wide normalizers shared by every program's score.

    Attributes:
        max_total:          Largest beneficiary count (at least 1).
        max_average_amount: Largest mean beneficiary amount (at least 1).
    """

    max_total:          int
    max_average_amount: float


@dataclass(frozen=True)
class RankingMetrics:
    """Sub-scores and raw rates behind a program's overall score.

    Sub-scores and rates are rounded to 2 decimals; ``avg_amount`` to a
    whole number.
    """

    beneficiary_score: float
    completion_score:  float
    payment_score:     float
    impact_score:      float
    growth_score:      float
    completion_rate:   float
    payment_rate:      float
    total_amount:      float
    avg_amount:        int
    growth_rate:       float


@dataclass(frozen=True)
class RankedProgram:
    """One leaderboard entry.

    Attributes:
        program:       The ranked program.
        count:         Its beneficiary count.
        overall_score: Weighted composite (0-100, 2 decimals).
        metrics:       Component breakdown.
        badges:        Earned badges, in fixed order.
    """

    program:       Program
    count:         int
    overall_score: float
    metrics:       RankingMetrics
    badges:        tuple[str, ...]


def filter_by_category(
    programs: Sequence[Program],
    category: Optional[str],
) -> list[Program]:
    """Keep programs whose category contains ``category`` (case-insensitive).

    ``None``, ``""`` and ``"all"`` keep every program.
    """
    if not category or category.lower() == ALL_CATEGORIES:
        return list(programs)
    needle = category.lower()
    return [p for p in programs if needle in p.category.lower()]


def compute_global_maxima(
    programs: Sequence[Program],
    beneficiaries: Sequence[Beneficiary],
) -> RankingMaxima:
    """Reduce all programs to the two ranking normalizers.

    Args:
        programs:      Every program (unfiltered).
        beneficiaries: Every beneficiary across all programs.

    Returns:
        RankingMaxima with both values floored at 1.
    """
    by_program = _group_by_program(beneficiaries)
    max_total = 1
    max_average = 1.0
    for program in programs:
        members = by_program.get(str(program.id), [])
        if not members:
            continue
        max_total = max(max_total, len(members))
        max_average = max(max_average, sum(b.amount for b in members) / len(members))
    return RankingMaxima(max_total=max_total, max_average_amount=max_average)


def score_program(
    program: Program,
    beneficiaries: Sequence[Beneficiary],
    maxima: RankingMaxima,
    now: datetime,
    growth_window_days: int = GROWTH_WINDOW_DAYS,
) -> RankedProgram:
    """Score one program against precomputed portfolio maxima.

    Args:
        program:            Program to score.
        beneficiaries:      That program's beneficiaries.
        maxima:             Output of ``compute_global_maxima()``.
        now:                Reference instant for the growth window.
        growth_window_days: Trailing window that counts as "recent".

    Returns:
        RankedProgram.
    """
    m = compute_program_metrics(program, beneficiaries)

    beneficiary_score = m.total / maxima.max_total * 100
    completion_score  = min(m.exact_completion_pct, 100.0)
    payment_score     = m.exact_payment_pct
    impact_score      = m.exact_average_amount / maxima.max_average_amount * 100

    recent   = count_created_since(beneficiaries, now, growth_window_days)
    previous = m.total - recent
    growth_rate  = (recent - previous) / previous * 100 if previous > 0 else 0.0
    growth_score = clamp(growth_rate + 50, 0.0, 100.0)

    overall = (
        beneficiary_score   * RANKING_WEIGHTS["beneficiary"]
        + completion_score  * RANKING_WEIGHTS["completion"]
        + payment_score     * RANKING_WEIGHTS["payment"]
        + impact_score      * RANKING_WEIGHTS["impact"]
        + growth_score      * RANKING_WEIGHTS["growth"]
    )

    badges: list[str] = []
    if growth_rate > 20:
        badges.append(Badge.TRENDING.value)
    if m.exact_payment_pct >= 90:
        badges.append(Badge.TOP_RATED.value)
    if m.exact_completion_pct >= 95:
        badges.append(Badge.EXCELLENT.value)
    if overall >= 85:
        badges.append(Badge.HIGH_PERFORMER.value)

    return RankedProgram(
        program=program,
        count=m.total,
        overall_score=round_to(overall),
        metrics=RankingMetrics(
            beneficiary_score=round_to(beneficiary_score),
            completion_score=round_to(completion_score),
            payment_score=round_to(payment_score),
            impact_score=round_to(impact_score),
            growth_score=round_to(growth_score),
            completion_rate=round_to(m.exact_completion_pct),
            payment_rate=round_to(m.exact_payment_pct),
            total_amount=m.total_amount,
            avg_amount=round_half_up(m.exact_average_amount),
            growth_rate=round_to(growth_rate),
        ),
        badges=tuple(badges),
    )


def rank_programs(
    programs: Sequence[Program],
    beneficiaries: Sequence[Beneficiary],
    now: datetime,
    category: Optional[str] = None,
    growth_window_days: int = GROWTH_WINDOW_DAYS,
) -> list[RankedProgram]:
    """Score and sort programs, best first.

    Maxima are computed over **all** programs before the category filter;
    a filtered view therefore keeps the same scale as the full leaderboard.
    Ties on ``overall_score`` keep input order.

    Args:
        programs:           All programs.
        beneficiaries:      All beneficiaries.
        now:                Reference instant.
        category:           Optional category substring filter.
        growth_window_days: Trailing window for the growth component.

    Returns:
        Sorted list of RankedProgram.
    """
    maxima = compute_global_maxima(programs, beneficiaries)
    by_program = _group_by_program(beneficiaries)

    ranked = [
        score_program(
            program,
            by_program.get(str(program.id), []),
            maxima,
            now,
            growth_window_days=growth_window_days,
        )
        for program in filter_by_category(programs, category)
    ]
    return sorted(ranked, key=lambda r: -r.overall_score)


def top_programs(ranked: Sequence[RankedProgram], n: int = 3) -> list[RankedProgram]:
    return list(ranked[:max(n, 0)])


# ── Helper ────────────────────────────────────────────────────────────────────

def _group_by_program(beneficiaries: Sequence[Beneficiary]) -> dict[str, list[Beneficiary]]:
    grouped: dict[str, list[Beneficiary]] = defaultdict(list)
    for b in beneficiaries:
        grouped[str(b.program_id)].append(b)
    return grouped
