"""
Single-program analytics report: wires every engine together.

Order of evaluation
-------------------
1. metrics  (compute_program_metrics)  ┐ independent
2. timeline (compute_phase_timeline)   ┘
3. health breakdown + efficiency score  (consume 1 + 2)
4. suggestions                          (consume everything)

The report is rebuilt from scratch on every call; nothing is cached or
compared against a previous report.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from program_insights.analytics.efficiency import (
    average_processing_days,
    compute_efficiency_score,
)
from program_insights.analytics.health import (
    HealthExplanation,
    HealthScoreBreakdown,
    compute_health_breakdown,
    explain_health_score,
)
from program_insights.analytics.metrics import (
    ProgramMetrics,
    compute_program_metrics,
    count_created_since,
    effective_status,
)
from program_insights.analytics.phases import PhaseTimeline, compute_phase_timeline
from program_insights.analytics.suggestions import (
    ProgramFacts,
    Suggestion,
    generate_program_suggestions,
)
from program_insights.models.records import Beneficiary, Program
from program_insights.taxonomy.status import BeneficiaryStatus
from program_insights.utils.time_utils import ensure_utc

logger = logging.getLogger(__name__)

ACTIVITY_WINDOW_DAYS = 7


@dataclass(frozen=True)
class ProgramReport:
    """Everything the program detail page displays.

    Attributes:
        program:             The program reported on.
        generated_for:       The ``now`` the report was computed at.
        effective_status:    Status after the all-paid override.
        metrics:             Counts, rates and sums.
        timeline:            Current phase and per-window day math.
        health:              Phase-weighted health breakdown.
        health_explanation:  Plain-language health tier.
        avg_processing_days: Mean approval turnaround (days).
        efficiency_score:    0-100.
        recent_count:        Beneficiaries created in the activity window.
        budget_utilization:  Total amount vs. estimated budget (%).
        suggestions:         Prioritized recommendations (never empty).
    """

    program:             Program
    generated_for:       datetime
    effective_status:    str
    metrics:             ProgramMetrics
    timeline:            PhaseTimeline
    health:              HealthScoreBreakdown
    health_explanation:  HealthExplanation
    avg_processing_days: int
    efficiency_score:    int
    recent_count:        int
    budget_utilization:  int
    suggestions:         tuple[Suggestion, ...]


def build_program_facts(
    program: Program,
    metrics: ProgramMetrics,
    timeline: PhaseTimeline,
    health_score: float,
    efficiency_score: int,
    avg_processing_days: int,
    recent_count: int,
    activity_window_days: int = ACTIVITY_WINDOW_DAYS,
) -> ProgramFacts:
    """Flatten computed values into the record the suggestion rules read."""
    return ProgramFacts(
        phase=timeline.phase,
        gathering_progress=timeline.gathering.progress,
        gathering_days_left=timeline.gathering.days_left,
        processing_days_left=timeline.processing.days_left,
        has_payout_date=program.payout_date is not None,
        health_score=health_score,
        completion_percentage=metrics.completion_percentage,
        time_progress=timeline.time_progress,
        payment_rate=metrics.payment_rate,
        pending_count=metrics.pending_count,
        total_days_left=timeline.total_days_left,
        total_days_elapsed=timeline.total_days_elapsed,
        efficiency_score=efficiency_score,
        avg_processing_days=avg_processing_days,
        approved_count=metrics.count(BeneficiaryStatus.APPROVED.value),
        pending_status_count=metrics.count(BeneficiaryStatus.PENDING.value),
        processing_count=metrics.count(BeneficiaryStatus.PROCESSING.value),
        rejected_count=metrics.count(BeneficiaryStatus.REJECTED.value),
        total_amount=metrics.total_amount,
        average_amount=metrics.average_amount,
        pending_amount=metrics.pending_amount,
        max_beneficiaries=program.max_beneficiaries,
        recent_count=recent_count,
        activity_window_days=activity_window_days,
    )


def build_program_report(
    program: Program,
    beneficiaries: Sequence[Beneficiary],
    now: datetime,
    activity_window_days: int = ACTIVITY_WINDOW_DAYS,
) -> ProgramReport:
    """Compute the full analytics report for one program.

    Args:
        program:              The program.
        beneficiaries:        That program's beneficiaries (already filtered).
        now:                  Reference instant; never read from the clock here.
        activity_window_days: Trailing window for the recent-activity rule.

    Returns:
        ProgramReport.  Never raises on bad data; see the individual engines.
    """
    now = ensure_utc(now)

    metrics  = compute_program_metrics(program, beneficiaries)
    timeline = compute_phase_timeline(program, now)

    health = compute_health_breakdown(
        completion_percentage=metrics.completion_percentage,
        time_progress=timeline.time_progress,
        payment_rate=metrics.payment_rate,
        status_counts=metrics.status_counts,
        phase=timeline.phase,
        gathering_progress=timeline.gathering.progress,
    )
    avg_days   = average_processing_days(beneficiaries)
    efficiency = compute_efficiency_score(
        avg_processing_days=avg_days,
        time_progress=timeline.time_progress,
        completion_percentage=metrics.completion_percentage,
    )
    recent = count_created_since(beneficiaries, now, activity_window_days)

    facts = build_program_facts(
        program=program,
        metrics=metrics,
        timeline=timeline,
        health_score=health.final,
        efficiency_score=efficiency,
        avg_processing_days=avg_days,
        recent_count=recent,
        activity_window_days=activity_window_days,
    )
    suggestions = generate_program_suggestions(facts)

    logger.info(
        "Program report | id=%s | phase=%s | health=%.1f | efficiency=%d | "
        "completion=%d%% | paid=%d%% | suggestions=%d",
        program.id, timeline.phase, health.final, efficiency,
        metrics.completion_percentage, metrics.payment_rate, len(suggestions),
    )

    return ProgramReport(
        program=program,
        generated_for=now,
        effective_status=effective_status(program, beneficiaries),
        metrics=metrics,
        timeline=timeline,
        health=health,
        health_explanation=explain_health_score(health.final),
        avg_processing_days=avg_days,
        efficiency_score=efficiency,
        recent_count=recent,
        budget_utilization=facts.budget_utilization,
        suggestions=tuple(suggestions),
    )
