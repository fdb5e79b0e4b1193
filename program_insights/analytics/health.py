"""
Phase-aware program health score (0-100) with a drill-down breakdown.

Score formula
-------------
    final = clamp(completion_pts + time_pts + payment_pts + status_pts, 0, 100)

Each component earns a tier fraction of its phase weight ``W``:

    completion (enrollment vs. capacity):
        >=90 -> W   >=70 -> .8W   >=50 -> .6W   >=30 -> .4W   else .2W
    time (schedule consumed; gathering-window progress while gathering,
          overall start->payout progress otherwise):
        <=50 -> W   <=75 -> .8W   <=90 -> .6W   <=100 -> .4W  overdue .2W
    payment (paid share):
        >=80 -> W   >=60 -> .8W   >=40 -> .6W   >=20 -> .4W   else .2W
    status (approved / (approved + pending + rejected)):
        >=80 -> W   >=60 -> .8W   >=40 -> .6W   else .4W      no data .5W

Phase weights
-------------
    phase        completion  time  status  payment
    gathering        40       30     30       0
    processing       20       20     30      30
    payout           10       10     20      60
    completed        20       20     20      40

Phases without a row (planning, upcoming) use the gathering row.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from program_insights.taxonomy.status import BeneficiaryStatus, Phase
from program_insights.utils.numeric import clamp, round_to


@dataclass(frozen=True)
class HealthWeights:
    """Maximum points per component for one phase.  Always sums to 100."""

    completion: int
    time:       int
    status:     int
    payment:    int

    @property
    def total(self) -> int:
        return self.completion + self.time + self.status + self.payment


PHASE_WEIGHTS: dict[str, HealthWeights] = {
    Phase.GATHERING.value:  HealthWeights(completion=40, time=30, status=30, payment=0),
    Phase.PROCESSING.value: HealthWeights(completion=20, time=20, status=30, payment=30),
    Phase.PAYOUT.value:     HealthWeights(completion=10, time=10, status=20, payment=60),
    Phase.COMPLETED.value:  HealthWeights(completion=20, time=20, status=20, payment=40),
}


def weights_for_phase(phase: str) -> HealthWeights:
    return PHASE_WEIGHTS.get(phase, PHASE_WEIGHTS[Phase.GATHERING.value])


@dataclass(frozen=True)
class SubScore:
    """One component of the health score.

    Attributes:
        points: Points earned (tier fraction x ``max``).
        max:    The component's phase weight.
        rate:   The underlying percentage the tier was chosen from.
    """

    points: float
    max:    int
    rate:   float


@dataclass(frozen=True)
class HealthScoreBreakdown:
    """Full health-score drill-down for UI display.

    Attributes:
        phase:      Phase the weights were chosen for.
        weights:    Per-component maximum points.
        completion: Enrollment sub-score (rate = completion %).
        time:       Schedule sub-score (rate = progress % used).
        payment:    Payment sub-score (rate = payment %).
        status:     Approval-quality sub-score (rate = approval %).
        points:     Unclamped sum of sub-score points.
        final:      ``clamp(points, 0, 100)``.
    """

    phase:      str
    weights:    HealthWeights
    completion: SubScore
    time:       SubScore
    payment:    SubScore
    status:     SubScore
    points:     float
    final:      float

    @property
    def scores(self) -> dict[str, SubScore]:
        return {
            "completion": self.completion,
            "time":       self.time,
            "payment":    self.payment,
            "status":     self.status,
        }


def completion_points(completion_percentage: float, weight: float) -> float:
    if completion_percentage >= 90:
        return weight
    if completion_percentage >= 70:
        return weight * 0.8
    if completion_percentage >= 50:
        return weight * 0.6
    if completion_percentage >= 30:
        return weight * 0.4
    return weight * 0.2


def time_points(progress: float, weight: float) -> float:
    """Tier for schedule consumption; lower progress scores higher."""
    if progress > 100:
        return weight * 0.2          # overdue
    if progress <= 50:
        return weight
    if progress <= 75:
        return weight * 0.8
    if progress <= 90:
        return weight * 0.6
    return weight * 0.4


def payment_points(payment_rate: float, weight: float) -> float:
    if payment_rate >= 80:
        return weight
    if payment_rate >= 60:
        return weight * 0.8
    if payment_rate >= 40:
        return weight * 0.6
    if payment_rate >= 20:
        return weight * 0.4
    return weight * 0.2


def approval_rate(status_counts: Mapping[str, int]) -> float | None:
    """Approved share of (approved + pending + rejected), or ``None`` when all zero.

    Other statuses (Processing, Disbursed, ...) are ignored.
    """
    approved = status_counts.get(BeneficiaryStatus.APPROVED.value, 0)
    pending  = status_counts.get(BeneficiaryStatus.PENDING.value, 0)
    rejected = status_counts.get(BeneficiaryStatus.REJECTED.value, 0)
    total = approved + pending + rejected
    if total == 0:
        return None
    return approved / total * 100


def status_points(rate: float | None, weight: float) -> float:
    if rate is None:
        return weight * 0.5          # no data yet
    if rate >= 80:
        return weight
    if rate >= 60:
        return weight * 0.8
    if rate >= 40:
        return weight * 0.6
    return weight * 0.4


def compute_health_breakdown(
    completion_percentage: float,
    time_progress:         float,
    payment_rate:          float,
    status_counts:         Mapping[str, int],
    phase:                 str,
    gathering_progress:    float,
) -> HealthScoreBreakdown:
    """Compute the phase-weighted health score and its breakdown.

    Args:
        completion_percentage: Enrollment vs. capacity (whole percent).
        time_progress:         Overall start->payout progress (percent).
        payment_rate:          Paid share (whole percent).
        status_counts:         Beneficiary status -> count.
        phase:                 Current ``Phase`` value.
        gathering_progress:    Gathering-window progress (percent).

    Returns:
        HealthScoreBreakdown with ``final`` in [0, 100].
    """
    weights = weights_for_phase(phase)

    progress_used = gathering_progress if phase == Phase.GATHERING else time_progress
    approval = approval_rate(status_counts)

    completion = SubScore(
        points=round_to(completion_points(completion_percentage, weights.completion)),
        max=weights.completion,
        rate=completion_percentage,
    )
    time = SubScore(
        points=round_to(time_points(progress_used, weights.time)),
        max=weights.time,
        rate=progress_used,
    )
    payment = SubScore(
        points=round_to(payment_points(payment_rate, weights.payment)),
        max=weights.payment,
        rate=payment_rate,
    )
    status = SubScore(
        points=round_to(status_points(approval, weights.status)),
        max=weights.status,
        rate=round_to(approval) if approval is not None else 0.0,
    )

    points = round_to(completion.points + time.points + payment.points + status.points)

    return HealthScoreBreakdown(
        phase=phase,
        weights=weights,
        completion=completion,
        time=time,
        payment=payment,
        status=status,
        points=points,
        final=clamp(points, 0.0, 100.0),
    )


def compute_health_score(
    completion_percentage: float,
    time_progress:         float,
    payment_rate:          float,
    status_counts:         Mapping[str, int],
    phase:                 str,
    gathering_progress:    float,
) -> float:
    """Shorthand for ``compute_health_breakdown(...).final``."""
    return compute_health_breakdown(
        completion_percentage=completion_percentage,
        time_progress=time_progress,
        payment_rate=payment_rate,
        status_counts=status_counts,
        phase=phase,
        gathering_progress=gathering_progress,
    ).final


# ── Explanation tiers ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class HealthExplanation:
    """Plain-language reading of a health score for dashboard banners."""

    tier:     str
    headline: str
    message:  str
    detail:   str


def explain_health_score(score: float) -> HealthExplanation:
    """Map a 0-100 health score to one of four plain-language tiers.

    Tiers: ``excellent`` (>=80), ``good`` (>=60), ``needs-attention`` (>=40),
    ``critical`` (<40).
    """
    if score >= 80:
        return HealthExplanation(
            tier="excellent",
            headline="Excellent Performance",
            message="Your programs are running smoothly. Keep up the great work!",
            detail="Most beneficiaries are enrolled and payments are on track.",
        )
    if score >= 60:
        return HealthExplanation(
            tier="good",
            headline="Good Performance",
            message="Programs are doing well with minor room for improvement.",
            detail="Enrollment is steady and most payments are being processed.",
        )
    if score >= 40:
        return HealthExplanation(
            tier="needs-attention",
            headline="Needs Attention",
            message="Some programs need your attention to improve.",
            detail="Check enrollment rates and payment processing delays.",
        )
    return HealthExplanation(
        tier="critical",
        headline="Critical - Action Required",
        message="Multiple programs require immediate attention.",
        detail="Review low-performing programs and take corrective action.",
    )
