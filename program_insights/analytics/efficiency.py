"""
Efficiency score (0-100): how quickly applications are approved relative to
how fast enrollment is keeping pace with the schedule.

    speed (50 max), from average approval turnaround in days:
        <=1 -> 50   <=3 -> 40   <=7 -> 30   <=14 -> 20   else 10

    progress efficiency (50 max), ratio = completion% / max(time_progress%, 1):
        >=1.2 -> 50   >=1.0 -> 40   >=0.8 -> 30   >=0.6 -> 20   else 10

With no approved beneficiaries the turnaround is 0 days, i.e. the top
speed tier: no backlog has been observed yet.
"""

from __future__ import annotations

from typing import Sequence

from program_insights.models.records import Beneficiary
from program_insights.taxonomy.status import BeneficiaryStatus
from program_insights.utils.numeric import clamp, round_half_up
from program_insights.utils.time_utils import days_between


def average_processing_days(beneficiaries: Sequence[Beneficiary]) -> int:
    """Mean whole-day turnaround of Approved applications.

    Only beneficiaries with ``status == Approved`` and both ``created_at`` and
    ``updated_at`` set contribute.  Each turnaround is rounded to whole days
    before averaging; the mean is rounded half-up.

    Returns:
        Whole days, or 0 when no beneficiary qualifies.
    """
    turnarounds = [
        days_between(b.created_at, b.updated_at)
        for b in beneficiaries
        if b.status == BeneficiaryStatus.APPROVED
        and b.created_at is not None
        and b.updated_at is not None
    ]
    if not turnarounds:
        return 0
    return round_half_up(sum(turnarounds) / len(turnarounds))


def speed_points(avg_processing_days: float) -> int:
    if avg_processing_days <= 1:
        return 50
    if avg_processing_days <= 3:
        return 40
    if avg_processing_days <= 7:
        return 30
    if avg_processing_days <= 14:
        return 20
    return 10


def progress_efficiency_points(completion_percentage: float, time_progress: float) -> int:
    ratio = completion_percentage / max(time_progress, 1)
    if ratio >= 1.2:
        return 50
    if ratio >= 1.0:
        return 40
    if ratio >= 0.8:
        return 30
    if ratio >= 0.6:
        return 20
    return 10


def compute_efficiency_score(
    avg_processing_days:   float,
    time_progress:         float,
    completion_percentage: float,
) -> int:
    """Combine turnaround speed and enrollment pace into a 0-100 score."""
    score = speed_points(avg_processing_days) + progress_efficiency_points(
        completion_percentage, time_progress
    )
    return int(clamp(score, 0, 100))
