"""
Program metrics: reduces a program's beneficiary list to counts, rates and
monetary sums, and owns the effective-status override.

Predicates
----------
    paid    : is_paid  OR  status in {Disbursed, Completed}
    pending : NOT paid AND status != Rejected

Rates (rounded half-up to whole percent)
----------------------------------------
    completion_percentage = total / max_beneficiaries * 100   (0 when no capacity)
    payment_rate          = paid_count / total * 100          (0 when empty)
    average_amount        = total_amount / total              (0 when empty)

The ``exact_*`` fields carry the same quantities unrounded; the ranking
engine scores on those.

Effective status
----------------
``effective_status()`` is the single place the "all beneficiaries paid ->
complete" rule lives.  Every consumer (phase report, ranking, portfolio
suggestions) must call it rather than reading ``Program.stored_status``.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Sequence

from program_insights.models.records import Beneficiary, Program
from program_insights.taxonomy.status import (
    PAID_STATUSES,
    BeneficiaryStatus,
    EffectiveStatus,
    ProgramStatus,
)
from program_insights.utils.numeric import round_half_up
from program_insights.utils.time_utils import days_ago


@dataclass(frozen=True)
class ProgramMetrics:
    """Aggregate view of one program's beneficiaries.

    Attributes:
        total:                 Number of beneficiaries.
        paid_count:            Beneficiaries satisfying the paid predicate.
        pending_count:         Unpaid, non-rejected beneficiaries.
        status_counts:         Status string -> count.
        completion_percentage: Enrollment vs. capacity, whole percent.
        payment_rate:          Paid share, whole percent.
        total_amount:          Sum of all amounts.
        paid_amount:           Sum of amounts of paid beneficiaries.
        pending_amount:        Sum of amounts of pending beneficiaries.
        average_amount:        Mean amount, whole units.
        exact_completion_pct:  Unrounded completion percentage.
        exact_payment_pct:     Unrounded payment percentage.
        exact_average_amount:  Unrounded mean amount.
    """

    total:                 int
    paid_count:            int
    pending_count:         int
    status_counts:         dict[str, int]
    completion_percentage: int
    payment_rate:          int
    total_amount:          float
    paid_amount:           float
    pending_amount:        float
    average_amount:        int
    exact_completion_pct:  float
    exact_payment_pct:     float
    exact_average_amount:  float

    def count(self, status: str) -> int:
        """Number of beneficiaries with ``status`` (0 when absent)."""
        return self.status_counts.get(status, 0)


def is_paid(beneficiary: Beneficiary) -> bool:
    return beneficiary.is_paid or beneficiary.status in PAID_STATUSES


def is_pending(beneficiary: Beneficiary) -> bool:
    return not is_paid(beneficiary) and beneficiary.status != BeneficiaryStatus.REJECTED


def beneficiaries_for(
    program: Program,
    beneficiaries: Iterable[Beneficiary],
) -> list[Beneficiary]:
    """Select the beneficiaries belonging to ``program``.

    Ids are compared as strings: the API is inconsistent about returning
    ``program_id`` as ``12`` or ``"12"``.
    """
    key = str(program.id)
    return [b for b in beneficiaries if str(b.program_id) == key]


def compute_program_metrics(
    program: Program,
    beneficiaries: Sequence[Beneficiary],
) -> ProgramMetrics:
    """Compute counts, rates and sums for one program.

    Args:
        program:       The program (only ``max_beneficiaries`` is read).
        beneficiaries: That program's beneficiaries (already filtered).

    Returns:
        ProgramMetrics.  Never raises; every division is guarded.
    """
    total = len(beneficiaries)
    paid = [b for b in beneficiaries if is_paid(b)]
    pending = [b for b in beneficiaries if is_pending(b)]

    status_counts = dict(Counter(b.status for b in beneficiaries))

    capacity = program.max_beneficiaries
    if capacity is not None and capacity > 0:
        exact_completion = total / capacity * 100
    else:
        exact_completion = 0.0

    exact_payment = len(paid) / total * 100 if total > 0 else 0.0

    total_amount = sum(b.amount for b in beneficiaries)
    exact_average = total_amount / total if total > 0 else 0.0

    return ProgramMetrics(
        total=total,
        paid_count=len(paid),
        pending_count=len(pending),
        status_counts=status_counts,
        completion_percentage=round_half_up(exact_completion),
        payment_rate=round_half_up(exact_payment),
        total_amount=total_amount,
        paid_amount=sum(b.amount for b in paid),
        pending_amount=sum(b.amount for b in pending),
        average_amount=round_half_up(exact_average),
        exact_completion_pct=exact_completion,
        exact_payment_pct=exact_payment,
        exact_average_amount=exact_average,
    )


def effective_status(
    program: Program,
    beneficiaries: Sequence[Beneficiary],
) -> str:
    """Return the displayed status of ``program``.

    ``complete`` if and only if the beneficiary list is non-empty and every
    beneficiary is paid; this overrides the stored status unconditionally.
    Otherwise a stored ``ongoing`` or ``complete`` shows as ``ongoing`` and
    anything else (``draft`` or an unrecognized value) as ``draft``.
    """
    if beneficiaries and all(is_paid(b) for b in beneficiaries):
        return EffectiveStatus.COMPLETE.value
    if program.stored_status in (ProgramStatus.ONGOING.value, ProgramStatus.COMPLETE.value):
        return EffectiveStatus.ONGOING.value
    return EffectiveStatus.DRAFT.value


def count_created_since(
    beneficiaries: Iterable[Beneficiary],
    now: datetime,
    days: int,
) -> int:
    """Count records whose ``created_at`` falls in the trailing ``days`` window.

    Records with no ``created_at`` never count as recent.
    """
    cutoff = days_ago(now, days)
    return sum(
        1 for b in beneficiaries
        if b.created_at is not None and b.created_at >= cutoff
    )
