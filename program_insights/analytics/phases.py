"""
Lifecycle phase classification and per-phase day math.

A program moves through three dated windows::

    start_date ──── gathering ──── end_date ──── processing ──── payout_date ── payout
                                                                 (>= payout)

Classification (evaluated in order, first match wins):
    1. planning   : start_date or end_date missing
    2. upcoming   : now <  start
    3. gathering  : start <= now <= end
    4. processing : now >  end  AND (payout missing OR now < payout)
    5. payout     : payout present AND now >= payout
    6. completed  : fallback; unreachable under rules 1-5 but kept as the
                    default rather than guessing at an "archived" flag.

All day counts are whole days (rounded half-up) and never negative; a day
count whose bounding date is missing is 0.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from program_insights.models.records import Program
from program_insights.taxonomy.status import Phase, PhaseStatus
from program_insights.utils.numeric import round_half_up
from program_insights.utils.time_utils import days_between, ensure_utc


@dataclass(frozen=True)
class PhaseWindow:
    """Progress through one dated phase window.

    Attributes:
        progress:     0-100 (may exceed 100 only if elapsed > total).
        status:       ``PhaseStatus`` value.
        days_elapsed: Whole days since the window opened.
        days_left:    Whole days until the window closes.
        days_total:   Window length in days (0 when a bound is missing).
    """

    progress:     int
    status:       str
    days_elapsed: int
    days_left:    int
    days_total:   int


@dataclass(frozen=True)
class PhaseTimeline:
    """Current phase plus per-window metrics and overall schedule progress.

    Attributes:
        phase:               Current ``Phase`` value.
        gathering:           Window ``[start, end]``.
        processing:          Window ``[end, payout]``.
        payout:              Point window at ``payout``.
        total_duration_days: ``max(1, payout - start)``; 0 without both dates.
        total_days_elapsed:  Days since start (0 without start).
        total_days_left:     Days until payout (0 without payout).
        time_progress:       ``total_days_elapsed / total_duration_days`` as %.
    """

    phase:               str
    gathering:           PhaseWindow
    processing:          PhaseWindow
    payout:              PhaseWindow
    total_duration_days: int
    total_days_elapsed:  int
    total_days_left:     int
    time_progress:       int


def classify_phase(
    start: Optional[datetime],
    end: Optional[datetime],
    payout: Optional[datetime],
    now: datetime,
) -> str:
    """Return the ``Phase`` value for ``now`` given the program dates.

    Naive datetimes are taken as UTC.
    """
    if start is None or end is None:
        return Phase.PLANNING.value
    now, start, end = ensure_utc(now), ensure_utc(start), ensure_utc(end)
    if payout is not None:
        payout = ensure_utc(payout)
    if now < start:
        return Phase.UPCOMING.value
    if start <= now <= end:
        return Phase.GATHERING.value
    if now > end and (payout is None or now < payout):
        return Phase.PROCESSING.value
    if payout is not None and now >= payout:
        return Phase.PAYOUT.value
    return Phase.COMPLETED.value


def compute_phase_timeline(program: Program, now: datetime) -> PhaseTimeline:
    """Classify the program's phase and compute every window's day math.

    Args:
        program: Program whose ``start_date``/``end_date``/``payout_date`` are read.
        now:     Reference instant (naive values are treated as UTC).

    Returns:
        PhaseTimeline.  Never raises.
    """
    now = ensure_utc(now)
    start, end, payout = program.start_date, program.end_date, program.payout_date
    phase = classify_phase(start, end, payout, now)

    gathering = _window(
        opened=start, closes=end, now=now,
        status=_window_status(Phase.GATHERING, phase, end, now),
    )
    processing = _window(
        opened=end, closes=payout, now=now,
        status=_window_status(Phase.PROCESSING, phase, payout, now),
    )

    payout_elapsed = _elapsed(payout, now)
    payout_window = PhaseWindow(
        progress=100 if payout is not None and payout_elapsed > 0 else 0,
        status=_window_status(Phase.PAYOUT, phase, payout, now),
        days_elapsed=payout_elapsed,
        days_left=0,
        days_total=1,
    )

    if start is not None and payout is not None:
        total_duration = max(1, days_between(start, payout))
    else:
        total_duration = 0
    total_elapsed = _elapsed(start, now)
    total_left = max(0, days_between(now, payout)) if payout is not None else 0
    time_progress = (
        round_half_up(total_elapsed / total_duration * 100) if total_duration > 0 else 0
    )

    return PhaseTimeline(
        phase=phase,
        gathering=gathering,
        processing=processing,
        payout=payout_window,
        total_duration_days=total_duration,
        total_days_elapsed=total_elapsed,
        total_days_left=total_left,
        time_progress=time_progress,
    )


# ── Helpers ───────────────────────────────────────────────────────────────────

def _elapsed(since: Optional[datetime], now: datetime) -> int:
    return max(0, days_between(since, now)) if since is not None else 0


def _window(
    opened: Optional[datetime],
    closes: Optional[datetime],
    now: datetime,
    status: str,
) -> PhaseWindow:
    elapsed = _elapsed(opened, now)
    left = max(0, days_between(now, closes)) if closes is not None else 0
    if opened is not None and closes is not None:
        total = max(1, days_between(opened, closes))
    else:
        total = 0
    progress = round_half_up(elapsed / total * 100) if total > 0 else 0
    return PhaseWindow(
        progress=progress,
        status=status,
        days_elapsed=elapsed,
        days_left=left,
        days_total=total,
    )


def _window_status(
    window: Phase,
    current: str,
    closes: Optional[datetime],
    now: datetime,
) -> str:
    if current == window:
        return PhaseStatus.ACTIVE.value
    if closes is not None and now > closes:
        return PhaseStatus.COMPLETED.value
    return PhaseStatus.UPCOMING.value
