"""
Status vocabularies for programs, beneficiaries and derived analytics.

Two families live here:
  - *Stored* vocabularies that arrive on input records
    (``BeneficiaryStatus``, ``ProgramStatus``).
  - *Derived* vocabularies the analytics engine produces
    (``EffectiveStatus``, ``Phase``, ``PhaseStatus``, ``SuggestionType``,
    ``Badge``).

Usage example::

    from program_insights.taxonomy.status import BeneficiaryStatus, Phase

    if b.status in PAID_STATUSES: ...
    if timeline.phase == Phase.GATHERING: ...

This module has NO imports from any other ``program_insights`` package.
"""

from enum import StrEnum


class BeneficiaryStatus(StrEnum):
    """Workflow status of a single beneficiary application."""

    PENDING = "Pending"
    """Submitted, awaiting review."""

    PROCESSING = "Processing"
    """Under review / verification."""

    APPROVED = "Approved"
    """Eligible; awaiting disbursement."""

    REJECTED = "Rejected"
    """Not eligible; never counts toward payment."""

    DISBURSED = "Disbursed"
    """Benefit released; counts as paid regardless of ``is_paid``."""

    COMPLETED = "Completed"
    """Fully closed; counts as paid regardless of ``is_paid``."""


# Statuses that imply the beneficiary has been paid.
PAID_STATUSES: frozenset[str] = frozenset({
    BeneficiaryStatus.DISBURSED.value,
    BeneficiaryStatus.COMPLETED.value,
})


class ProgramStatus(StrEnum):
    """Status stored on the program record by the admin UI."""

    DRAFT = "draft"
    ONGOING = "ongoing"
    COMPLETE = "complete"


class EffectiveStatus(StrEnum):
    """Displayed program status after the all-paid override is applied."""

    DRAFT = "draft"
    ONGOING = "ongoing"
    COMPLETE = "complete"


class Phase(StrEnum):
    """Lifecycle phase derived from today's date vs. program dates."""

    PLANNING = "planning"
    """Start or end date not set yet."""

    UPCOMING = "upcoming"
    """Before the start date."""

    GATHERING = "gathering"
    """Between start and end date (inclusive): applications are collected."""

    PROCESSING = "processing"
    """After the end date, before the payout date (or no payout date yet)."""

    PAYOUT = "payout"
    """On or after the payout date."""

    COMPLETED = "completed"
    """Fallback when no other phase applies."""


class PhaseStatus(StrEnum):
    """State of one phase window relative to the current phase."""

    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"


class SuggestionType(StrEnum):
    """Severity tier of a generated suggestion, most severe first."""

    URGENT = "urgent"
    WARNING = "warning"
    INFO = "info"
    SUCCESS = "success"


class Badge(StrEnum):
    """Qualitative tag attached to a ranked program."""

    TRENDING = "trending"
    TOP_RATED = "top-rated"
    EXCELLENT = "excellent"
    HIGH_PERFORMER = "high-performer"


BADGE_LABELS: dict[str, str] = {
    Badge.TRENDING.value:       "Trending",
    Badge.TOP_RATED.value:      "Top Rated",
    Badge.EXCELLENT.value:      "Excellent",
    Badge.HIGH_PERFORMER.value: "High Performer",
}
