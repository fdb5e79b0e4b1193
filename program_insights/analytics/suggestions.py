"""
Actionable suggestions: ordered rule tables evaluated against a facts record.

Each rule is a ``SuggestionRule(name, predicate, build)``.  Evaluation walks
the table in order and every rule whose predicate holds appends exactly one
``Suggestion``; rules are independent, not mutually exclusive.  When nothing
matches, a single ``success`` fallback is returned, so the output is never
empty.

Two tables exist:

PROGRAM_RULES   (facts: ``ProgramFacts``, one program's detail page)
    phase-specific -> health -> enrollment -> payment -> time -> efficiency
    -> status distribution -> rejection -> budget -> activity

PORTFOLIO_RULES (facts: ``PortfolioFacts``, the programs overview)
    low health -> low enrollment -> low payment -> drafts -> high performers
    -> no recently created programs

Facts records are plain frozen dataclasses built by ``analytics.report`` and
``analytics.portfolio``; rules never recompute metrics themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Optional, Sequence, TypeVar

from program_insights.taxonomy.status import EffectiveStatus, Phase, SuggestionType
from program_insights.utils.numeric import round_half_up

F = TypeVar("F")


@dataclass(frozen=True)
class Suggestion:
    """One recommendation shown in the "Actionable Suggestions" panel.

    Attributes:
        type:              ``SuggestionType`` value (urgent/warning/info/success).
        title:             Short headline.
        message:           What was observed, with the numbers.
        action:            What the office should do about it.
        affected_programs: Program names (portfolio suggestions only).
    """

    type:              str
    title:             str
    message:           str
    action:            str
    affected_programs: tuple[str, ...] = ()


@dataclass(frozen=True)
class SuggestionRule(Generic[F]):
    name:      str
    predicate: Callable[[F], bool]
    build:     Callable[[F], Suggestion]


def evaluate_rules(
    rules: Sequence[SuggestionRule[F]],
    facts: F,
    fallback: Suggestion,
) -> list[Suggestion]:
    """Apply ``rules`` in order; return ``[fallback]`` when none match."""
    suggestions = [rule.build(facts) for rule in rules if rule.predicate(facts)]
    return suggestions or [fallback]


# ── Per-program facts and rules ───────────────────────────────────────────────

@dataclass(frozen=True)
class ProgramFacts:
    """Everything the per-program rules read, computed once per report.

    Day counts and percentages are whole numbers as displayed.
    """

    phase:                 str
    gathering_progress:    int
    gathering_days_left:   int
    processing_days_left:  int
    has_payout_date:       bool
    health_score:          float
    completion_percentage: int
    time_progress:         int
    payment_rate:          int
    pending_count:         int
    total_days_left:       int
    total_days_elapsed:    int
    efficiency_score:      int
    avg_processing_days:   int
    approved_count:        int
    pending_status_count:  int
    processing_count:      int
    rejected_count:        int
    total_amount:          float
    average_amount:        int
    pending_amount:        float
    max_beneficiaries:     Optional[int]
    recent_count:          int
    activity_window_days:  int = 7

    @property
    def rejection_rate(self) -> Optional[float]:
        """Rejected share of decided applications, or ``None`` when none decided."""
        decided = self.approved_count + self.rejected_count
        if decided == 0:
            return None
        return self.rejected_count / decided * 100

    @property
    def budget_utilization(self) -> int:
        """Total amount vs. ``max_beneficiaries * average_amount``, whole percent.

        0 when the estimated budget is unknown (no capacity or no amounts).
        """
        if self.max_beneficiaries is None:
            return 0
        budget = self.max_beneficiaries * self.average_amount
        if budget <= 0:
            return 0
        return round_half_up(self.total_amount / budget * 100)


def _peso(amount: float) -> str:
    if float(amount).is_integer():
        return f"₱{amount:,.0f}"
    return f"₱{amount:,.2f}"


def _score(value: float) -> str:
    return f"{value:g}"


PROGRAM_RULES: tuple[SuggestionRule[ProgramFacts], ...] = (
    # ── Phase-specific ────────────────────────────────────────────────────────
    SuggestionRule(
        name="gathering_low_enrollment",
        predicate=lambda f: (
            f.phase == Phase.GATHERING
            and f.gathering_progress < 30
            and f.gathering_days_left < 7
        ),
        build=lambda f: Suggestion(
            type=SuggestionType.URGENT.value,
            title="Gathering Phase - Low Enrollment",
            message=(
                f"Only {f.gathering_progress}% of gathering period completed "
                f"with {f.gathering_days_left} days left."
            ),
            action="Increase outreach efforts and extend gathering period if needed",
        ),
    ),
    SuggestionRule(
        name="gathering_enrollment_behind",
        predicate=lambda f: (
            f.phase == Phase.GATHERING
            and f.completion_percentage < 50
            and f.gathering_progress > 50
        ),
        build=lambda f: Suggestion(
            type=SuggestionType.WARNING.value,
            title="Gathering Phase - Enrollment Behind",
            message=(
                f"Gathering is {f.gathering_progress}% complete but only "
                f"{f.completion_percentage}% of target reached."
            ),
            action="Boost enrollment efforts and review application process",
        ),
    ),
    SuggestionRule(
        name="processing_missing_payout_date",
        predicate=lambda f: f.phase == Phase.PROCESSING and not f.has_payout_date,
        build=lambda f: Suggestion(
            type=SuggestionType.INFO.value,
            title="Processing Phase - Set Payout Date",
            message=(
                "Gathering period completed. Set a payout date to proceed "
                "with benefit distribution."
            ),
            action="Edit program to set payout date and notify beneficiaries",
        ),
    ),
    SuggestionRule(
        name="processing_payout_approaching",
        predicate=lambda f: (
            f.phase == Phase.PROCESSING
            and f.has_payout_date
            and f.processing_days_left < 7
        ),
        build=lambda f: Suggestion(
            type=SuggestionType.WARNING.value,
            title="Processing Phase - Payout Approaching",
            message=(
                f"Payout scheduled in {f.processing_days_left} days. "
                "Prepare for distribution."
            ),
            action="Finalize beneficiary list and prepare payment materials",
        ),
    ),
    SuggestionRule(
        name="payout_low_payment_rate",
        predicate=lambda f: f.phase == Phase.PAYOUT and f.payment_rate < 50,
        build=lambda f: Suggestion(
            type=SuggestionType.URGENT.value,
            title="Payout Phase - Low Payment Rate",
            message=(
                f"Only {f.payment_rate}% of beneficiaries have been paid. "
                f"{f.pending_count} payments pending."
            ),
            action="Accelerate payment processing and follow up on pending payments",
        ),
    ),
    # ── Health score ──────────────────────────────────────────────────────────
    SuggestionRule(
        name="critical_health",
        predicate=lambda f: f.health_score < 30,
        build=lambda f: Suggestion(
            type=SuggestionType.URGENT.value,
            title="Critical Program Health",
            message=(
                f"Program health score is {_score(f.health_score)}/100. "
                "Multiple areas need immediate attention."
            ),
            action="Review all program metrics and implement comprehensive improvements",
        ),
    ),
    SuggestionRule(
        name="health_concerns",
        predicate=lambda f: 30 <= f.health_score < 60,
        build=lambda f: Suggestion(
            type=SuggestionType.WARNING.value,
            title="Program Health Concerns",
            message=(
                f"Program health score is {_score(f.health_score)}/100. "
                "Some areas need improvement."
            ),
            action="Focus on identified weak areas and optimize processes",
        ),
    ),
    # ── Enrollment ────────────────────────────────────────────────────────────
    SuggestionRule(
        name="low_enrollment",
        predicate=lambda f: f.completion_percentage < 30 and f.time_progress > 50,
        build=lambda f: Suggestion(
            type=SuggestionType.WARNING.value,
            title="Low Enrollment Rate",
            message=(
                "Program is more than halfway through but has less than 30% "
                "enrollment. Consider increasing outreach efforts."
            ),
            action="Increase marketing and community outreach",
        ),
    ),
    SuggestionRule(
        name="excellent_enrollment",
        predicate=lambda f: f.completion_percentage > 90,
        build=lambda f: Suggestion(
            type=SuggestionType.SUCCESS.value,
            title="Excellent Enrollment",
            message="Program has reached over 90% of its target beneficiaries.",
            action="Consider expanding program capacity or creating similar programs",
        ),
    ),
    # ── Payment ───────────────────────────────────────────────────────────────
    SuggestionRule(
        name="low_payment_rate",
        predicate=lambda f: f.payment_rate < 50 and f.pending_count > 0,
        build=lambda f: Suggestion(
            type=SuggestionType.WARNING.value,
            title="Low Payment Rate",
            message=(
                f"Only {f.payment_rate}% of approved beneficiaries have been paid. "
                f"{f.pending_count} payments pending."
            ),
            action="Accelerate payment processing and follow up on pending payments",
        ),
    ),
    # ── Time ──────────────────────────────────────────────────────────────────
    SuggestionRule(
        name="ending_soon",
        predicate=lambda f: f.total_days_left < 30 and f.completion_percentage < 80,
        build=lambda f: Suggestion(
            type=SuggestionType.URGENT.value,
            title="Program Ending Soon",
            message=(
                f"Only {f.total_days_left} days left with "
                f"{100 - f.completion_percentage}% capacity remaining."
            ),
            action="Accelerate beneficiary processing and finalize remaining applications",
        ),
    ),
    # ── Efficiency ────────────────────────────────────────────────────────────
    SuggestionRule(
        name="low_efficiency",
        predicate=lambda f: f.efficiency_score < 50,
        build=lambda f: Suggestion(
            type=SuggestionType.INFO.value,
            title="Low Efficiency Score",
            message=(
                f"Efficiency score is {f.efficiency_score}/100. "
                f"Average processing time is {f.avg_processing_days} days."
            ),
            action="Streamline approval processes and reduce processing bottlenecks",
        ),
    ),
    # ── Status distribution ───────────────────────────────────────────────────
    SuggestionRule(
        name="high_pending",
        predicate=lambda f: f.pending_status_count > f.approved_count,
        build=lambda f: Suggestion(
            type=SuggestionType.INFO.value,
            title="High Pending Applications",
            message=f"{f.pending_status_count} applications are pending review.",
            action="Prioritize application review process and allocate more resources",
        ),
    ),
    SuggestionRule(
        name="processing_bottleneck",
        predicate=lambda f: (
            f.processing_count > 0 and f.processing_count > f.approved_count * 0.5
        ),
        build=lambda f: Suggestion(
            type=SuggestionType.INFO.value,
            title="Processing Bottleneck",
            message=f"{f.processing_count} applications are in processing stage.",
            action="Review processing workflow for efficiency improvements",
        ),
    ),
    # ── Rejection rate ────────────────────────────────────────────────────────
    SuggestionRule(
        name="high_rejection_rate",
        predicate=lambda f: f.rejection_rate is not None and f.rejection_rate > 30,
        build=lambda f: Suggestion(
            type=SuggestionType.WARNING.value,
            title="High Rejection Rate",
            message=f"{f.rejection_rate:.1f}% of applications are being rejected.",
            action="Review application criteria and improve communication with applicants",
        ),
    ),
    # ── Budget (only meaningful once amounts are recorded) ────────────────────
    SuggestionRule(
        name="budget_near_limit",
        predicate=lambda f: f.average_amount > 0 and f.budget_utilization > 90,
        build=lambda f: Suggestion(
            type=SuggestionType.WARNING.value,
            title="Budget Near Limit",
            message=f"{f.budget_utilization}% of estimated budget has been utilized.",
            action="Review budget allocation and consider additional funding",
        ),
    ),
    SuggestionRule(
        name="pending_payments",
        predicate=lambda f: f.average_amount > 0 and f.pending_amount > 0,
        build=lambda f: Suggestion(
            type=SuggestionType.INFO.value,
            title="Pending Payments",
            message=f"{_peso(f.pending_amount)} in approved benefits awaiting payment.",
            action="Process pending payments to complete beneficiary transactions",
        ),
    ),
    # ── Activity ──────────────────────────────────────────────────────────────
    SuggestionRule(
        name="no_recent_activity",
        predicate=lambda f: (
            f.recent_count == 0 and f.total_days_elapsed > f.activity_window_days
        ),
        build=lambda f: Suggestion(
            type=SuggestionType.INFO.value,
            title="No Recent Activity",
            message=f"No new beneficiaries added in the last {f.activity_window_days} days.",
            action="Increase program visibility and outreach efforts",
        ),
    ),
)

PROGRAM_FALLBACK = Suggestion(
    type=SuggestionType.SUCCESS.value,
    title="Program Running Smoothly",
    message="All metrics are within normal ranges. Program is performing well.",
    action="Continue current operations and monitor for improvements",
)


def generate_program_suggestions(facts: ProgramFacts) -> list[Suggestion]:
    """Evaluate ``PROGRAM_RULES`` against one program's facts.  Never empty."""
    return evaluate_rules(PROGRAM_RULES, facts, PROGRAM_FALLBACK)


# ── Portfolio facts and rules ─────────────────────────────────────────────────

@dataclass(frozen=True)
class ProgramHealth:
    """Per-program row of the portfolio overview.

    Attributes:
        program_id:        Program primary key.
        program_name:      Display name.
        health_score:      Phase-weighted health score (0-100).
        completion_rate:   Unrounded enrollment vs. capacity (%).
        payment_rate:      Unrounded paid share (%).
        beneficiary_count: Number of beneficiaries.
        max_beneficiaries: Capacity (0 when unset).
        effective_status:  Status after the all-paid override.
        phase:             Current lifecycle phase.
    """

    program_id:        object
    program_name:      str
    health_score:      float
    completion_rate:   float
    payment_rate:      float
    beneficiary_count: int
    max_beneficiaries: int
    effective_status:  str
    phase:             str


@dataclass(frozen=True)
class PortfolioFacts:
    """Inputs for the portfolio rule table."""

    programs:                tuple[ProgramHealth, ...]
    recently_created_count:  int
    window_days:             int = 7

    def names_where(self, predicate: Callable[[ProgramHealth], bool]) -> tuple[str, ...]:
        return tuple(p.program_name for p in self.programs if predicate(p))


def _plural(count: int, singular: str, plural: str) -> str:
    return f"{count} {singular if count == 1 else plural}"


def _portfolio_rule(
    name: str,
    matches: Callable[[ProgramHealth], bool],
    type_: SuggestionType,
    title: str,
    message: Callable[[int], str],
    action: str,
) -> SuggestionRule[PortfolioFacts]:
    """Build a rule that fires when at least one program satisfies ``matches``."""

    def build(facts: PortfolioFacts) -> Suggestion:
        names = facts.names_where(matches)
        return Suggestion(
            type=type_.value,
            title=title,
            message=message(len(names)),
            action=action,
            affected_programs=names,
        )

    return SuggestionRule(
        name=name,
        predicate=lambda facts: bool(facts.names_where(matches)),
        build=build,
    )


PORTFOLIO_RULES: tuple[SuggestionRule[PortfolioFacts], ...] = (
    _portfolio_rule(
        name="low_health_programs",
        matches=lambda p: p.health_score < 50,
        type_=SuggestionType.WARNING,
        title="Programs Need Attention",
        message=lambda n: (
            f"{_plural(n, 'program has a health score', 'programs have health scores')}"
            " below 50%."
        ),
        action="Review program performance and implement improvements",
    ),
    _portfolio_rule(
        name="low_enrollment_programs",
        matches=lambda p: p.completion_rate < 30,
        type_=SuggestionType.INFO,
        title="Low Enrollment Programs",
        message=lambda n: (
            f"{_plural(n, 'program has', 'programs have')} less than 30% enrollment."
        ),
        action="Increase outreach efforts and marketing",
    ),
    _portfolio_rule(
        name="low_payment_programs",
        matches=lambda p: p.payment_rate < 50 and p.beneficiary_count > 0,
        type_=SuggestionType.URGENT,
        title="Payment Processing Issues",
        message=lambda n: f"{_plural(n, 'program has', 'programs have')} low payment rates.",
        action="Accelerate payment processing and follow up on pending payments",
    ),
    _portfolio_rule(
        name="draft_programs",
        matches=lambda p: p.effective_status == EffectiveStatus.DRAFT,
        type_=SuggestionType.INFO,
        title="Draft Programs",
        message=lambda n: (
            f"{_plural(n, 'program is', 'programs are')} still in draft status."
        ),
        action="Review and publish ready programs to increase activity",
    ),
    _portfolio_rule(
        name="high_performing_programs",
        matches=lambda p: p.health_score >= 80,
        type_=SuggestionType.SUCCESS,
        title="High Performing Programs",
        message=lambda n: (
            f"{_plural(n, 'program is', 'programs are')} performing excellently."
        ),
        action="Use these programs as templates for new initiatives",
    ),
    SuggestionRule(
        name="no_recent_programs",
        predicate=lambda f: f.recently_created_count == 0 and len(f.programs) > 0,
        build=lambda f: Suggestion(
            type=SuggestionType.INFO.value,
            title="No Recent Activity",
            message=f"No new programs created in the last {f.window_days} days.",
            action="Consider creating new programs or updating existing ones",
        ),
    ),
)

PORTFOLIO_FALLBACK = Suggestion(
    type=SuggestionType.SUCCESS.value,
    title="All Systems Running Smoothly",
    message="All programs are performing well within normal parameters.",
    action="Continue current operations and monitor for improvements",
)


def generate_portfolio_suggestions(facts: PortfolioFacts) -> list[Suggestion]:
    """Evaluate ``PORTFOLIO_RULES`` across all programs.  Never empty."""
    return evaluate_rules(PORTFOLIO_RULES, facts, PORTFOLIO_FALLBACK)
