"""
ASCII terminal formatters for CLI reporting commands.

All formatters accept the dicts produced by ``program_insights.reporting.export``
(``program_report_to_dict()`` and friends) and return plain multi-line strings
suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).

Suggestion tags
---------------
Suggestions are prefixed with a fixed-width tag so the most pressing ones
stand out when scanning a long report::

  [URGENT]  Low Payment Rate
  [WARNING] Health Score Concerns
  [INFO]    Budget Utilization Alert
  [OK]      Program Running Smoothly
"""

from __future__ import annotations

from program_insights.taxonomy.status import BADGE_LABELS

_SUGGESTION_TAGS = {
    "urgent":  "[URGENT] ",
    "warning": "[WARNING]",
    "info":    "[INFO]   ",
    "success": "[OK]     ",
}


def _peso(amount) -> str:
    if not isinstance(amount, (int, float)):
        return str(amount)
    return f"PHP {amount:,.2f}"


def _date(value) -> str:
    # ISO strings from the serializers; keep only the date part.
    return str(value)[:10] if value else "-"


def _bar(percent, width: int = 20) -> str:
    pct = max(0.0, min(float(percent or 0), 100.0))
    filled = int(pct / 100 * width)
    return "[" + "#" * filled + "." * (width - filled) + "]"


# ── Suggestions ───────────────────────────────────────────────────────────────


def format_suggestions(suggestions: list[dict], title: str = "Suggestions") -> str:
    """Format a suggestion list, one tagged block per suggestion.

    Args:
        suggestions: Serialized ``Suggestion`` dicts (ordered by priority).
        title:       Section heading.

    Returns:
        Multi-line string.
    """
    lines: list[str] = ["", f"  --- {title} ---"]
    if not suggestions:
        lines.append("  (none)")
        return "\n".join(lines)

    for s in suggestions:
        tag = _SUGGESTION_TAGS.get(s.get("type", ""), "[?]      ")
        lines.append(f"  {tag} {s.get('title', '')}")
        lines.append(f"            {s.get('message', '')}")
        lines.append(f"            -> {s.get('action', '')}")
        affected = s.get("affected_programs") or []
        if affected:
            lines.append(f"            Programs: {', '.join(affected)}")
    return "\n".join(lines)


# ── Program report ────────────────────────────────────────────────────────────


def format_program_report(report: dict) -> str:
    """Format a single-program analytics report.

    Sections: header, enrollment and payments, timeline windows, health
    breakdown, efficiency, suggestions.

    Args:
        report: Output of ``program_report_to_dict()``.

    Returns:
        Multi-line string.
    """
    program  = report.get("program", {})
    metrics  = report.get("metrics", {})
    timeline = report.get("timeline", {})
    health   = report.get("health", {})
    explain  = report.get("health_explanation", {})

    lines: list[str] = []
    lines.append("")
    lines.append(f"=== Program Report: {program.get('name', '')} ===")
    lines.append(f"  ID:         {program.get('id', '')}")
    lines.append(f"  Category:   {program.get('category', '')}")
    lines.append(f"  Status:     {report.get('effective_status', '')}")
    lines.append(f"  Phase:      {timeline.get('phase', '')}")
    lines.append(f"  As of:      {report.get('generated_for', '')}")

    max_b = program.get("max_beneficiaries")
    lines.append("")
    lines.append("  --- Enrollment & Payments ---")
    lines.append(
        f"  Beneficiaries:  {metrics.get('total', 0)}"
        + (f" / {max_b}" if max_b else " (no cap)")
    )
    lines.append(
        f"  Completion:     {_bar(metrics.get('completion_percentage'))} "
        f"{metrics.get('completion_percentage', 0)}%"
    )
    lines.append(
        f"  Paid:           {_bar(metrics.get('payment_rate'))} "
        f"{metrics.get('payment_rate', 0)}%  "
        f"({metrics.get('paid_count', 0)} paid, {metrics.get('pending_count', 0)} pending)"
    )
    lines.append(f"  Total amount:   {_peso(metrics.get('total_amount', 0))}")
    lines.append(f"  Paid amount:    {_peso(metrics.get('paid_amount', 0))}")
    lines.append(f"  Pending amount: {_peso(metrics.get('pending_amount', 0))}")
    lines.append(f"  Average amount: {_peso(metrics.get('average_amount', 0))}")

    counts = metrics.get("status_counts", {})
    if counts:
        lines.append("  By status:      " + ", ".join(f"{k}={v}" for k, v in counts.items()))

    lines.append("")
    lines.append("  --- Timeline ---")
    lines.append(
        f"  Start {_date(program.get('start_date'))}  |  End {_date(program.get('end_date'))}"
        f"  |  Payout {_date(program.get('payout_date'))}"
    )
    header = f"    {'Window':<12}  {'Status':<10}  {'Progress':>8}  {'Elapsed':>7}  {'Left':>5}  {'Total':>5}"
    lines.append(header)
    lines.append("    " + "-" * (len(header) - 4))
    for name in ("gathering", "processing", "payout"):
        w = timeline.get(name, {})
        lines.append(
            f"    {name:<12}  {w.get('status', ''):<10}  {str(w.get('progress', 0)) + '%':>8}  "
            f"{w.get('days_elapsed', 0):>7}  {w.get('days_left', 0):>5}  {w.get('days_total', 0):>5}"
        )
    lines.append(
        f"  Overall: {timeline.get('time_progress', 0)}% of "
        f"{timeline.get('total_duration_days', 0)} days used, "
        f"{timeline.get('total_days_left', 0)} left"
    )

    lines.append("")
    lines.append("  --- Health ---")
    lines.append(
        f"  Score: {health.get('final', 0):.1f}/100  "
        f"[{explain.get('headline', '')}]"
    )
    lines.append(f"  {explain.get('message', '')}")
    for name, sub in health.get("scores", {}).items():
        lines.append(
            f"    {name:<11} {sub.get('points', 0):>6.2f} / {sub.get('max', 0):<3}"
            f"  (rate {sub.get('rate', 0):.1f}%)"
        )

    lines.append("")
    lines.append("  --- Efficiency ---")
    lines.append(f"  Score:               {report.get('efficiency_score', 0)}/100")
    lines.append(f"  Avg processing days: {report.get('avg_processing_days', 0)}")
    lines.append(f"  Recent enrollments:  {report.get('recent_count', 0)}")
    lines.append(f"  Budget utilization:  {report.get('budget_utilization', 0)}%")

    lines.append(format_suggestions(report.get("suggestions", [])))
    return "\n".join(lines)


# ── Leaderboard ───────────────────────────────────────────────────────────────


def format_leaderboard(ranking: dict, top_n: int | None = None) -> str:
    """Format the ranked program leaderboard as an ASCII table.

    Columns: rank, name, category, beneficiaries, overall score, the five
    component scores and badges::

        Rank  Program                    Count  Overall  Benef  Compl   Pay  Impact  Growth  Badges
        ------------------------------------------------------------------------------------------
           1  Rice Subsidy                 120    87.40  100.0   96.0  92.5    71.0    55.0  Top Rated, ...

    Args:
        ranking: Output of ``ranking_to_dict()``.
        top_n:   Show only the first N entries (None = all).

    Returns:
        Multi-line string.
    """
    entries = ranking.get("programs", [])
    if top_n is not None:
        entries = entries[:max(top_n, 0)]

    lines: list[str] = []
    lines.append("")
    lines.append("=== Program Leaderboard ===")
    lines.append(f"  Category: {ranking.get('category', 'all')}")
    lines.append(f"  As of:    {ranking.get('generated_for', '')}")

    if not entries:
        lines.append("")
        lines.append("  (no programs match this filter)")
        return "\n".join(lines)

    lines.append("")
    header = (
        f"  {'Rank':>4}  {'Program':<26}  {'Count':>5}  {'Overall':>7}  "
        f"{'Benef':>6}  {'Compl':>6}  {'Pay':>6}  {'Impact':>6}  {'Growth':>6}  Badges"
    )
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))
    for entry in entries:
        m = entry.get("metrics", {})
        name = str(entry.get("program", {}).get("name", ""))[:26]
        badges = ", ".join(BADGE_LABELS.get(b, b) for b in entry.get("badges", []))
        lines.append(
            f"  {entry.get('rank', ''):>4}  {name:<26}  {entry.get('count', 0):>5}  "
            f"{entry.get('overall_score', 0):>7.2f}  "
            f"{m.get('beneficiary_score', 0):>6.1f}  {m.get('completion_score', 0):>6.1f}  "
            f"{m.get('payment_score', 0):>6.1f}  {m.get('impact_score', 0):>6.1f}  "
            f"{m.get('growth_score', 0):>6.1f}  {badges}"
        )
    return "\n".join(lines)


# ── Portfolio ─────────────────────────────────────────────────────────────────


def format_portfolio_summary(summary: dict) -> str:
    """Format the portfolio overview.

    Args:
        summary: Output of ``portfolio_summary_to_dict()``.

    Returns:
        Multi-line string.
    """
    explain = summary.get("health_explanation", {})
    lines: list[str] = []
    lines.append("")
    lines.append("=== Portfolio Overview ===")
    lines.append(f"  As of:          {summary.get('generated_for', '')}")
    lines.append(f"  Programs:       {summary.get('total_programs', 0)}")
    counts = summary.get("status_counts", {})
    lines.append("  By status:      " + ", ".join(f"{k}={v}" for k, v in counts.items()))
    lines.append(
        f"  Date range:     {_date(summary.get('earliest_start'))} -> "
        f"{_date(summary.get('latest_end'))}"
    )
    lines.append(f"  Beneficiaries:  {summary.get('total_beneficiaries', 0)}")
    lines.append(
        f"  Paid:           {summary.get('paid_count', 0)} "
        f"({summary.get('payment_rate', 0)}%), pending {summary.get('pending_count', 0)}"
    )
    lines.append(f"  Total amount:   {_peso(summary.get('total_amount', 0))}")
    lines.append(f"  Average amount: {_peso(summary.get('average_amount', 0))}")
    lines.append(
        f"  Avg health:     {summary.get('average_health_score', 0)}/100  "
        f"[{explain.get('headline', '')}]"
    )

    rows = summary.get("programs", [])
    if rows:
        lines.append("")
        header = (
            f"  {'Program':<26}  {'Status':<9}  {'Phase':<10}  {'Health':>6}  "
            f"{'Count':>5}  {'Compl%':>6}  {'Paid%':>6}"
        )
        lines.append(header)
        lines.append("  " + "-" * (len(header) - 2))
        for r in sorted(rows, key=lambda r: -r.get("health_score", 0)):
            lines.append(
                f"  {str(r.get('program_name', ''))[:26]:<26}  {r.get('effective_status', ''):<9}  "
                f"{r.get('phase', ''):<10}  {r.get('health_score', 0):>6.1f}  "
                f"{r.get('beneficiary_count', 0):>5}  {r.get('completion_rate', 0):>6.1f}  "
                f"{r.get('payment_rate', 0):>6.1f}"
            )

    lines.append(format_suggestions(summary.get("suggestions", []), title="Portfolio Suggestions"))
    return "\n".join(lines)
