"""
Serializers and flat-file export helpers.

The ``*_to_dict()`` functions turn the frozen analytics results into plain
JSON-ready dicts (ISO-8601 timestamps, lists instead of tuples, input
records dumped through pydantic).  The CLI prints these for ``--json`` and
the ASCII formatters render from them, so both outputs always agree.

``export_to_csv()`` / ``export_to_json()`` write to disk and return the
written ``Path``.  CSV exports are flat (no nested dicts) so they open
directly in Excel or a spreadsheet import without pre-processing.

``flatten_ranking_for_export()`` is the main adapter function: it converts
each leaderboard entry into one row with every score component as its own
column.
"""

from __future__ import annotations

import csv
import dataclasses
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Sequence

from pydantic import BaseModel

from program_insights.analytics.portfolio import PortfolioSummary
from program_insights.analytics.ranking import RankedProgram
from program_insights.analytics.report import ProgramReport


def to_jsonable(value: Any) -> Any:
    """Recursively convert analytics objects into JSON-ready values."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: to_jsonable(getattr(value, f.name))
            for f in dataclasses.fields(value)
        }
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def program_report_to_dict(report: ProgramReport) -> dict:
    """Serialize a program report, adding the derived ``category`` field."""
    data = to_jsonable(report)
    data["program"]["category"] = report.program.category
    data["health"]["scores"] = to_jsonable(report.health.scores)
    return data


def ranked_program_to_dict(entry: RankedProgram, rank: int | None = None) -> dict:
    """Serialize one leaderboard entry (``rank`` is 1-based when given)."""
    data = to_jsonable(entry)
    data["program"]["category"] = entry.program.category
    if rank is not None:
        data = {"rank": rank, **data}
    return data


def ranking_to_dict(
    ranked: Sequence[RankedProgram],
    generated_for: datetime,
    category: str | None = None,
) -> dict:
    return {
        "generated_for": generated_for.isoformat(),
        "category":      category or "all",
        "programs":      [ranked_program_to_dict(r, i) for i, r in enumerate(ranked, start=1)],
    }


def portfolio_summary_to_dict(summary: PortfolioSummary) -> dict:
    return to_jsonable(summary)


def export_to_csv(
    records: list[dict],
    path: Path,
    fieldnames: list[str] | None = None,
) -> Path:
    """Write ``records`` to a UTF-8 CSV file.

    Args:
        records:    List of row dicts.
        path:       Destination file path (parent dirs created if missing).
        fieldnames: Column order.  If None, uses the keys of the first record.

    Returns:
        ``path`` as written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if not records:
        path.write_text("", encoding="utf-8")
        return path
    cols = fieldnames or list(records[0].keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=cols, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(records)
    return path


def export_to_json(
    data: dict | list,
    path: Path,
) -> Path:
    """Write ``data`` to a pretty-printed JSON file.

    Args:
        data: Dict or list to serialise.
        path: Destination file path (parent dirs created if missing).

    Returns:
        ``path`` as written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
    return path


RANKING_CSV_COLUMNS = [
    "rank", "program_id", "program_name", "category", "beneficiary_count",
    "overall_score", "beneficiary_score", "completion_score", "payment_score",
    "impact_score", "growth_score", "completion_rate", "payment_rate",
    "total_amount", "avg_amount", "growth_rate", "badges",
]


def flatten_ranking_for_export(ranked: Sequence[RankedProgram]) -> list[dict]:
    """Flatten a leaderboard into one CSV-ready row per program.

    Badges are joined with ``"|"`` so the column stays a single cell.

    Args:
        ranked: Output of ``rank_programs()`` (already sorted).

    Returns:
        List of flat row dicts keyed by ``RANKING_CSV_COLUMNS``.
    """
    rows: list[dict] = []
    for rank, entry in enumerate(ranked, start=1):
        m = entry.metrics
        rows.append(
            {
                "rank":              rank,
                "program_id":        entry.program.id,
                "program_name":      entry.program.name,
                "category":          entry.program.category,
                "beneficiary_count": entry.count,
                "overall_score":     entry.overall_score,
                "beneficiary_score": m.beneficiary_score,
                "completion_score":  m.completion_score,
                "payment_score":     m.payment_score,
                "impact_score":      m.impact_score,
                "growth_score":      m.growth_score,
                "completion_rate":   m.completion_rate,
                "payment_rate":      m.payment_rate,
                "total_amount":      m.total_amount,
                "avg_amount":        m.avg_amount,
                "growth_rate":       m.growth_rate,
                "badges":            "|".join(entry.badges),
            }
        )
    return rows
