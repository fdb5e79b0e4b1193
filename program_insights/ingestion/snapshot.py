"""
JSON snapshot loader for programs and beneficiaries.

A snapshot is one export from the admin API, shaped as::

    {
      "exported_at": "2024-01-15T08:00:00Z",        # optional
      "programs":      [ {...program record...}, ... ],
      "beneficiaries": [ {...beneficiary record...}, ... ]
    }

Records may use ``snake_case`` or ``camelCase`` keys (see
``program_insights.models.records``).  Values that are merely messy (empty
dates, ``"N/A"`` amounts) are normalized, not rejected.  Only structurally
broken records (a missing ``id`` / ``program_id``, a record that is not an
object) fail validation.

All records are validated before any are returned.  If **any** record fails,
a single :class:`ValueError` is raised listing the first 10 failures.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from program_insights.models.records import Beneficiary, Program
from program_insights.utils.time_utils import parse_timestamp

logger = logging.getLogger(__name__)

_MAX_REPORTED_ERRORS = 10

M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class Snapshot:
    """Validated, immutable input snapshot.

    Attributes:
        programs:      All program records.
        beneficiaries: All beneficiary records.
        exported_at:   Export timestamp from the file, if present.
        source:        Path the snapshot was read from ("" when built in memory).
    """

    programs:      tuple[Program, ...]
    beneficiaries: tuple[Beneficiary, ...]
    exported_at:   Optional[datetime] = None
    source:        str = ""

    def find_program(self, program_id: Any) -> Optional[Program]:
        """Look up a program by id (compared as strings)."""
        key = str(program_id)
        for program in self.programs:
            if str(program.id) == key:
                return program
        return None


def parse_snapshot(data: Any, source: str = "") -> Snapshot:
    """Validate an already-decoded snapshot document.

    Args:
        data:   Decoded JSON (must be an object).
        source: Label used in error messages.

    Returns:
        Snapshot.

    Raises:
        ValueError: If the document shape is wrong or any record fails.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Snapshot must be a JSON object, got {type(data).__name__}: {source}")

    raw_programs = data.get("programs", [])
    raw_beneficiaries = data.get("beneficiaries", [])
    for key, value in (("programs", raw_programs), ("beneficiaries", raw_beneficiaries)):
        if not isinstance(value, list):
            raise ValueError(f"Snapshot key '{key}' must be an array: {source}")

    errors: list[str] = []
    programs = _validate_all(Program, raw_programs, "program", errors)
    beneficiaries = _validate_all(Beneficiary, raw_beneficiaries, "beneficiary", errors)

    if errors:
        shown = errors[:_MAX_REPORTED_ERRORS]
        more = len(errors) - len(shown)
        detail = "\n".join(f"  {e}" for e in shown)
        if more > 0:
            detail += f"\n  ... and {more} more."
        raise ValueError(
            f"{len(errors)} record(s) failed validation in snapshot {source}:\n{detail}"
        )

    return Snapshot(
        programs=tuple(programs),
        beneficiaries=tuple(beneficiaries),
        exported_at=parse_timestamp(data.get("exported_at")),
        source=source,
    )


def load_snapshot(path: Path) -> Snapshot:
    """Read and validate a snapshot JSON file.

    Args:
        path: Path to the snapshot file (must exist).

    Returns:
        Snapshot.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the file is not valid JSON or any record fails validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Snapshot file not found: {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Snapshot is not valid JSON ({path}): {exc}") from exc

    snapshot = parse_snapshot(data, source=str(path))
    logger.info(
        "Loaded snapshot | %s | programs=%d | beneficiaries=%d",
        path, len(snapshot.programs), len(snapshot.beneficiaries),
    )
    return snapshot


def _validate_all(
    model: type[M],
    rows: list[Any],
    label: str,
    errors: list[str],
) -> list[M]:
    validated: list[M] = []
    for idx, row in enumerate(rows):
        if not isinstance(row, dict):
            errors.append(f"{label} #{idx}: expected an object, got {type(row).__name__}")
            continue
        try:
            validated.append(model.model_validate(row))
        except ValidationError as exc:
            first = exc.errors()[0]
            loc = ".".join(str(p) for p in first["loc"]) or "<record>"
            errors.append(f"{label} #{idx}: {loc}: {first['msg']}")
    logger.debug("Validated %d/%d %s record(s)", len(validated), len(rows), label)
    return validated
