"""
Shared pytest fixtures for the Program Insights test suite.

Provides:
  - ``now``: the fixed reference instant most tests evaluate against
    (2024-01-15 00:00 UTC, mid-way through the default gathering window).
  - ``make_program`` / ``make_beneficiary`` / ``make_beneficiaries``:
    factories that build validated records from keyword overrides.
  - ``snapshot_file``: a small JSON snapshot on disk for ingestion and CLI tests.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable

import pytest

from program_insights.models.records import Beneficiary, Program

NOW = datetime(2024, 1, 15, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


# ── Record factories ──────────────────────────────────────────────────────────

@pytest.fixture
def make_program() -> Callable[..., Program]:
    """Factory for a ``Program``; defaults to a 2024-01 gathering window.

    Dates: start 2024-01-01, end 2024-01-31, payout 2024-02-15; capacity 100.
    """

    def _make(**overrides: Any) -> Program:
        data: dict[str, Any] = {
            "id": 1,
            "name": "Rice Subsidy",
            "assistance_type": "Financial",
            "beneficiary_type": "Senior Citizen",
            "start_date": "2024-01-01",
            "end_date": "2024-01-31",
            "payout_date": "2024-02-15",
            "max_beneficiaries": 100,
            "amount": 1000,
            "stored_status": "ongoing",
            "created_at": "2023-12-20T09:00:00Z",
            "updated_at": "2024-01-10T09:00:00Z",
        }
        data.update(overrides)
        return Program.model_validate(data)

    return _make


@pytest.fixture
def make_beneficiary() -> Callable[..., Beneficiary]:
    """Factory for a pending, unpaid ``Beneficiary`` of program 1 created yesterday."""

    def _make(**overrides: Any) -> Beneficiary:
        data: dict[str, Any] = {
            "id": 1,
            "program_id": 1,
            "status": "Pending",
            "is_paid": False,
            "amount": 0,
            "created_at": NOW - timedelta(days=1),
            "updated_at": NOW - timedelta(days=1),
        }
        data.update(overrides)
        return Beneficiary.model_validate(data)

    return _make


@pytest.fixture
def make_beneficiaries(make_beneficiary) -> Callable[..., list[Beneficiary]]:
    """Factory for ``count`` identical beneficiaries with sequential ids."""

    def _make(count: int, **overrides: Any) -> list[Beneficiary]:
        return [make_beneficiary(id=i + 1, **overrides) for i in range(count)]

    return _make


# ── Snapshot on disk ──────────────────────────────────────────────────────────

SNAPSHOT_DATA: dict[str, Any] = {
    "exported_at": "2024-01-15T00:00:00Z",
    "programs": [
        {
            "id": 1,
            "name": "Rice Subsidy",
            "assistanceType": "Financial",
            "beneficiaryType": "Senior Citizen",
            "startDate": "2024-01-01",
            "endDate": "2024-01-31",
            "payoutDate": "2024-02-15",
            "maxBeneficiaries": 4,
            "amount": "1,000",
            "status": "ongoing",
            "createdAt": "2023-12-20T09:00:00Z",
        },
        {
            "id": "2",
            "name": "School Supplies",
            "assistanceType": "Educational",
            "beneficiaryType": "Student",
            "startDate": "2023-11-01",
            "endDate": "2023-11-30",
            "payoutDate": "2023-12-15",
            "maxBeneficiaries": 2,
            "amount": 500,
            "status": "ongoing",
            "createdAt": "2023-10-20T09:00:00Z",
        },
        {
            "id": 3,
            "name": "Livelihood Draft",
            "assistanceType": "",
            "beneficiaryType": "",
            "startDate": None,
            "endDate": "null",
            "payoutDate": "",
            "maxBeneficiaries": 0,
            "amount": "N/A",
            "status": "draft",
        },
    ],
    "beneficiaries": [
        {"id": 10, "programId": 1, "status": "Approved", "isPaid": False, "amount": 1000,
         "createdAt": "2024-01-02T00:00:00Z", "updatedAt": "2024-01-04T00:00:00Z"},
        {"id": 11, "programId": "1", "status": "Pending", "isPaid": False, "amount": 1000,
         "createdAt": "2024-01-12T00:00:00Z", "updatedAt": "2024-01-12T00:00:00Z"},
        {"id": 12, "programId": 1, "status": "Disbursed", "isPaid": False, "amount": 1000,
         "createdAt": "2024-01-03T00:00:00Z", "updatedAt": "2024-01-10T00:00:00Z"},
        {"id": 20, "programId": 2, "status": "completed", "isPaid": True, "amount": 500,
         "createdAt": "2023-11-05T00:00:00Z", "updatedAt": "2023-12-15T00:00:00Z"},
        {"id": 21, "programId": 2, "status": "Approved", "isPaid": "true", "amount": 500,
         "createdAt": "2023-11-06T00:00:00Z", "updatedAt": "2023-12-15T00:00:00Z"},
    ],
}


@pytest.fixture
def snapshot_file(tmp_path: Path) -> Path:
    """Write ``SNAPSHOT_DATA`` to a temp file and return its path."""
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(SNAPSHOT_DATA), encoding="utf-8")
    return path
