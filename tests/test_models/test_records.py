"""
Tests for program_insights/models/records.py.

What we test
------------
Program:
  - snake_case and camelCase keys both accepted.
  - Dates: ISO strings, "Z" suffix, date-only, placeholders -> None.
  - max_beneficiaries: <= 0 / invalid -> None; numeric strings accepted;
    fractions round half-up.
  - amount: "1,000" -> 1000.0; "N/A", NaN, None -> 0.0.
  - stored_status lower-cased, defaults to "draft"; "status" alias.
  - category fallback chain.
  - Frozen: attribute assignment raises.

Beneficiary:
  - Status canonicalized case-insensitively; blank -> "Unknown";
    unrecognized values kept as-is.
  - is_paid parsed from strings.
  - program_id required.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from program_insights.models.records import Beneficiary, Program


class TestProgram:
    def test_camel_case_keys(self) -> None:
        p = Program.model_validate({
            "id": 5,
            "assistanceType": "Medical",
            "beneficiaryType": "PWD",
            "startDate": "2024-01-01T08:00:00Z",
            "maxBeneficiaries": "25",
            "storedStatus": "Ongoing",
        })
        assert p.assistance_type == "Medical"
        assert p.beneficiary_type == "PWD"
        assert p.start_date == datetime(2024, 1, 1, 8, tzinfo=timezone.utc)
        assert p.max_beneficiaries == 25
        assert p.stored_status == "ongoing"

    def test_status_alias(self) -> None:
        assert Program.model_validate({"id": 1, "status": "COMPLETE"}).stored_status == "complete"

    @pytest.mark.parametrize("status", [None, "", "   "])
    def test_blank_status_is_draft(self, status) -> None:
        assert Program.model_validate({"id": 1, "stored_status": status}).stored_status == "draft"

    @pytest.mark.parametrize("raw", ["", "null", "undefined", "N/A", "not a date", 12345])
    def test_invalid_dates_become_none(self, raw) -> None:
        assert Program.model_validate({"id": 1, "end_date": raw}).end_date is None

    def test_date_only_is_midnight_utc(self) -> None:
        p = Program.model_validate({"id": 1, "payout_date": "2024-02-15"})
        assert p.payout_date == datetime(2024, 2, 15, tzinfo=timezone.utc)

    def test_offset_converted_to_utc(self) -> None:
        p = Program.model_validate({"id": 1, "start_date": "2024-01-01T08:00:00+08:00"})
        assert p.start_date == datetime(2024, 1, 1, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("raw", [0, -3, None, "", "abc", float("nan")])
    def test_invalid_capacity_is_none(self, raw) -> None:
        assert Program.model_validate({"id": 1, "max_beneficiaries": raw}).max_beneficiaries is None

    @pytest.mark.parametrize("raw,expected", [
        ("150.7", 151), (150.4, 150), ("0.5", 1), (2.5, 3), ("1,200", 1200),
    ])
    def test_fractional_capacity_rounds_half_up(self, raw, expected) -> None:
        assert Program.model_validate({"id": 1, "max_beneficiaries": raw}).max_beneficiaries == expected

    @pytest.mark.parametrize("raw", [0.4, "0.49"])
    def test_capacity_rounding_to_zero_is_none(self, raw) -> None:
        assert Program.model_validate({"id": 1, "max_beneficiaries": raw}).max_beneficiaries is None

    @pytest.mark.parametrize("raw,expected", [
        ("1,000", 1000.0), ("250.5", 250.5), (300, 300.0),
        ("N/A", 0.0), (None, 0.0), (float("nan"), 0.0), (float("inf"), 0.0), (True, 0.0),
    ])
    def test_amount_coercion(self, raw, expected) -> None:
        assert Program.model_validate({"id": 1, "amount": raw}).amount == expected

    @pytest.mark.parametrize("assistance,beneficiary,expected", [
        ("Financial", "Senior", "Financial"),
        ("", "Senior", "Senior"),
        (None, None, "General"),
    ])
    def test_category(self, assistance, beneficiary, expected) -> None:
        p = Program.model_validate(
            {"id": 1, "assistance_type": assistance, "beneficiary_type": beneficiary}
        )
        assert p.category == expected

    def test_frozen(self) -> None:
        p = Program.model_validate({"id": 1})
        with pytest.raises(ValidationError):
            p.name = "changed"

    def test_id_required(self) -> None:
        with pytest.raises(ValidationError):
            Program.model_validate({"name": "No id"})


class TestBeneficiary:
    @pytest.mark.parametrize("raw,expected", [
        ("approved", "Approved"),
        ("DISBURSED", "Disbursed"),
        (" Pending ", "Pending"),
        ("", "Unknown"),
        (None, "Unknown"),
        ("On Hold", "On Hold"),
    ])
    def test_status_normalization(self, raw, expected) -> None:
        b = Beneficiary.model_validate({"program_id": 1, "status": raw})
        assert b.status == expected

    @pytest.mark.parametrize("raw,expected", [
        ("true", True), ("Yes", True), ("1", True), ("false", False), ("0", False),
        ("", False), (1, True), (0, False), (None, False),
    ])
    def test_is_paid_parsing(self, raw, expected) -> None:
        b = Beneficiary.model_validate({"programId": 1, "isPaid": raw})
        assert b.is_paid is expected

    def test_program_id_required(self) -> None:
        with pytest.raises(ValidationError):
            Beneficiary.model_validate({"status": "Pending"})

    def test_string_program_id_kept(self) -> None:
        assert Beneficiary.model_validate({"program_id": "12"}).program_id == "12"

    def test_timestamps(self) -> None:
        b = Beneficiary.model_validate({
            "program_id": 1,
            "createdAt": "2024-01-02 10:30:00",
            "updatedAt": "undefined",
        })
        assert b.created_at == datetime(2024, 1, 2, 10, 30, tzinfo=timezone.utc)
        assert b.updated_at is None
