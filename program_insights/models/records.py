"""
Input records: ``Program`` and ``Beneficiary``.

Both arrive from the admin API as loosely-typed JSON: keys come in either
``snake_case`` or ``camelCase``, numbers may be strings or ``null``, dates
may be ``""`` or ``"null"``.  All of that is normalized **here, once**, by
``mode="before"`` validators, so the analytics formulas only ever see:

  - aware UTC ``datetime`` or ``None`` for every timestamp,
  - a finite ``float`` for ``amount`` (invalid -> 0.0),
  - a positive ``int`` or ``None`` for ``max_beneficiaries`` (fractions
    round half-up; anything below 1 after rounding means no cap),
  - a canonical status spelling.

Both models are frozen; the engine must never mutate its input snapshot.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from program_insights.taxonomy.status import BeneficiaryStatus, ProgramStatus
from program_insights.utils.numeric import round_half_up, to_number
from program_insights.utils.time_utils import parse_timestamp

RecordId = Union[int, str]

_CANONICAL_BENEFICIARY_STATUS: dict[str, str] = {
    s.value.lower(): s.value for s in BeneficiaryStatus
}

UNKNOWN_STATUS = "Unknown"


def _alias(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class Program(BaseModel):
    """An aid program as stored by the admin module.

    Attributes:
        id: Program primary key.
        name: Display name.
        assistance_type: e.g. ``"Financial"``, ``"Educational"``; may be empty.
        beneficiary_type: e.g. ``"Senior Citizen"``, ``"PWD"``; may be empty.
        start_date: First day of the gathering window, or ``None``.
        end_date: Last day of the gathering window, or ``None``.
        payout_date: Scheduled disbursement date, or ``None``.
        max_beneficiaries: Enrollment capacity; ``None`` when unset/invalid.
        amount: Nominal per-beneficiary amount (0.0 when invalid).
        stored_status: Lower-cased status saved on the record.
        created_at: Record creation timestamp.
        updated_at: Last modification timestamp.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: RecordId
    name: str = ""
    assistance_type: str = Field(
        "", validation_alias=_alias("assistance_type", "assistanceType")
    )
    beneficiary_type: str = Field(
        "", validation_alias=_alias("beneficiary_type", "beneficiaryType")
    )
    start_date: Optional[datetime] = Field(
        None, validation_alias=_alias("start_date", "startDate")
    )
    end_date: Optional[datetime] = Field(
        None, validation_alias=_alias("end_date", "endDate")
    )
    payout_date: Optional[datetime] = Field(
        None, validation_alias=_alias("payout_date", "payoutDate")
    )
    max_beneficiaries: Optional[int] = Field(
        None, validation_alias=_alias("max_beneficiaries", "maxBeneficiaries")
    )
    amount: float = 0.0
    stored_status: str = Field(
        ProgramStatus.DRAFT.value,
        validation_alias=_alias("stored_status", "storedStatus", "status"),
    )
    created_at: Optional[datetime] = Field(
        None, validation_alias=_alias("created_at", "createdAt")
    )
    updated_at: Optional[datetime] = Field(
        None, validation_alias=_alias("updated_at", "updatedAt")
    )

    @field_validator("name", "assistance_type", "beneficiary_type", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return "" if v is None else str(v).strip()

    @field_validator(
        "start_date", "end_date", "payout_date", "created_at", "updated_at",
        mode="before",
    )
    @classmethod
    def coerce_timestamp(cls, v: Any) -> Optional[datetime]:
        return parse_timestamp(v)

    @field_validator("max_beneficiaries", mode="before")
    @classmethod
    def coerce_capacity(cls, v: Any) -> Optional[int]:
        capacity = round_half_up(to_number(v))
        if capacity < 1:
            return None
        return capacity

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> float:
        return to_number(v)

    @field_validator("stored_status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> str:
        text = "" if v is None else str(v).strip().lower()
        return text or ProgramStatus.DRAFT.value

    @property
    def category(self) -> str:
        """Ranking category: assistance type, else beneficiary type, else ``"General"``."""
        return self.assistance_type or self.beneficiary_type or "General"


class Beneficiary(BaseModel):
    """One beneficiary enrolled in a program.

    Attributes:
        id: Beneficiary primary key.
        program_id: FK to ``Program.id``.
        status: Canonical ``BeneficiaryStatus`` value when recognized,
            ``"Unknown"`` when blank, otherwise the raw string.
        is_paid: Explicit payment flag from the disbursement screen.
        amount: Benefit amount (0.0 when invalid).
        created_at: When the application was filed.
        updated_at: Last status change.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: Optional[RecordId] = None
    program_id: RecordId = Field(validation_alias=_alias("program_id", "programId"))
    status: str = UNKNOWN_STATUS
    is_paid: bool = Field(False, validation_alias=_alias("is_paid", "isPaid"))
    amount: float = 0.0
    created_at: Optional[datetime] = Field(
        None, validation_alias=_alias("created_at", "createdAt")
    )
    updated_at: Optional[datetime] = Field(
        None, validation_alias=_alias("updated_at", "updatedAt")
    )

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> str:
        text = "" if v is None else str(v).strip()
        if not text:
            return UNKNOWN_STATUS
        return _CANONICAL_BENEFICIARY_STATUS.get(text.lower(), text)

    @field_validator("is_paid", mode="before")
    @classmethod
    def coerce_paid(cls, v: Any) -> bool:
        if isinstance(v, str):
            return v.strip().lower() in ("1", "true", "yes", "t", "y")
        return bool(v)

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> float:
        return to_number(v)

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def coerce_timestamp(cls, v: Any) -> Optional[datetime]:
        return parse_timestamp(v)
