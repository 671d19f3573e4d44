"""
Pydantic models for baselines and the baseline submission workflow.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


def normalize_activity_key(activity_name: str) -> str:
    """Identity form of an activity name: trimmed and lower-cased."""
    return activity_name.strip().lower()


class Baseline(BaseModel):
    """Reference emission value for an activity and year."""

    model_config = ConfigDict(from_attributes=True)

    activity_name: str = Field(..., examples=["Generator Fuel Consumption"])
    year: int = Field(..., examples=[2022])
    value: Decimal = Field(..., description="Baseline value in kgCO2e", examples=[Decimal("500")])

    @property
    def key(self) -> tuple[str, int]:
        return normalize_activity_key(self.activity_name), int(self.year)


class BaselinePydModel(Baseline):
    """Stored baseline response model."""

    id: UUID
    created_at: datetime
    updated_at: datetime


class BaselineForm(BaseModel):
    """Operator input as typed, before validation."""

    activity_name: str = ""
    year: Optional[int] = None
    value: Union[str, int, float, Decimal, None] = ""


class BaselineSubmitRequest(BaselineForm):
    """Request body for submitting a baseline."""

    overwrite: bool = Field(
        False,
        description="Confirm overwriting an existing baseline for the same activity and year",
    )


class SubmissionState(str, Enum):
    """States of a single baseline submission."""

    IDLE = "idle"
    VALIDATING = "validating"
    INSERTING = "inserting"
    CONFLICT_PENDING = "conflict_pending"
    SAVED = "saved"
    CANCELLED = "cancelled"


class SubmissionOutcome(BaseModel):
    """Where a submission ended up and what the operator should see."""

    state: SubmissionState
    message: Optional[str] = None
    existing: Optional[Baseline] = Field(None, description="Stored baseline on conflict")
    proposed: Optional[Baseline] = Field(None, description="Baseline the operator submitted")
    saved: Optional[Baseline] = Field(None, description="Baseline written to the store")
