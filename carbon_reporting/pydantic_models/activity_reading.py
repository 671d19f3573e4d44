"""
Pydantic models for activity readings.
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from carbon_reporting.utils.constants import MonthEnum


class ActivityReading(BaseModel):
    """One reported activity quantity for one period."""

    model_config = ConfigDict(frozen=True)

    activity: str = Field(..., description="Activity name", examples=["Electricity Consumption"])
    year: int = Field(..., description="Reporting year", examples=[2023])
    month: Optional[str] = Field(None, description="Abbreviated month name", examples=["Jan"])
    value: Decimal = Field(
        ...,
        allow_inf_nan=True,
        description="Raw quantity in the activity's native unit (NaN when unparseable)",
        examples=[Decimal("200")],
    )


class ReadingParseIssue(BaseModel):
    """A row rejected by strict normalization."""

    row_index: int = Field(..., description="Zero-based index of the rejected row")
    field: str = Field(..., description="Offending field", examples=["value"])
    message: str = Field(..., description="Why the row was rejected")


class NormalizationResult(BaseModel):
    """Typed readings plus the issues for rejected rows."""

    readings: list[ActivityReading] = Field(default_factory=list)
    issues: list[ReadingParseIssue] = Field(default_factory=list)

    @property
    def has_issues(self) -> bool:
        return bool(self.issues)


class ReadingFilter(BaseModel):
    """Filters accepted by the reading source."""

    year: Optional[int] = None
    month: Optional[MonthEnum] = None
    from_year: Optional[int] = None
    to_year: Optional[int] = None
    from_month: Optional[MonthEnum] = None
    to_month: Optional[MonthEnum] = None
    activity_name: Optional[str] = None


class ActivityReadingPydModel(BaseModel):
    """Stored reading response model."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    activity: str
    year: int
    month: Optional[str] = None
    value: Decimal
    source_file: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ReadingImportRequest(BaseModel):
    """Loosely typed rows to import."""

    rows: list[dict[str, Any]] = Field(
        ...,
        description="Rows with activity, year, month and value",
        examples=[[{"activity": "Electricity Consumption", "year": 2023, "month": "Jan", "value": "200"}]],
    )
    source_file: Optional[str] = Field(None, max_length=255, description="Originating file name")


class ReadingImportResponse(BaseModel):
    """Outcome of an import."""

    imported: int = Field(..., description="Number of readings stored")
    rejected: int = Field(..., description="Number of rows rejected")
    issues: list[ReadingParseIssue] = Field(default_factory=list)
