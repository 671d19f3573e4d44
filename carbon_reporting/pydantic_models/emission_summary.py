"""
Pydantic models for aggregated emission rollups.

All CO2e values are in kgCO2e, the unit the emission factors are expressed in.
"""
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BaseModel, Field

from carbon_reporting.utils.constants import ScopeEnum


class AggregatedPeriod(BaseModel):
    """Scope totals for one period (a year, or a year and month)."""

    period_key: str = Field(..., description="Year, or year and month", examples=["2023-Jan"])
    year: int = Field(..., examples=[2023])
    month: Optional[str] = Field(None, description="Month for monthly periods", examples=["Jan"])
    scope1_total: Decimal = Field(..., allow_inf_nan=True, examples=[Decimal("376.1")])
    scope2_total: Decimal = Field(..., allow_inf_nan=True, examples=[Decimal("82.4")])
    total: Decimal = Field(..., allow_inf_nan=True, examples=[Decimal("458.5")])
    by_activity: dict[str, Annotated[Decimal, Field(allow_inf_nan=True)]] = Field(
        default_factory=dict,
        description="CO2e per activity within the period",
    )


class EmissionTotals(BaseModel):
    """Grand totals across a set of periods."""

    scope1_total: Decimal = Field(Decimal("0"), allow_inf_nan=True)
    scope2_total: Decimal = Field(Decimal("0"), allow_inf_nan=True)
    total: Decimal = Field(Decimal("0"), allow_inf_nan=True)


class EmissionRollup(BaseModel):
    """Periods plus grand totals, as served to the charts and summary cards."""

    periods: list[AggregatedPeriod] = Field(default_factory=list)
    totals: EmissionTotals = Field(default_factory=EmissionTotals)


class ActivityBreakdownRow(BaseModel):
    """CO2e attributed to one activity regardless of period."""

    activity: str = Field(..., examples=["Generator Fuel Consumption"])
    scope: ScopeEnum
    raw_total: Decimal = Field(..., allow_inf_nan=True, description="Sum of raw readings")
    co2e: Decimal = Field(..., allow_inf_nan=True, description="Sum of raw readings times factor")
    share_pct: Decimal = Field(..., allow_inf_nan=True, description="Percentage of the grand total")


class ActivityBreakdown(BaseModel):
    """Per-activity composition used by the scope pie and donut charts."""

    rows: list[ActivityBreakdownRow] = Field(default_factory=list)
    totals: EmissionTotals = Field(default_factory=EmissionTotals)


class BaselineComparisonRow(AggregatedPeriod):
    """Annual period compared against the baseline year."""

    pct_change: Decimal = Field(
        ...,
        allow_inf_nan=True,
        description="Percentage change of total against the baseline total",
        examples=[Decimal("20.0")],
    )


class BaselineComparison(BaseModel):
    """Annual rollup compared against a designated baseline year."""

    baseline_year: int = Field(..., examples=[2022])
    baseline_total: Decimal = Field(..., allow_inf_nan=True)
    rows: list[BaselineComparisonRow] = Field(default_factory=list)
