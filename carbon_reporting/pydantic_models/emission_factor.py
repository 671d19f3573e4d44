"""
Pydantic models for emission factors.
"""
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from carbon_reporting.utils.constants import ScopeEnum


class EmissionFactor(BaseModel):
    """Emission factor definition for a single activity."""

    model_config = ConfigDict(frozen=True)

    activity_name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Exact activity name the factor applies to",
        examples=["Generator Fuel Consumption"],
    )
    factor: Decimal = Field(
        ...,
        ge=0,
        description="CO2e emission factor value (kgCO2e per unit)",
        examples=[Decimal("3.761")],
    )
    scope: ScopeEnum = Field(..., description="GHG Protocol scope (1 or 2)", examples=[1])
    unit: Optional[str] = Field(None, max_length=50, description="Unit of measurement")
    source: Optional[str] = Field(None, max_length=200, description="Source of the factor")
    category: Optional[str] = Field(None, description="Emission category", examples=["Direct Combustion"])
    description: Optional[str] = Field(None, description="Additional notes")


class EmissionFactorLookup(BaseModel):
    """Result of resolving a free-text activity name against the registry."""

    activity_name: str
    tracked: bool = Field(..., description="Whether the name has an exact factor")
    factor: Decimal = Field(..., description="Factor applied (0 when untracked)")
    scope: ScopeEnum
    suggestion: Optional[str] = Field(
        None, description="Closest tracked activity name for untracked input"
    )
