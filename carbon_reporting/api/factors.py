"""
Emission Factors API router.

Read-only view of the emission factor registry.
"""
import logging

from fastapi import APIRouter, Depends, Query

from carbon_reporting.core.dependencies import get_registry
from carbon_reporting.pydantic_models.emission_factor import (
    EmissionFactor,
    EmissionFactorLookup,
)
from carbon_reporting.services.registry.emission_factor_registry import (
    EmissionFactorRegistry,
)

router = APIRouter(
    prefix="/api/v1/factors",
    tags=["Emission Factors"],
)

logger = logging.getLogger(__name__)


@router.get("/", response_model=list[EmissionFactor])
async def list_emission_factors(
    scope: int | None = None,
    registry: EmissionFactorRegistry = Depends(get_registry),
):
    """
    Emission factor reference table.

    Args:
        scope: Filter by GHG scope (optional)
    """
    factors = list(registry)
    if scope is not None:
        factors = [factor for factor in factors if factor.scope == scope]
    return factors


@router.get("/lookup", response_model=EmissionFactorLookup)
async def lookup_emission_factor(
    activity_name: str = Query(..., description="Exact activity name"),
    registry: EmissionFactorRegistry = Depends(get_registry),
):
    """
    Factor and scope for one activity name.

    Unregistered names resolve to a factor of 0; a close registered name is
    suggested when there is one.
    """
    lookup = registry.lookup(activity_name)
    if not lookup.tracked:
        logger.info(f"Lookup for untracked activity {activity_name!r}")
    return lookup
