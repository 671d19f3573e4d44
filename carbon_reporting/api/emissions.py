"""
Emissions API router.

Scope-classified CO2e rollups computed from the stored readings on every
request: annual, monthly, per activity and against a baseline year.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from carbon_reporting.core.config import Config
from carbon_reporting.core.dependencies import (
    get_aggregator,
    get_app_config,
    get_baselines,
    get_readings,
)
from carbon_reporting.pydantic_models.activity_reading import ActivityReading
from carbon_reporting.pydantic_models.baseline import Baseline
from carbon_reporting.pydantic_models.emission_summary import (
    ActivityBreakdown,
    BaselineComparison,
    EmissionRollup,
)
from carbon_reporting.services.aggregators.emission_aggregator import (
    EmissionAggregator,
    resolve_baseline_year,
)
from carbon_reporting.services.exporters.csv_exporter import CSVExporter
from carbon_reporting.utils.constants import BaselineDefaults

router = APIRouter(
    prefix="/api/v1/emissions",
    tags=["Emissions"],
)

logger = logging.getLogger(__name__)


def csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/annual", response_model=EmissionRollup)
async def get_annual_rollup(
    readings: list[ActivityReading] = Depends(get_readings),
    aggregator: EmissionAggregator = Depends(get_aggregator),
):
    """
    Scope 1, Scope 2 and total CO2e per year, oldest year first.

    Example:
        ```
        GET /api/v1/emissions/annual
        GET /api/v1/emissions/annual?from_year=2022&to_year=2024
        ```
    """
    periods = aggregator.annual_rollup(readings)
    logger.info(f"Annual rollup over {len(readings)} readings: {len(periods)} years")
    return EmissionRollup(periods=periods, totals=aggregator.totals(periods))


@router.get("/monthly", response_model=EmissionRollup)
async def get_monthly_series(
    readings: list[ActivityReading] = Depends(get_readings),
    aggregator: EmissionAggregator = Depends(get_aggregator),
):
    """
    Scope totals per year and month in calendar order.

    Example:
        ```
        GET /api/v1/emissions/monthly?year=2023
        GET /api/v1/emissions/monthly?year=2023&from_month=Mar&to_month=Jun
        ```
    """
    periods = aggregator.monthly_series(readings)
    return EmissionRollup(periods=periods, totals=aggregator.totals(periods))


@router.get("/breakdown", response_model=ActivityBreakdown)
async def get_activity_breakdown(
    readings: list[ActivityReading] = Depends(get_readings),
    aggregator: EmissionAggregator = Depends(get_aggregator),
):
    """
    CO2e and share of the total per activity, independent of period.

    Used for the scope pie and donut charts.
    """
    return aggregator.activity_breakdown(readings)


@router.get("/baseline-comparison", response_model=BaselineComparison)
async def get_baseline_comparison(
    baseline_year: Optional[int] = Query(
        None,
        description="Year to compare against (defaults to the configured baseline year)",
        examples=[2022],
    ),
    readings: list[ActivityReading] = Depends(get_readings),
    aggregator: EmissionAggregator = Depends(get_aggregator),
    baselines: list[Baseline] = Depends(get_baselines),
    config: Config = Depends(get_app_config),
):
    """
    Annual rollup with each year's percentage change against a baseline year.

    The baseline total is the sum of the stored baselines for the year, else
    that year's own total, else the configured fallback. Responds 503 when
    the stored baselines cannot be loaded.

    Example:
        ```
        GET /api/v1/emissions/baseline-comparison?baseline_year=2022
        ```
    """
    year = resolve_baseline_year(
        baseline_year,
        sorted({baseline.year for baseline in baselines}),
        default=config.section("baseline").get("default_year", BaselineDefaults.DEFAULT_YEAR),
    )

    logger.info(f"Comparing {len(readings)} readings against baseline year {year}")
    return aggregator.baseline_comparison(readings, year, baselines)


@router.get("/annual/export")
async def export_annual_rollup(
    readings: list[ActivityReading] = Depends(get_readings),
    aggregator: EmissionAggregator = Depends(get_aggregator),
):
    """Annual rollup as CSV; 404 when there is nothing to export."""
    content = CSVExporter().export_annual(aggregator.annual_rollup(readings))
    return csv_response(content, "carbon_emissions_annual.csv")


@router.get("/monthly/export")
async def export_monthly_series(
    readings: list[ActivityReading] = Depends(get_readings),
    aggregator: EmissionAggregator = Depends(get_aggregator),
):
    """Monthly series as CSV."""
    content = CSVExporter().export_monthly(aggregator.monthly_series(readings))
    return csv_response(content, "carbon_emissions_monthly.csv")


@router.get("/breakdown/export")
async def export_activity_breakdown(
    readings: list[ActivityReading] = Depends(get_readings),
    aggregator: EmissionAggregator = Depends(get_aggregator),
):
    """Per-activity breakdown as CSV."""
    content = CSVExporter().export_breakdown(aggregator.activity_breakdown(readings))
    return csv_response(content, "carbon_emissions_breakdown.csv")
