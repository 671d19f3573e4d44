"""
Activity Readings API router.

Raw readings, the activity catalog, imports and the raw CSV export.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from carbon_reporting.core.dependencies import (
    get_aggregator,
    get_db_session,
    get_reading_filter,
    get_readings,
)
from carbon_reporting.database.repositories import ActivityReadingRepository
from carbon_reporting.pydantic_models.activity_reading import (
    ActivityReading,
    ActivityReadingPydModel,
    ReadingFilter,
    ReadingImportRequest,
    ReadingImportResponse,
)
from carbon_reporting.services.aggregators.emission_aggregator import EmissionAggregator
from carbon_reporting.services.exporters.csv_exporter import CSVExporter
from carbon_reporting.services.importers.reading_importer import ReadingImporter

router = APIRouter(
    prefix="/api/v1/readings",
    tags=["Activity Readings"],
)

logger = logging.getLogger(__name__)


@router.get("/", response_model=list[ActivityReadingPydModel])
async def list_readings(
    skip: int = 0,
    limit: Optional[int] = None,
    filters: ReadingFilter = Depends(get_reading_filter),
    session: AsyncSession = Depends(get_db_session),
):
    """
    List stored readings ordered by year, month and activity.

    Example:
        ```
        GET /api/v1/readings?year=2023&month=Jan
        GET /api/v1/readings?activity_name=Electricity%20Consumption
        ```
    """
    repo = ActivityReadingRepository(session)
    return await repo.get_filtered(filters, skip=skip, limit=limit)


@router.get("/activities", response_model=list[str])
async def list_activities(session: AsyncSession = Depends(get_db_session)):
    """Distinct activity names, for filter and selection controls."""
    repo = ActivityReadingRepository(session)
    return await repo.get_distinct_activities()


@router.post(
    "/import",
    response_model=ReadingImportResponse,
    status_code=status.HTTP_201_CREATED,
)
async def import_readings(
    request: ReadingImportRequest,
    session: AsyncSession = Depends(get_db_session),
):
    """
    Import loosely typed rows.

    Every row is validated; valid rows are stored and rejected rows are
    reported with the offending field.
    """
    logger.info(f"Importing {len(request.rows)} reading rows")
    importer = ReadingImporter(session=session)
    return await importer.import_rows(request.rows, source_file=request.source_file)


@router.get("/export")
async def export_readings(
    readings: list[ActivityReading] = Depends(get_readings),
    aggregator: EmissionAggregator = Depends(get_aggregator),
):
    """Raw readings with the CO2e each contributes, as CSV."""
    content = CSVExporter().export_readings(readings, aggregator)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="activity_readings.csv"'},
    )
