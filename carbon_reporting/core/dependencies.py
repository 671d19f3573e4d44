"""
FastAPI dependencies.

Database sessions and the per-application services built in the app factory.
"""
from typing import AsyncGenerator, Optional

from fastapi import Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from carbon_reporting.core.config import Config
from carbon_reporting.database.repositories import BaselineRepository
from carbon_reporting.database.session_manager.db_session import Database
from carbon_reporting.pydantic_models.activity_reading import ActivityReading, ReadingFilter
from carbon_reporting.pydantic_models.baseline import Baseline
from carbon_reporting.services.aggregators.emission_aggregator import EmissionAggregator
from carbon_reporting.services.baselines.reconciliation import BaselineReconciliationService
from carbon_reporting.services.feeds.reading_feed import (
    DatabaseReadingSource,
    FeedStatus,
    ReadingFeed,
)
from carbon_reporting.services.registry.emission_factor_registry import (
    EmissionFactorRegistry,
)
from carbon_reporting.utils.constants import MonthEnum


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a database session for one request.

    Commits when the request handler returns, rolls back when it raises.
    """
    async with Database() as session:
        yield session


def get_app_config(request: Request) -> Config:
    return request.app.state.config


def get_registry(request: Request) -> EmissionFactorRegistry:
    return request.app.state.registry


def get_aggregator(request: Request) -> EmissionAggregator:
    return request.app.state.aggregator


def get_reading_filter(
    year: Optional[int] = Query(None, description="Exact reporting year", examples=[2023]),
    month: Optional[MonthEnum] = Query(None, description="Exact month", examples=["Jan"]),
    from_year: Optional[int] = Query(None, description="First year (inclusive)"),
    to_year: Optional[int] = Query(None, description="Last year (inclusive)"),
    from_month: Optional[MonthEnum] = Query(None, description="First month (inclusive)"),
    to_month: Optional[MonthEnum] = Query(None, description="Last month (inclusive)"),
    activity_name: Optional[str] = Query(None, description="Exact activity name"),
) -> ReadingFilter:
    """Reading filters from query parameters."""
    if from_year is not None and to_year is not None and from_year > to_year:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="from_year must be before or equal to to_year",
        )
    return ReadingFilter(
        year=year,
        month=month,
        from_year=from_year,
        to_year=to_year,
        from_month=from_month,
        to_month=to_month,
        activity_name=activity_name,
    )


async def get_readings(
    filters: ReadingFilter = Depends(get_reading_filter),
    session: AsyncSession = Depends(get_db_session),
) -> list[ActivityReading]:
    """
    Normalized readings for the request's filter state.

    Raises:
        HTTPException: 503 when the readings could not be loaded
    """
    feed = ReadingFeed(DatabaseReadingSource(session))
    await feed.load(filters)
    if feed.status == FeedStatus.ERROR:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=feed.error)
    return feed.readings


async def get_baselines(
    config: Config = Depends(get_app_config),
    session: AsyncSession = Depends(get_db_session),
) -> list[Baseline]:
    """
    Stored baselines for comparison views.

    Raises:
        HTTPException: 503 when the baselines could not be loaded
    """
    service = BaselineReconciliationService.from_config(config, BaselineRepository(session))
    baselines = await service.refresh()
    if service.last_error:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=service.last_error
        )
    return baselines
