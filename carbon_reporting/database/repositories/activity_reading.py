"""
Repository for ActivityReading database operations.
"""
from typing import Any, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carbon_reporting.database.repositories.base import BaseRepository
from carbon_reporting.database.schemas import ActivityReadingDBModel
from carbon_reporting.pydantic_models.activity_reading import (
    ActivityReading,
    ReadingFilter,
)
from carbon_reporting.utils.constants import MONTH_ORDER


class ActivityReadingRepository(BaseRepository[ActivityReadingDBModel]):
    """Repository for activity reading operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(ActivityReadingDBModel, session)

    async def get_filtered(
        self,
        filters: Optional[ReadingFilter] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[ActivityReadingDBModel]:
        """
        Get readings matching the reading source filters.

        Args:
            filters: Exact year/month, year and month ranges, activity name
            skip: Number of records to skip
            limit: Maximum number of records to return (all when None)

        Returns:
            Readings ordered by year, month and activity
        """
        filters = filters or ReadingFilter()
        stmt = select(self.model)

        if filters.year is not None:
            stmt = stmt.where(self.model.year == filters.year)
        if filters.month is not None:
            stmt = stmt.where(self.model.month == filters.month.value)
        if filters.from_year is not None:
            stmt = stmt.where(self.model.year >= filters.from_year)
        if filters.to_year is not None:
            stmt = stmt.where(self.model.year <= filters.to_year)
        if filters.from_month is not None:
            stmt = stmt.where(self.model.month_index >= MONTH_ORDER[filters.from_month.value])
        if filters.to_month is not None:
            stmt = stmt.where(self.model.month_index <= MONTH_ORDER[filters.to_month.value])
        if filters.activity_name:
            stmt = stmt.where(self.model.activity == filters.activity_name)

        stmt = stmt.order_by(
            self.model.year, self.model.month_index, self.model.activity
        ).offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def fetch_rows(self, filters: Optional[ReadingFilter] = None) -> List[dict[str, Any]]:
        """Readings as plain rows, the shape the reading normalizer consumes."""
        readings = await self.get_filtered(filters)
        return [
            {
                "activity": reading.activity,
                "year": reading.year,
                "month": reading.month,
                "value": reading.value,
            }
            for reading in readings
        ]

    async def get_distinct_activities(self) -> List[str]:
        """Sorted activity names present in the readings."""
        stmt = select(self.model.activity).distinct().order_by(self.model.activity)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def bulk_create_readings(
        self, readings: Iterable[ActivityReading], source_file: Optional[str] = None
    ) -> List[ActivityReadingDBModel]:
        """Store normalized readings."""
        return await self.bulk_create(
            [
                {
                    "activity": reading.activity,
                    "year": reading.year,
                    "month": reading.month,
                    "month_index": MONTH_ORDER.get(reading.month) if reading.month else None,
                    "value": reading.value,
                    "source_file": source_file,
                }
                for reading in readings
            ]
        )
