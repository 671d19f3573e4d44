"""
Repository for Baseline database operations.

Doubles as the baseline store used by the reconciliation service.
"""
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carbon_reporting.database.repositories.base import BaseRepository
from carbon_reporting.database.schemas import BaselineDBModel
from carbon_reporting.pydantic_models.baseline import Baseline, normalize_activity_key


class BaselineRepository(BaseRepository[BaselineDBModel]):
    """Repository for baseline operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(BaselineDBModel, session)

    async def get_all_ordered(self) -> List[BaselineDBModel]:
        """All baselines ordered by year and activity."""
        stmt = select(self.model).order_by(self.model.year, self.model.activity_key)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_baselines(self) -> List[Baseline]:
        """Snapshot of all stored baselines."""
        return [Baseline.model_validate(row) for row in await self.get_all_ordered()]

    async def get_by_key(self, activity_name: str, year: int) -> Optional[BaselineDBModel]:
        """
        Get baseline by identity key.

        Args:
            activity_name: Activity name in any case, with or without padding
            year: Baseline year

        Returns:
            Matching baseline if found, None otherwise
        """
        stmt = select(self.model).where(
            self.model.activity_key == normalize_activity_key(activity_name),
            self.model.year == year,
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def upsert_baseline(self, baseline: Baseline) -> Baseline:
        """
        Insert a baseline or overwrite the one stored under the same key.

        Returns:
            The stored baseline
        """
        existing = await self.get_by_key(baseline.activity_name, baseline.year)
        if existing is None:
            instance = await self.create(
                activity_name=baseline.activity_name,
                activity_key=normalize_activity_key(baseline.activity_name),
                year=baseline.year,
                value=baseline.value,
            )
        else:
            instance = await self.update(existing.id, value=baseline.value)

        return Baseline.model_validate(instance)

    async def get_years(self) -> List[int]:
        """Distinct years that have baselines, ascending."""
        stmt = select(self.model.year).distinct().order_by(self.model.year)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
