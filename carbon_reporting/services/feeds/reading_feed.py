"""
Reading feed.

Loads readings for a filter state from a reading source and keeps only the
response of the most recent request. Overlapping loads are not cancelled; a
response that arrives after a newer request was issued is dropped.
"""

import logging
from enum import Enum
from typing import Any, Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from carbon_reporting.database.repositories import ActivityReadingRepository
from carbon_reporting.pydantic_models.activity_reading import ActivityReading, ReadingFilter
from carbon_reporting.services.normalizers.reading_normalizer import ReadingNormalizer

logger = logging.getLogger(__name__)


class FeedStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    EMPTY = "empty"
    ERROR = "error"


class RequestSequencer:
    """Issues increasing request tokens and tells whether a token is still current."""

    def __init__(self):
        self._latest = 0

    @property
    def latest(self) -> int:
        return self._latest

    def issue(self) -> int:
        self._latest += 1
        return self._latest

    def is_latest(self, token: int) -> bool:
        return token == self._latest


class ReadingSource(Protocol):
    """Anything that can fetch raw reading rows for a filter state."""

    async def fetch(self, filters: ReadingFilter) -> list[dict[str, Any]]:
        ...


class DatabaseReadingSource:
    """Reading source backed by the activity readings table."""

    def __init__(self, session: AsyncSession):
        self.repo = ActivityReadingRepository(session)

    async def fetch(self, filters: ReadingFilter) -> list[dict[str, Any]]:
        return await self.repo.fetch_rows(filters)


class ReadingFeed:
    """
    Latest-wins reading loader.

    Attributes:
        status: Where the feed is: loading, ready, empty or error
        readings: Normalized readings of the last applied response
        error: Message of the last applied failure, None otherwise
        filters: Filter state of the last applied response
    """

    def __init__(self, source: ReadingSource, normalizer: Optional[ReadingNormalizer] = None):
        self.source = source
        self.normalizer = normalizer or ReadingNormalizer()
        self.sequencer = RequestSequencer()

        self.status = FeedStatus.IDLE
        self.readings: list[ActivityReading] = []
        self.error: Optional[str] = None
        self.filters: Optional[ReadingFilter] = None

    async def load(self, filters: Optional[ReadingFilter] = None) -> bool:
        """
        Fetch readings for a filter state.

        Returns:
            True when the response was applied, False when a newer load was
            issued while this one was in flight
        """
        filters = filters or ReadingFilter()
        token = self.sequencer.issue()
        self.status = FeedStatus.LOADING

        try:
            rows = await self.source.fetch(filters)
        except Exception as e:
            if not self.sequencer.is_latest(token):
                logger.warning(f"Discarding stale reading fetch failure (request {token}): {e}")
                return False
            logger.error(f"Error fetching readings: {e}")
            self.readings = []
            self.error = "Failed to load readings."
            self.filters = filters
            self.status = FeedStatus.ERROR
            return True

        if not self.sequencer.is_latest(token):
            logger.warning(
                f"Discarding stale reading response (request {token}, "
                f"latest {self.sequencer.latest})"
            )
            return False

        self.readings = self.normalizer.normalize(rows)
        self.error = None
        self.filters = filters
        self.status = FeedStatus.READY if self.readings else FeedStatus.EMPTY
        if self.status == FeedStatus.EMPTY:
            logger.warning(f"No readings found for {filters.model_dump(exclude_none=True)}")
        return True
