"""
Reading import service for loading activity readings from CSV files.

Usage:
    from carbon_reporting.services.importers.reading_importer import ReadingImporter

    async with ReadingImporter() as importer:
        await importer.import_file("readings.csv", clear_existing=True)
"""

import csv
import logging
from pathlib import Path
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from carbon_reporting.database.repositories import ActivityReadingRepository
from carbon_reporting.database.session_manager.db_session import Database
from carbon_reporting.pydantic_models.activity_reading import ReadingImportResponse
from carbon_reporting.services.normalizers.reading_normalizer import ReadingNormalizer

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("activity", "year", "month", "value")


class ReadingImporter:
    """Validates raw reading rows and stores the accepted ones."""

    def __init__(
        self,
        session: Optional[AsyncSession] = None,
        normalizer: Optional[ReadingNormalizer] = None,
    ):
        """
        Initialize the importer.

        Args:
            session: Optional async database session. If not provided, one is
                opened when used as a context manager.
            normalizer: Reading normalizer used for strict validation
        """
        self._session = session
        self._external_session = session is not None
        self._db_context: Optional[Database] = None
        self.normalizer = normalizer or ReadingNormalizer()

    async def __aenter__(self):
        if not self._external_session:
            self._db_context = Database()
            self._session = await self._db_context.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._db_context is not None:
            await self._db_context.__aexit__(exc_type, exc_val, exc_tb)
            self._db_context = None
            self._session = None

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("Session not initialized. Use as context manager.")
        return self._session

    @staticmethod
    def read_csv(file_path: str | Path) -> list[dict[str, Any]]:
        """
        Read rows from a CSV file with activity, year, month and value headers.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If a required column is missing
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"CSV file not found: {file_path}")

        with open(file_path, newline="", encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            fieldnames = [name.strip().lower() for name in reader.fieldnames or []]
            missing = [column for column in REQUIRED_COLUMNS if column not in fieldnames]
            if missing:
                raise ValueError(f"{file_path.name} is missing columns: {', '.join(missing)}")

            reader.fieldnames = fieldnames
            rows = [dict(row) for row in reader]

        logger.info(f"Read {len(rows)} rows from {file_path}")
        return rows

    async def clear_readings(self) -> int:
        deleted = await ActivityReadingRepository(self.session).delete_all()
        logger.info(f"Cleared {deleted} existing readings")
        return deleted

    async def import_rows(
        self, rows: list[dict[str, Any]], source_file: Optional[str] = None
    ) -> ReadingImportResponse:
        """
        Validate rows and store the accepted readings.

        Rejected rows are reported, not stored.
        """
        result = self.normalizer.validate(rows)
        if result.readings:
            await ActivityReadingRepository(self.session).bulk_create_readings(
                result.readings, source_file=source_file
            )

        logger.info(
            f"Imported {len(result.readings)} readings"
            + (f" from {source_file}" if source_file else "")
            + f", rejected {len(result.issues)}"
        )
        return ReadingImportResponse(
            imported=len(result.readings),
            rejected=len(result.issues),
            issues=result.issues,
        )

    async def import_file(
        self, file_path: str | Path, clear_existing: bool = False
    ) -> ReadingImportResponse:
        """
        Import one CSV file.

        Args:
            file_path: CSV file to import
            clear_existing: Delete all stored readings first
        """
        rows = self.read_csv(file_path)
        if clear_existing:
            await self.clear_readings()
        return await self.import_rows(rows, source_file=Path(file_path).name)
