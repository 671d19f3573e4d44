"""
Service tests for the CSV reading importer.
"""

from pathlib import Path

import pytest

from carbon_reporting.database.repositories import ActivityReadingRepository
from carbon_reporting.database.session_manager.db_session import Database
from carbon_reporting.services.importers.reading_importer import ReadingImporter
from carbon_reporting.test.factory.activity_reading import ActivityReadingFactory

TEST_DATA_DIR = Path(__file__).resolve().parents[2] / "test_data"


def test_read_csv():
    rows = ReadingImporter.read_csv(TEST_DATA_DIR / "activity_readings.csv")

    assert len(rows) == 13
    assert rows[0] == {
        "activity": "Generator Fuel Consumption",
        "year": "2022",
        "month": "Jan",
        "value": "80",
    }
    assert rows[1]["value"] == "1,020.5"


def test_read_csv_missing_columns(tmp_path):
    path = tmp_path / "readings.csv"
    path.write_text("activity,year,value\nElectricity Consumption,2023,10\n", encoding="utf-8")

    with pytest.raises(ValueError, match="month"):
        ReadingImporter.read_csv(path)


def test_read_csv_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ReadingImporter.read_csv(tmp_path / "missing.csv")


@pytest.mark.asyncio
async def test_import_file(test_db_session):
    importer = ReadingImporter(session=test_db_session)

    result = await importer.import_file(TEST_DATA_DIR / "activity_readings.csv")

    assert result.imported == 11
    assert result.rejected == 2
    assert {issue.field for issue in result.issues} == {"month", "year"}

    repo = ActivityReadingRepository(test_db_session)
    assert await repo.count() == 11
    stored = await repo.get_filtered()
    assert {reading.source_file for reading in stored} == {"activity_readings.csv"}
    assert "Diesel Forklift" in await repo.get_distinct_activities()


@pytest.mark.asyncio
async def test_import_file_with_clear(test_db_session):
    await ActivityReadingFactory()
    await ActivityReadingFactory()
    importer = ReadingImporter(session=test_db_session)

    await importer.import_file(TEST_DATA_DIR / "activity_readings.csv", clear_existing=True)

    assert await ActivityReadingRepository(test_db_session).count() == 11


@pytest.mark.asyncio
async def test_importer_context_manager_commits():
    rows = [{"activity": "Electricity Consumption", "year": 2023, "month": "Jan", "value": "5"}]

    async with ReadingImporter() as importer:
        result = await importer.import_rows(rows, source_file="inline")

    assert result.imported == 1
    async with Database() as session:
        assert await ActivityReadingRepository(session).count() == 1

    importer = ReadingImporter()
    with pytest.raises(RuntimeError):
        importer.session
