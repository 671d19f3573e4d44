"""
API tests for activity reading endpoints.
"""

from decimal import Decimal

import pytest

from carbon_reporting.test.factory.activity_reading import (
    ActivityReadingFactory,
    GeneratorFuelReadingFactory,
)


@pytest.mark.asyncio
async def test_list_readings_empty(test_async_client):
    response = await test_async_client.get("/api/v1/readings/")
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_list_readings_filters(test_async_client):
    await ActivityReadingFactory(year=2022, month="Dec")
    await ActivityReadingFactory(year=2023, month="Jan")
    await GeneratorFuelReadingFactory(year=2023, month="Feb")

    response = await test_async_client.get("/api/v1/readings/?year=2023")
    assert response.status_code == 200
    data = response.json()
    assert [item["month"] for item in data] == ["Jan", "Feb"]
    assert all("id" in item for item in data)

    response = await test_async_client.get(
        "/api/v1/readings/?activity_name=Generator%20Fuel%20Consumption"
    )
    assert len(response.json()) == 1

    response = await test_async_client.get("/api/v1/readings/?month=Dec")
    assert [item["year"] for item in response.json()] == [2022]


@pytest.mark.asyncio
async def test_list_activities(test_async_client):
    await ActivityReadingFactory()
    await ActivityReadingFactory()
    await GeneratorFuelReadingFactory()

    response = await test_async_client.get("/api/v1/readings/activities")
    assert response.status_code == 200
    assert response.json() == ["Electricity Consumption", "Generator Fuel Consumption"]


@pytest.mark.asyncio
async def test_import_readings(test_async_client):
    response = await test_async_client.post(
        "/api/v1/readings/import",
        json={
            "source_file": "upload.csv",
            "rows": [
                {"activity": "Electricity Consumption", "year": 2023, "month": "Jan", "value": "200"},
                {"activity": "Generator Fuel Consumption", "year": "2023", "month": "Jan", "value": 100},
                {"activity": "Electricity Consumption", "year": 2023, "month": "Jan", "value": "n/a"},
            ],
        },
    )
    assert response.status_code == 201

    data = response.json()
    assert data["imported"] == 2
    assert data["rejected"] == 1
    assert data["issues"][0]["row_index"] == 2
    assert data["issues"][0]["field"] == "value"

    response = await test_async_client.get("/api/v1/emissions/annual")
    assert Decimal(response.json()["periods"][0]["total"]) == Decimal("458.5")


@pytest.mark.asyncio
async def test_export_readings(test_async_client):
    await GeneratorFuelReadingFactory(year=2023, month="Jan", value=Decimal("100"))

    response = await test_async_client.get("/api/v1/readings/export")
    assert response.status_code == 200
    assert response.text.splitlines() == [
        "Activity,Year,Month,Value,CO2e (KgCO2e)",
        "Generator Fuel Consumption,2023,Jan,100.00,376.10",
    ]


@pytest.mark.asyncio
async def test_export_readings_empty(test_async_client):
    response = await test_async_client.get("/api/v1/readings/export")
    assert response.status_code == 404
