"""
API tests for baseline endpoints.
"""

from decimal import Decimal

import pytest
from sqlalchemy import select

from carbon_reporting.database.repositories import BaselineRepository
from carbon_reporting.database.schemas import BaselineDBModel
from carbon_reporting.database.session_manager.db_session import Database
from carbon_reporting.pydantic_models.baseline import Baseline
from carbon_reporting.test.factory.baseline import BaselineFactory


@pytest.mark.asyncio
async def test_list_baselines_empty(test_async_client):
    response = await test_async_client.get("/api/v1/baselines/")
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_list_baselines_and_years(test_async_client):
    await BaselineFactory(year=2023)
    await BaselineFactory(year=2021, activity_name="Generator Fuel Consumption")
    await BaselineFactory(year=2021)

    response = await test_async_client.get("/api/v1/baselines/")
    assert response.status_code == 200
    assert [item["year"] for item in response.json()] == [2021, 2021, 2023]
    assert all("id" in item for item in response.json())

    response = await test_async_client.get("/api/v1/baselines/years")
    assert response.status_code == 200
    assert response.json() == [2021, 2023]


@pytest.mark.asyncio
async def test_submit_new_baseline(test_async_client):
    response = await test_async_client.post(
        "/api/v1/baselines/",
        json={"activity_name": " Electricity Consumption ", "year": 2022, "value": "500"},
    )
    assert response.status_code == 201

    data = response.json()
    assert data["state"] == "saved"
    assert data["message"] == "Baseline value saved successfully!"
    assert data["saved"]["activity_name"] == "Electricity Consumption"

    async with Database() as session:
        stored = await BaselineRepository(session).list_baselines()
    assert len(stored) == 1
    assert stored[0].value == Decimal("500")


@pytest.mark.asyncio
async def test_submit_validation_error(test_async_client):
    response = await test_async_client.post(
        "/api/v1/baselines/",
        json={"activity_name": "Electricity Consumption", "year": 2022, "value": "lots"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == (
        "Please enter a valid positive number for the baseline value."
    )

    response = await test_async_client.post(
        "/api/v1/baselines/",
        json={"activity_name": "", "year": 2022, "value": "5"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Please select an activity."


@pytest.mark.asyncio
async def test_submit_duplicate_returns_conflict(test_async_client):
    await BaselineFactory(activity_name="Electricity Consumption", year=2022, value=Decimal("500"))

    response = await test_async_client.post(
        "/api/v1/baselines/",
        json={"activity_name": "electricity consumption", "year": 2022, "value": "650"},
    )
    assert response.status_code == 409

    data = response.json()
    assert data["state"] == "conflict_pending"
    assert Decimal(data["existing"]["value"]) == Decimal("500")
    assert Decimal(data["proposed"]["value"]) == Decimal("650")

    async with Database() as session:
        result = await session.execute(select(BaselineDBModel))
        stored = result.scalars().all()
    assert len(stored) == 1
    assert stored[0].value == Decimal("500")


@pytest.mark.asyncio
async def test_submit_duplicate_with_overwrite(test_async_client):
    await BaselineFactory(activity_name="Electricity Consumption", year=2022, value=Decimal("500"))

    response = await test_async_client.post(
        "/api/v1/baselines/",
        json={
            "activity_name": "ELECTRICITY CONSUMPTION",
            "year": 2022,
            "value": 650,
            "overwrite": True,
        },
    )
    assert response.status_code == 201
    assert response.json()["saved"]["activity_name"] == "Electricity Consumption"

    async with Database() as session:
        stored = await BaselineRepository(session).list_baselines()
    assert [(b.activity_name, b.value) for b in stored] == [
        ("Electricity Consumption", Decimal("650"))
    ]


@pytest.mark.asyncio
async def test_submit_store_failure(test_async_client, monkeypatch):
    async def failing_upsert(self, baseline: Baseline):
        raise RuntimeError("connection reset")

    monkeypatch.setattr(BaselineRepository, "upsert_baseline", failing_upsert)

    response = await test_async_client.post(
        "/api/v1/baselines/",
        json={"activity_name": "Electricity Consumption", "year": 2022, "value": "5"},
    )
    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to save baseline value. Please try again."
