"""
Baselines API router.

Stored baselines and the submit-with-confirmation workflow.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from carbon_reporting.core.config import Config
from carbon_reporting.core.dependencies import get_app_config, get_db_session
from carbon_reporting.database.repositories import BaselineRepository
from carbon_reporting.pydantic_models.baseline import (
    BaselinePydModel,
    BaselineSubmitRequest,
    SubmissionOutcome,
    SubmissionState,
)
from carbon_reporting.services.baselines.reconciliation import BaselineReconciliationService

router = APIRouter(
    prefix="/api/v1/baselines",
    tags=["Baselines"],
)

logger = logging.getLogger(__name__)


@router.get("/", response_model=list[BaselinePydModel])
async def list_baselines(session: AsyncSession = Depends(get_db_session)):
    """All stored baselines ordered by year and activity."""
    repo = BaselineRepository(session)
    return await repo.get_all_ordered()


@router.get("/years", response_model=list[int])
async def list_baseline_years(session: AsyncSession = Depends(get_db_session)):
    """Years that have at least one baseline."""
    repo = BaselineRepository(session)
    return await repo.get_years()


@router.post(
    "/",
    response_model=SubmissionOutcome,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_409_CONFLICT: {
            "model": SubmissionOutcome,
            "description": "A baseline already exists for the activity and year",
        }
    },
)
async def submit_baseline(
    request: BaselineSubmitRequest,
    config: Config = Depends(get_app_config),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Save a baseline value for an activity and year.

    Activity names match case-insensitively and ignoring surrounding
    whitespace. When a baseline already exists for the key, nothing is written
    unless ``overwrite`` is true; the response carries the existing and the
    proposed values so the caller can ask for confirmation.

    Example:
        ```
        POST /api/v1/baselines
        {"activity_name": "Electricity Consumption", "year": 2022, "value": "500"}
        ```
    """
    service = BaselineReconciliationService.from_config(config, BaselineRepository(session))
    await service.refresh()
    if service.last_error:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=service.last_error
        )

    outcome = await service.submit(request)

    if outcome.state == SubmissionState.CONFLICT_PENDING:
        if not request.overwrite:
            return JSONResponse(
                status_code=status.HTTP_409_CONFLICT,
                content=outcome.model_dump(mode="json"),
            )
        outcome = await service.confirm()

    if outcome.state == SubmissionState.SAVED:
        return outcome

    if service.last_error:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=outcome.message
        )
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=outcome.message)
