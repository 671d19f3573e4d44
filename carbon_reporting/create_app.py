"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from carbon_reporting.api import (
    baselines_router,
    emissions_router,
    factors_router,
    readings_router,
)
from carbon_reporting.core.config import get_config
from carbon_reporting.database.base import apply_db_migration, get_db_url, get_engine_kw
from carbon_reporting.database.session_manager.db_session import Database
from carbon_reporting.database.session_manager.exceptions import DatabaseSessionError
from carbon_reporting.services.aggregators.emission_aggregator import EmissionAggregator
from carbon_reporting.services.baselines.reconciliation import BaselineStateError
from carbon_reporting.services.exporters.csv_exporter import NothingToExportError
from carbon_reporting.services.registry.emission_factor_registry import (
    EmissionFactorRegistry,
)

logging.basicConfig(
    level=logging.DEBUG, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


def register_exception_handlers(app: FastAPI):
    """Map HTTP, validation and domain errors to JSON responses."""

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        logging.error(f"HTTPException occurred: {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code, content={"detail": str(exc.detail)}
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "detail": jsonable_encoder(exc.errors()),
                "message": "Validation error",
            },
        )

    @app.exception_handler(NothingToExportError)
    async def nothing_to_export_handler(request: Request, exc: NothingToExportError):
        logging.warning(f"Empty export requested: {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"detail": exc.message}
        )

    @app.exception_handler(BaselineStateError)
    async def baseline_state_handler(request: Request, exc: BaselineStateError):
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})

    @app.exception_handler(DatabaseSessionError)
    async def database_session_handler(request: Request, exc: DatabaseSessionError):
        logging.error(f"Database error: {exc}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Database unavailable. Please try again."},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logging.error(f"Exception occurred: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": str(exc)}
        )


def register_routers(app: FastAPI):
    """Register all API routers."""
    app.include_router(factors_router)
    app.include_router(readings_router)
    app.include_router(emissions_router)
    app.include_router(baselines_router)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    Handles database initialization, migrations and cleanup.
    """
    logging.info("Application startup")
    config = app.state.config

    if config.section("db").get("apply_migrations", False):
        await apply_db_migration(config)

    Database.init(get_db_url(config), engine_kw=get_engine_kw(config))
    logging.info("Initialized database")

    try:
        yield
    finally:
        await Database.dispose()
        logging.info("Application shutdown")


def get_app(config_file: str) -> FastAPI:
    """
    Application factory function.

    Args:
        config_file: Configuration file name (e.g., "production.toml")

    Returns:
        Configured FastAPI application instance
    """
    config = get_config(config_file)
    api_config = config.section("api")

    app = FastAPI(
        title=api_config.get("title", "Carbon Reporting API"),
        description=api_config.get(
            "description", "ESG carbon emission rollups, baselines and exports"
        ),
        version=api_config.get("version", "1.0.0"),
        debug=api_config.get("debug", False),
        lifespan=lifespan,
        generate_unique_id_function=lambda route: (
            f"{route.tags[0]}-{route.name}" if route.tags else route.name
        ),
    )

    app.state.config = config
    # one factor set per application, shared by every request
    app.state.registry = EmissionFactorRegistry.from_config(config)
    app.state.aggregator = EmissionAggregator.from_config(config, app.state.registry)

    register_routers(app)
    register_exception_handlers(app)

    origins = [
        "http://localhost:3000",  # For local development
        "http://127.0.0.1:3000",
    ]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    return app
