"""
Database base configuration.

Handles async engine creation and Alembic migrations.
"""
import asyncio
import functools
import logging
from pathlib import Path
from typing import Any

from alembic import command
from alembic.config import Config as alembic_config
from sqlalchemy.engine.url import URL
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from carbon_reporting.core.config import Config

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

DEFAULT_DRIVERNAME = "postgresql+asyncpg"

engine_kw = {
    "pool_pre_ping": True,
    # feature will normally emit SQL equivalent to "SELECT 1" each time a connection is checked out from the pool
    "pool_size": 2,  # number of connections to keep open at a time
    "max_overflow": 4,  # number of connections to allow to be opened above pool_size
    "connect_args": {
        "prepared_statement_cache_size": 0,  # disable prepared statement cache
        "statement_cache_size": 0,  # disable statement cache
    },
}

# Keys of the [db] table that are settings rather than URL parts
NON_URL_KEYS = ("drivername", "apply_migrations")


def get_db_url(config: Config) -> URL:
    """
    Construct database URL from config.
    """
    config_db = config.data["db"]
    url_parts = {key: value for key, value in config_db.items() if key not in NON_URL_KEYS}
    return URL.create(
        drivername=config_db.get("drivername", DEFAULT_DRIVERNAME), **url_parts
    )


def get_engine_kw(config: Config) -> dict[str, Any]:
    """
    Engine keyword arguments for the configured driver.

    SQLite has no connection pool sizing or asyncpg statement caches.
    """
    if get_db_url(config).drivername.startswith("sqlite"):
        return {}
    return engine_kw


def get_async_engine(async_db_url: URL, **kwargs: Any) -> AsyncEngine:
    """
    Create async database engine.
    """
    return create_async_engine(async_db_url, **kwargs)


async def apply_db_migration(config: Config):
    """
    Apply Alembic migrations up to head before the application serves requests.

    Args:
        config: The application configuration containing database connection details.
    """
    alembic_cfg = alembic_config(str(PROJECT_ROOT / "alembic.ini"))
    alembic_cfg.set_main_option(
        "script_location", str(PROJECT_ROOT / "alembic_migrations")
    )
    alembic_cfg.set_main_option(
        "sqlalchemy.url", get_db_url(config).render_as_string(hide_password=False)
    )

    # alembic's env.py drives its own event loop, so run it off this one
    logging.info("Starting database migrations...")
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(
        None, functools.partial(command.upgrade, alembic_cfg, "head")
    )
    logging.info("Database migration completed successfully")
