"""
Database session manager.

Process-wide async session maker, initialized once at startup and used as an
async context manager that commits on success and rolls back on error.
"""
import logging
from typing import Any, Optional

from sqlalchemy.engine.url import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from carbon_reporting.database.base import get_async_engine
from carbon_reporting.database.session_manager.exceptions import (
    DatabaseNotInitialized,
    DatabaseTransactionError,
)

logger = logging.getLogger(__name__)


class Database:
    """
    Async session context manager.

    Usage:
        Database.init(url)
        async with Database() as session:
            ...
    """

    _async_engine: Optional[AsyncEngine] = None
    _async_session_maker: Optional[async_sessionmaker] = None

    def __init__(self):
        self._session: Optional[AsyncSession] = None

    @classmethod
    def init(cls, async_db_url: URL, engine_kw: Optional[dict[str, Any]] = None) -> None:
        """Create the engine and session maker."""
        cls._async_engine = get_async_engine(async_db_url, **(engine_kw or {}))
        cls._async_session_maker = async_sessionmaker(
            bind=cls._async_engine, expire_on_commit=False, class_=AsyncSession
        )
        logger.debug(f"Database initialized for {async_db_url.drivername}")

    @classmethod
    async def dispose(cls) -> None:
        if cls._async_engine is not None:
            await cls._async_engine.dispose()
        cls._async_engine = None
        cls._async_session_maker = None

    async def __aenter__(self) -> AsyncSession:
        if self._async_session_maker is None:
            raise DatabaseNotInitialized()
        self._session = self._async_session_maker()
        return self._session

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is not None:
                await self._session.rollback()
                return

            try:
                await self._session.commit()
            except SQLAlchemyError as e:
                await self._session.rollback()
                logger.error(f"Error committing transaction: {e}")
                raise DatabaseTransactionError(e) from e
        finally:
            await self._session.close()
