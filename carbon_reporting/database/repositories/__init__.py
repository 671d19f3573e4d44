"""
Database repositories for data access layer.

Provides clean abstraction over database operations following repository pattern.
"""
from carbon_reporting.database.repositories.activity_reading import ActivityReadingRepository
from carbon_reporting.database.repositories.base import BaseRepository
from carbon_reporting.database.repositories.baseline import BaselineRepository

__all__ = [
    "ActivityReadingRepository",
    "BaseRepository",
    "BaselineRepository",
]
