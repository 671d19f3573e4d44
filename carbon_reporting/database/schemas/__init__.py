"""
SQLAlchemy database models (schemas).
"""
from carbon_reporting.database.schemas.activity_reading import ActivityReadingDBModel
from carbon_reporting.database.schemas.baseline import BaselineDBModel

__all__ = [
    "ActivityReadingDBModel",
    "BaselineDBModel",
]
