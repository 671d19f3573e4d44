"""
Database session management.
"""
from carbon_reporting.database.session_manager.db_session import Database

__all__ = ["Database"]
