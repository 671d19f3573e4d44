"""
Factory for Baseline models.
"""
import uuid
from datetime import datetime
from decimal import Decimal

import factory

from carbon_reporting.database.schemas import BaselineDBModel
from carbon_reporting.pydantic_models.baseline import normalize_activity_key
from carbon_reporting.test.factory.base_factory import AsyncSQLAlchemyFactory
from carbon_reporting.test.factory.create_async_session import async_session
from carbon_reporting.utils.constants import ActivityName


class BaselineFactory(AsyncSQLAlchemyFactory):
    """Factory for creating Baseline test instances."""

    class Meta:
        model = BaselineDBModel
        sqlalchemy_session = async_session
        sqlalchemy_session_persistence = "commit"

    id = factory.LazyFunction(uuid.uuid4)
    activity_name = ActivityName.ELECTRICITY
    activity_key = factory.LazyAttribute(lambda o: normalize_activity_key(o.activity_name))
    year = 2022
    value = Decimal("500")
    created_at = factory.LazyFunction(datetime.utcnow)
    updated_at = factory.LazyFunction(datetime.utcnow)
