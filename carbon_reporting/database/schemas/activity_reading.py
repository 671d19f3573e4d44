"""
ActivityReading SQLAlchemy model.
"""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Index, Integer, Numeric, String, Uuid

from carbon_reporting.database import Base


class ActivityReadingDBModel(Base):
    """
    Raw activity consumption for one activity and period.

    Values are stored in the activity's native unit (litres, kWh, ...); CO2e is
    derived at aggregation time from the emission factor registry.
    """

    __tablename__ = "activity_readings"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    activity = Column(
        String(200),
        nullable=False,
        index=True,
        comment="Activity name as reported (e.g., 'Electricity Consumption')",
    )

    year = Column(
        Integer,
        nullable=False,
        index=True,
        comment="Reporting year",
    )

    month = Column(
        String(3),
        nullable=True,
        comment="Abbreviated month name (Jan..Dec)",
    )

    month_index = Column(
        Integer,
        nullable=True,
        comment="Calendar position of month (1-12) for range filters and ordering",
    )

    value = Column(
        Numeric(14, 4),
        nullable=False,
        comment="Raw quantity in the activity's native unit",
    )

    source_file = Column(
        String(255),
        nullable=True,
        comment="Original CSV filename if imported from file",
    )

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    __table_args__ = (
        Index("ix_activity_readings_year_month", "year", "month_index"),
        Index("ix_activity_readings_activity_year", "activity", "year"),
        {"comment": "Raw activity consumption readings"},
    )

    def __repr__(self):
        return (
            f"<ActivityReadingDBModel: {self.activity} - {self.value} "
            f"({self.month} {self.year})>"
        )
