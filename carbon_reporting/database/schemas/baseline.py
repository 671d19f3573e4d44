"""
Baseline SQLAlchemy model.
"""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, Numeric, String, UniqueConstraint, Uuid

from carbon_reporting.database import Base


class BaselineDBModel(Base):
    """
    Reference emission value per activity and year.

    activity_key holds the trimmed, lower-cased activity name; together with
    year it identifies a baseline.
    """

    __tablename__ = "baselines"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    activity_name = Column(
        String(200),
        nullable=False,
        comment="Activity name as entered by the operator",
    )

    activity_key = Column(
        String(200),
        nullable=False,
        index=True,
        comment="Normalized activity name (trimmed, lower-cased)",
    )

    year = Column(
        Integer,
        nullable=False,
        comment="Baseline year",
    )

    value = Column(
        Numeric(15, 4),
        nullable=False,
        comment="Baseline emission value",
    )

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    __table_args__ = (
        UniqueConstraint("activity_key", "year", name="uq_baselines_activity_key_year"),
        {"comment": "Baseline values per activity and year"},
    )

    def __repr__(self):
        return f"<BaselineDBModel: {self.activity_name} {self.year} = {self.value}>"
