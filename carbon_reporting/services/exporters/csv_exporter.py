"""
CSV report exporter.

Serializes aggregated tables into comma-delimited text with numeric fields at
two decimal places.
"""

import csv
import io
import logging
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterable, Sequence

from carbon_reporting.pydantic_models.activity_reading import ActivityReading
from carbon_reporting.pydantic_models.emission_summary import (
    ActivityBreakdown,
    AggregatedPeriod,
)
from carbon_reporting.services.aggregators.emission_aggregator import EmissionAggregator
from carbon_reporting.utils.constants import NOTHING_TO_EXPORT, ExportHeaders

logger = logging.getLogger(__name__)


class NothingToExportError(Exception):
    """Raised instead of producing a header-only export."""

    def __init__(self, message: str = NOTHING_TO_EXPORT):
        self.message = message
        super().__init__(message)


def format_field(value: Any) -> str:
    """Render numbers at two decimals and everything else as text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, (Decimal, float)):
        return f"{value:.2f}"
    return str(value)


class CSVExporter:
    """Builds CSV documents for rollups and raw readings."""

    def export_rows(self, headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> str:
        """
        Serialize a header row and data rows.

        Raises:
            NothingToExportError: If there are no data rows
        """
        rows = list(rows)
        if not rows:
            logger.warning("Export requested for an empty table")
            raise NothingToExportError()

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(headers)
        for row in rows:
            writer.writerow([format_field(value) for value in row])
        return buffer.getvalue()

    def export_annual(self, periods: Sequence[AggregatedPeriod]) -> str:
        return self.export_rows(
            ExportHeaders.ANNUAL,
            [
                [period.year, period.scope1_total, period.scope2_total, period.total]
                for period in periods
            ],
        )

    def export_monthly(self, periods: Sequence[AggregatedPeriod]) -> str:
        return self.export_rows(
            ExportHeaders.MONTHLY,
            [
                [
                    period.year,
                    period.month,
                    period.scope1_total,
                    period.scope2_total,
                    period.total,
                ]
                for period in periods
            ],
        )

    def export_breakdown(self, breakdown: ActivityBreakdown) -> str:
        return self.export_rows(
            ExportHeaders.BREAKDOWN,
            [
                [
                    row.activity,
                    f"Scope {row.scope.value}",
                    row.raw_total,
                    row.co2e,
                    row.share_pct,
                ]
                for row in breakdown.rows
            ],
        )

    def export_readings(
        self, readings: Sequence[ActivityReading], aggregator: EmissionAggregator
    ) -> str:
        """Raw readings with the CO2e each one contributes."""
        return self.export_rows(
            ExportHeaders.READINGS,
            [
                [
                    reading.activity,
                    reading.year,
                    reading.month,
                    reading.value,
                    aggregator.co2e_of(reading),
                ]
                for reading in readings
            ],
        )

    def write_csv(self, path: str | Path, content: str) -> Path:
        """
        Write an already built document to disk.

        The document is complete before the file is opened, so a failed export
        never leaves a partial file behind.
        """
        path = Path(path)
        path.write_text(content, encoding="utf-8")
        logger.info(f"Exported {len(content.splitlines())} lines to {path}")
        return path
