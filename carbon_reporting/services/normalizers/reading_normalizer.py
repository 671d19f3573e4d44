"""
Reading normalization.

Turns loosely typed backend or CSV rows into ActivityReading instances.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Optional

from carbon_reporting.pydantic_models.activity_reading import (
    ActivityReading,
    NormalizationResult,
    ReadingParseIssue,
)
from carbon_reporting.utils.constants import MONTH_ORDER

logger = logging.getLogger(__name__)

NAN = Decimal("NaN")

# activity_readings.value is NUMERIC(14, 4)
MAX_STORABLE_VALUE = Decimal("1e10")


def parse_value(raw: Any) -> Decimal:
    """
    Parse a raw numeric field.

    Strings are trimmed and thousands separators removed. Anything that does
    not parse to a finite number becomes NaN.

    Example:
        >>> parse_value("1,234.5")
        Decimal('1234.5')
        >>> parse_value("n/a")
        Decimal('NaN')
    """
    if raw is None or isinstance(raw, bool):
        return NAN
    if isinstance(raw, Decimal):
        return raw if raw.is_finite() else NAN
    if isinstance(raw, str):
        raw = raw.strip().replace(",", "")
        if not raw:
            return NAN
    try:
        value = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        return NAN
    # infinities and signalling NaN become quiet NaN
    return value if value.is_finite() else NAN


def parse_year(raw: Any) -> Optional[int]:
    """Parse a year field, None when it is not an integer."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    try:
        as_decimal = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        return None
    if not as_decimal.is_finite() or as_decimal != as_decimal.to_integral_value():
        return None
    return int(as_decimal)


def parse_month(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    month = str(raw).strip()
    return month or None


class ReadingNormalizer:
    """Converts raw rows into typed readings."""

    def normalize(self, rows: Iterable[Mapping[str, Any]]) -> list[ActivityReading]:
        """
        Lenient conversion: one reading per row, never raises.

        Non-numeric values become NaN, a missing activity becomes an empty
        string and an unparseable year becomes 0. NaN values are kept so that
        they show up in the sums they join.
        """
        readings = []
        for row in rows:
            year = parse_year(row.get("year"))
            readings.append(
                ActivityReading(
                    activity=str(row.get("activity") or ""),
                    year=year if year is not None else 0,
                    month=parse_month(row.get("month")),
                    value=parse_value(row.get("value")),
                )
            )

        nan_count = sum(1 for reading in readings if reading.value.is_nan())
        if nan_count:
            logger.warning(f"{nan_count} of {len(readings)} readings have non-numeric values")

        return readings

    def validate(self, rows: Iterable[Mapping[str, Any]]) -> NormalizationResult:
        """
        Strict conversion: rejected rows are reported instead of coerced.

        A row is rejected when the activity is missing, the year is not an
        integer, the month is not a known abbreviation, or the value is not a
        finite non-negative number.
        """
        result = NormalizationResult()

        for index, row in enumerate(rows):
            issue = self._check_row(index, row)
            if issue is not None:
                result.issues.append(issue)
                continue

            result.readings.append(
                ActivityReading(
                    activity=str(row["activity"]).strip(),
                    year=parse_year(row.get("year")),
                    month=parse_month(row.get("month")),
                    value=parse_value(row.get("value")),
                )
            )

        if result.has_issues:
            logger.warning(
                f"Rejected {len(result.issues)} rows, accepted {len(result.readings)}"
            )
        return result

    @staticmethod
    def _check_row(index: int, row: Mapping[str, Any]) -> Optional[ReadingParseIssue]:
        activity = row.get("activity")
        if activity is None or not str(activity).strip():
            return ReadingParseIssue(row_index=index, field="activity", message="Activity is required")

        if parse_year(row.get("year")) is None:
            return ReadingParseIssue(
                row_index=index,
                field="year",
                message=f"Year must be an integer, got {row.get('year')!r}",
            )

        month = parse_month(row.get("month"))
        if month is not None and month not in MONTH_ORDER:
            return ReadingParseIssue(
                row_index=index,
                field="month",
                message=f"Unknown month {month!r}, expected one of {', '.join(MONTH_ORDER)}",
            )

        value = parse_value(row.get("value"))
        if not value.is_finite():
            return ReadingParseIssue(
                row_index=index,
                field="value",
                message=f"Value must be numeric, got {row.get('value')!r}",
            )
        if value < 0:
            return ReadingParseIssue(
                row_index=index, field="value", message="Value must not be negative"
            )
        if value >= MAX_STORABLE_VALUE:
            return ReadingParseIssue(
                row_index=index,
                field="value",
                message=f"Value must be below {MAX_STORABLE_VALUE:,.0f}",
            )

        return None
