"""
Emission Aggregation Service.

Rolls normalized activity readings up into CO2e totals by year, by month, by
activity and against a baseline year. Every call recomputes from the readings
it is given; nothing is cached between calls.
"""

import functools
import logging
from collections import defaultdict
from decimal import Decimal, DivisionByZero, InvalidOperation, Overflow, localcontext
from typing import Callable, Hashable, Iterable, Optional, Sequence

from carbon_reporting.core.config import Config
from carbon_reporting.pydantic_models.activity_reading import ActivityReading
from carbon_reporting.pydantic_models.baseline import Baseline
from carbon_reporting.pydantic_models.emission_summary import (
    ActivityBreakdown,
    ActivityBreakdownRow,
    AggregatedPeriod,
    BaselineComparison,
    BaselineComparisonRow,
    EmissionTotals,
)
from carbon_reporting.services.registry.emission_factor_registry import (
    EmissionFactorRegistry,
)
from carbon_reporting.utils.constants import (
    MONTH_ORDER,
    UNKNOWN_MONTH_INDEX,
    BaselineDefaults,
    ScopeEnum,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# group key -> activity -> summed raw value
PartialSums = dict[Hashable, dict[str, Decimal]]


def quiet_decimal(func):
    """
    Run func with the Decimal traps for overflow and undefined results cleared.

    Overflow yields Infinity and undefined results such as Infinity * 0 yield
    NaN, which then propagates through the sums like any unparseable reading.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        with localcontext() as ctx:
            ctx.traps[Overflow] = False
            ctx.traps[InvalidOperation] = False
            ctx.traps[DivisionByZero] = False
            return func(*args, **kwargs)

    return wrapper


def month_index(month: Optional[str]) -> int:
    """Calendar position of an abbreviated month name; unknown names sort last."""
    if month is None:
        return UNKNOWN_MONTH_INDEX
    return MONTH_ORDER.get(month, UNKNOWN_MONTH_INDEX)


@quiet_decimal
def percentage_change(value: Decimal, baseline: Decimal) -> Decimal:
    """
    Percentage change of value against baseline.

    Defined as 0 when the baseline is 0.
    """
    if baseline == ZERO:
        return ZERO
    return (value - baseline) / baseline * HUNDRED


def resolve_baseline_year(
    requested: Optional[int],
    available_years: Sequence[int],
    default: int = BaselineDefaults.DEFAULT_YEAR,
) -> int:
    """
    Pick the baseline year for a comparison view.

    The requested year wins. Otherwise the default is used when a baseline
    exists for it, then the earliest year that has baselines, then the default.
    """
    if requested is not None:
        return requested
    if not available_years or default in available_years:
        return default
    return min(available_years)


class EmissionAggregator:
    """
    Service for aggregating readings into scope-classified emission rollups.

    Rollups:
    - Annual (by year)
    - Monthly (by year and month, calendar ordered)
    - Per activity (time independent)
    - Annual against a baseline year
    """

    def __init__(
        self,
        registry: EmissionFactorRegistry,
        include_untracked: bool = True,
        fallback_baseline_total: Decimal = BaselineDefaults.FALLBACK_TOTAL,
    ):
        self.registry = registry
        self.include_untracked = include_untracked
        self.fallback_baseline_total = fallback_baseline_total

    @classmethod
    def from_config(
        cls, config: Config, registry: EmissionFactorRegistry
    ) -> "EmissionAggregator":
        aggregation = config.section("aggregation")
        baseline = config.section("baseline")
        return cls(
            registry,
            include_untracked=aggregation.get("include_untracked_activities", True),
            fallback_baseline_total=Decimal(
                str(baseline.get("fallback_total", BaselineDefaults.FALLBACK_TOTAL))
            ),
        )

    @quiet_decimal
    def co2e_of(self, reading: ActivityReading) -> Decimal:
        """CO2e for a single reading."""
        return reading.value * self.registry.factor_of(reading.activity)

    def _accumulate(
        self,
        readings: Iterable[ActivityReading],
        key_func: Callable[[ActivityReading], Hashable],
    ) -> PartialSums:
        """Single pass: sum raw values per group key and activity."""
        groups: PartialSums = defaultdict(lambda: defaultdict(lambda: ZERO))
        for reading in readings:
            groups[key_func(reading)][reading.activity] += reading.value
        return groups

    def _warn_untracked(self, activities: Iterable[str]) -> None:
        for activity in sorted(set(activities)):
            if self.registry.is_tracked(activity):
                continue
            suggestion = self.registry.suggest(activity)
            if suggestion:
                logger.warning(
                    f"Untracked activity {activity!r} contributes 0 CO2e "
                    f"(did you mean {suggestion!r}?)"
                )
            else:
                logger.warning(f"Untracked activity {activity!r} contributes 0 CO2e")

    def _to_period(
        self,
        period_key: str,
        year: int,
        month: Optional[str],
        raw_by_activity: dict[str, Decimal],
    ) -> AggregatedPeriod:
        """Second pass: apply factors and split into scope totals."""
        scope1_total = ZERO
        scope2_total = ZERO
        by_activity = {}

        for activity, raw_total in raw_by_activity.items():
            co2e = raw_total * self.registry.factor_of(activity)
            by_activity[activity] = co2e
            if self.registry.scope_of(activity) == ScopeEnum.SCOPE_1:
                scope1_total += co2e
            else:
                scope2_total += co2e

        return AggregatedPeriod(
            period_key=period_key,
            year=year,
            month=month,
            scope1_total=scope1_total,
            scope2_total=scope2_total,
            total=scope1_total + scope2_total,
            by_activity=by_activity,
        )

    @quiet_decimal
    def annual_rollup(self, readings: Iterable[ActivityReading]) -> list[AggregatedPeriod]:
        """
        Group readings by year.

        Returns:
            Periods sorted by numeric year, empty for empty input
        """
        groups = self._accumulate(readings, lambda reading: reading.year)
        self._warn_untracked(
            activity for raw_by_activity in groups.values() for activity in raw_by_activity
        )

        periods = [
            self._to_period(str(year), year, None, groups[year]) for year in sorted(groups)
        ]
        logger.debug(f"Annual rollup produced {len(periods)} periods")
        return periods

    @quiet_decimal
    def monthly_series(self, readings: Iterable[ActivityReading]) -> list[AggregatedPeriod]:
        """
        Group readings by year and month.

        Months are ordered by the calendar (Jan=1 .. Dec=12), never
        alphabetically. Readings without a recognized month sort after
        December of their year.
        """
        groups = self._accumulate(readings, lambda reading: (reading.year, reading.month))

        ordered_keys = sorted(
            groups, key=lambda key: (key[0], month_index(key[1]), key[1] or "")
        )
        periods = [
            self._to_period(f"{year}-{month or 'Unknown'}", year, month, groups[(year, month)])
            for year, month in ordered_keys
        ]
        logger.debug(f"Monthly series produced {len(periods)} periods")
        return periods

    @quiet_decimal
    def activity_breakdown(self, readings: Iterable[ActivityReading]) -> ActivityBreakdown:
        """
        Group readings by activity, independent of period.

        Untracked activities stay in the breakdown with 0 CO2e and a 0% share
        unless the aggregator was configured to drop them.
        """
        raw_by_activity = self._accumulate(readings, lambda reading: None).get(None, {})
        self._warn_untracked(raw_by_activity)

        if not self.include_untracked:
            raw_by_activity = {
                activity: raw_total
                for activity, raw_total in raw_by_activity.items()
                if self.registry.is_tracked(activity)
            }

        co2e_by_activity = {
            activity: raw_total * self.registry.factor_of(activity)
            for activity, raw_total in raw_by_activity.items()
        }

        scope1_total = ZERO
        scope2_total = ZERO
        for activity, co2e in co2e_by_activity.items():
            if self.registry.scope_of(activity) == ScopeEnum.SCOPE_1:
                scope1_total += co2e
            else:
                scope2_total += co2e
        total = scope1_total + scope2_total

        rows = [
            ActivityBreakdownRow(
                activity=activity,
                scope=self.registry.scope_of(activity),
                raw_total=raw_by_activity[activity],
                co2e=co2e,
                share_pct=ZERO if total == ZERO else co2e / total * HUNDRED,
            )
            for activity, co2e in co2e_by_activity.items()
        ]

        return ActivityBreakdown(
            rows=rows,
            totals=EmissionTotals(
                scope1_total=scope1_total, scope2_total=scope2_total, total=total
            ),
        )

    @quiet_decimal
    def baseline_total_for(
        self,
        baseline_year: int,
        periods: Sequence[AggregatedPeriod],
        baselines: Optional[Iterable[Baseline]] = None,
    ) -> Decimal:
        """
        Total the comparison is made against.

        Stored baselines for the year win; otherwise the year's own annual
        total is used; otherwise the configured fallback.
        """
        stored = [
            baseline.value
            for baseline in (baselines or [])
            if int(baseline.year) == baseline_year
        ]
        if stored:
            return sum(stored, ZERO)

        for period in periods:
            if period.year == baseline_year:
                return period.total

        logger.warning(
            f"No baseline found for {baseline_year}, using fallback "
            f"{self.fallback_baseline_total}"
        )
        return self.fallback_baseline_total

    @quiet_decimal
    def baseline_comparison(
        self,
        readings: Iterable[ActivityReading],
        baseline_year: int,
        baselines: Optional[Iterable[Baseline]] = None,
    ) -> BaselineComparison:
        """
        Annual rollup with each year's percentage change against a baseline year.

        pct_change = (year_total - baseline_total) / baseline_total * 100,
        reported as 0 when the baseline total is 0.
        """
        periods = self.annual_rollup(readings)
        baseline_total = self.baseline_total_for(baseline_year, periods, baselines)

        rows = [
            BaselineComparisonRow(
                **period.model_dump(),
                pct_change=percentage_change(period.total, baseline_total),
            )
            for period in periods
        ]

        return BaselineComparison(
            baseline_year=baseline_year,
            baseline_total=baseline_total,
            rows=rows,
        )

    @staticmethod
    @quiet_decimal
    def totals(periods: Iterable[AggregatedPeriod]) -> EmissionTotals:
        """Grand totals across periods, for the summary cards."""
        scope1_total = ZERO
        scope2_total = ZERO
        for period in periods:
            scope1_total += period.scope1_total
            scope2_total += period.scope2_total
        return EmissionTotals(
            scope1_total=scope1_total,
            scope2_total=scope2_total,
            total=scope1_total + scope2_total,
        )
