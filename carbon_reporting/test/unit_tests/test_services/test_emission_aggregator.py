"""
Service tests for emission aggregation.
"""

from decimal import Decimal

import pytest

from carbon_reporting.core.config import Config
from carbon_reporting.pydantic_models.activity_reading import ActivityReading
from carbon_reporting.pydantic_models.baseline import Baseline
from carbon_reporting.services.aggregators.emission_aggregator import (
    EmissionAggregator,
    month_index,
    percentage_change,
    resolve_baseline_year,
)
from carbon_reporting.services.normalizers.reading_normalizer import ReadingNormalizer
from carbon_reporting.services.registry.emission_factor_registry import (
    EmissionFactorRegistry,
)
from carbon_reporting.utils.constants import ActivityName, ScopeEnum


def reading(activity, year, value, month=None):
    return ActivityReading(activity=activity, year=year, month=month, value=Decimal(str(value)))


@pytest.fixture
def aggregator():
    return EmissionAggregator(EmissionFactorRegistry())


@pytest.fixture
def readings_2023():
    return [
        reading(ActivityName.GENERATOR_FUEL, 2023, 100, "Jan"),
        reading(ActivityName.ELECTRICITY, 2023, 200, "Jan"),
        reading(ActivityName.REFRIGERANT, 2023, 0, "Jan"),
    ]


def test_annual_rollup_example(aggregator, readings_2023):
    periods = aggregator.annual_rollup(readings_2023)

    assert len(periods) == 1
    period = periods[0]
    assert period.period_key == "2023"
    assert period.scope1_total == Decimal("376.1")
    assert period.scope2_total == Decimal("82.4")
    assert period.total == Decimal("458.5")
    assert period.by_activity[ActivityName.REFRIGERANT] == Decimal("0")


def test_annual_rollup_sorted_by_year(aggregator):
    readings = [
        reading(ActivityName.ELECTRICITY, 2024, 10),
        reading(ActivityName.ELECTRICITY, 2021, 10),
        reading(ActivityName.ELECTRICITY, 2023, 10),
    ]

    assert [period.year for period in aggregator.annual_rollup(readings)] == [2021, 2023, 2024]


def test_rollup_totals_match_reading_sum(aggregator):
    readings = [
        reading(ActivityName.GENERATOR_FUEL, 2022, "80.5", "Jan"),
        reading(ActivityName.ELECTRICITY, 2022, 5200, "Feb"),
        reading(ActivityName.REFRIGERANT, 2023, 15, "Mar"),
        reading(ActivityName.ELECTRICITY, 2023, "4870.25", "Dec"),
        reading("Diesel Forklift", 2023, 40, "Feb"),
    ]
    expected = sum((aggregator.co2e_of(r) for r in readings), Decimal("0"))

    annual = aggregator.annual_rollup(readings)
    monthly = aggregator.monthly_series(readings)

    assert sum((p.total for p in annual), Decimal("0")) == expected
    assert sum((p.total for p in monthly), Decimal("0")) == expected
    assert aggregator.activity_breakdown(readings).totals.total == expected
    for period in annual + monthly:
        assert period.total == period.scope1_total + period.scope2_total


def test_empty_readings(aggregator):
    assert aggregator.annual_rollup([]) == []
    assert aggregator.monthly_series([]) == []

    breakdown = aggregator.activity_breakdown([])
    assert breakdown.rows == []
    assert breakdown.totals.total == Decimal("0")


def test_nan_value_propagates_into_sum(aggregator):
    readings = [
        reading(ActivityName.ELECTRICITY, 2023, 100),
        ActivityReading(activity=ActivityName.ELECTRICITY, year=2023, value=Decimal("NaN")),
    ]

    period = aggregator.annual_rollup(readings)[0]

    assert period.scope2_total.is_nan()
    assert period.total.is_nan()
    assert period.scope1_total == Decimal("0")



def test_infinite_raw_value_breakdown_is_nan(aggregator):
    readings = ReadingNormalizer().normalize(
        [{"activity": ActivityName.ELECTRICITY, "year": 2023, "month": "Jan", "value": "Infinity"}]
    )

    breakdown = aggregator.activity_breakdown(readings)

    assert breakdown.rows[0].co2e.is_nan()
    assert breakdown.rows[0].share_pct.is_nan()
    assert breakdown.totals.total.is_nan()


def test_infinite_reading_of_untracked_activity_does_not_raise(aggregator):
    readings = [
        ActivityReading(activity="Forklift", year=2023, month="Jan", value=Decimal("Infinity")),
        reading(ActivityName.ELECTRICITY, 2023, 100, "Jan"),
    ]

    period = aggregator.annual_rollup(readings)[0]
    breakdown = aggregator.activity_breakdown(readings)

    assert period.total.is_nan()
    assert period.by_activity["Forklift"].is_nan()
    assert all(row.share_pct.is_nan() for row in breakdown.rows)


def test_overflowing_value_rolls_up_to_infinity(aggregator):
    readings = ReadingNormalizer().normalize(
        [{"activity": ActivityName.GENERATOR_FUEL, "year": 2023, "month": "Jan", "value": "9e999999"}]
    )

    period = aggregator.annual_rollup(readings)[0]
    comparison = aggregator.baseline_comparison(readings, 2023)

    assert period.scope1_total.is_infinite()
    assert period.total.is_infinite()
    assert comparison.rows[0].pct_change.is_nan()
    assert aggregator.totals([period]).total.is_infinite()


def test_monthly_series_calendar_order(aggregator):
    readings = [
        reading(ActivityName.ELECTRICITY, 2023, 1, "Dec"),
        reading(ActivityName.ELECTRICITY, 2023, 1, "Apr"),
        reading(ActivityName.ELECTRICITY, 2023, 1, "Aug"),
        reading(ActivityName.ELECTRICITY, 2023, 1, "Feb"),
        reading(ActivityName.ELECTRICITY, 2022, 1, "Nov"),
        reading(ActivityName.ELECTRICITY, 2023, 1, None),
    ]

    periods = aggregator.monthly_series(readings)

    assert [period.period_key for period in periods] == [
        "2022-Nov",
        "2023-Feb",
        "2023-Apr",
        "2023-Aug",
        "2023-Dec",
        "2023-Unknown",
    ]


def test_monthly_series_keeps_years_apart(aggregator):
    readings = [
        reading(ActivityName.ELECTRICITY, 2022, 100, "Jan"),
        reading(ActivityName.ELECTRICITY, 2023, 100, "Jan"),
    ]

    periods = aggregator.monthly_series(readings)

    assert len(periods) == 2
    assert all(period.total == Decimal("41.2") for period in periods)


def test_month_index():
    assert month_index("Jan") == 1
    assert month_index("Dec") == 12
    assert month_index("Smarch") == 13
    assert month_index(None) == 13


def test_activity_breakdown(aggregator, readings_2023):
    breakdown = aggregator.activity_breakdown(
        readings_2023 + [reading(ActivityName.ELECTRICITY, 2022, 300, "Feb")]
    )

    rows = {row.activity: row for row in breakdown.rows}
    assert rows[ActivityName.ELECTRICITY].raw_total == Decimal("500")
    assert rows[ActivityName.ELECTRICITY].co2e == Decimal("206.000")
    assert rows[ActivityName.ELECTRICITY].scope == ScopeEnum.SCOPE_2
    assert rows[ActivityName.GENERATOR_FUEL].scope == ScopeEnum.SCOPE_1
    assert breakdown.totals.total == Decimal("582.100")
    assert sum((row.share_pct for row in breakdown.rows), Decimal("0")) == pytest.approx(
        Decimal("100")
    )


def test_untracked_activity_included_at_zero_share(aggregator):
    readings = [
        reading(ActivityName.ELECTRICITY, 2023, 100),
        reading("Diesel Forklift", 2023, 40),
    ]

    rows = {row.activity: row for row in aggregator.activity_breakdown(readings).rows}

    assert rows["Diesel Forklift"].co2e == Decimal("0")
    assert rows["Diesel Forklift"].share_pct == Decimal("0")
    assert rows[ActivityName.ELECTRICITY].share_pct == Decimal("100")


def test_untracked_activity_excluded_when_configured():
    aggregator = EmissionAggregator(EmissionFactorRegistry(), include_untracked=False)
    readings = [
        reading(ActivityName.ELECTRICITY, 2023, 100),
        reading("Diesel Forklift", 2023, 40),
    ]

    breakdown = aggregator.activity_breakdown(readings)

    assert [row.activity for row in breakdown.rows] == [ActivityName.ELECTRICITY]


def test_breakdown_share_zero_when_total_zero(aggregator):
    breakdown = aggregator.activity_breakdown([reading("Diesel Forklift", 2023, 40)])

    assert breakdown.rows[0].share_pct == Decimal("0")


def test_percentage_change():
    assert percentage_change(Decimal("120"), Decimal("100")) == Decimal("20")
    assert percentage_change(Decimal("80"), Decimal("100")) == Decimal("-20")
    assert percentage_change(Decimal("120"), Decimal("0")) == Decimal("0")


def test_baseline_comparison_against_rollup_year(aggregator):
    readings = [
        reading(ActivityName.ELECTRICITY, 2022, 1000),
        reading(ActivityName.ELECTRICITY, 2023, 1200),
    ]

    comparison = aggregator.baseline_comparison(readings, 2022)

    assert comparison.baseline_year == 2022
    assert comparison.baseline_total == Decimal("412.000")
    assert [row.pct_change for row in comparison.rows] == [Decimal("0"), Decimal("20")]


def test_baseline_comparison_prefers_stored_baselines(aggregator):
    readings = [reading(ActivityName.ELECTRICITY, 2023, 1000)]
    baselines = [
        Baseline(activity_name=ActivityName.ELECTRICITY, year=2022, value=Decimal("200")),
        Baseline(activity_name=ActivityName.GENERATOR_FUEL, year=2022, value=Decimal("212")),
        Baseline(activity_name=ActivityName.GENERATOR_FUEL, year=2021, value=Decimal("999")),
    ]

    comparison = aggregator.baseline_comparison(readings, 2022, baselines)

    assert comparison.baseline_total == Decimal("412")
    assert comparison.rows[0].pct_change == Decimal("0")


def test_baseline_comparison_without_baseline_uses_fallback():
    aggregator = EmissionAggregator(
        EmissionFactorRegistry(), fallback_baseline_total=Decimal("4000")
    )
    readings = [reading(ActivityName.ELECTRICITY, 2023, 10000)]

    comparison = aggregator.baseline_comparison(readings, 2019)

    assert comparison.baseline_total == Decimal("4000")
    assert comparison.rows[0].pct_change == Decimal("3")


def test_baseline_comparison_zero_fallback(aggregator):
    comparison = aggregator.baseline_comparison([reading(ActivityName.ELECTRICITY, 2023, 10)], 2019)

    assert comparison.baseline_total == Decimal("0")
    assert comparison.rows[0].pct_change == Decimal("0")


def test_resolve_baseline_year():
    assert resolve_baseline_year(2020, [2022, 2023]) == 2020
    assert resolve_baseline_year(None, [2021, 2022]) == 2022
    assert resolve_baseline_year(None, [2023, 2021]) == 2021
    assert resolve_baseline_year(None, []) == 2022
    assert resolve_baseline_year(None, [], default=2019) == 2019


def test_totals(aggregator, readings_2023):
    totals = aggregator.totals(aggregator.annual_rollup(readings_2023))

    assert totals.scope1_total == Decimal("376.1")
    assert totals.total == Decimal("458.5")


def test_from_config():
    config = Config(
        {
            "aggregation": {"include_untracked_activities": False},
            "baseline": {"fallback_total": 4000},
        },
        "custom.toml",
    )

    aggregator = EmissionAggregator.from_config(config, EmissionFactorRegistry())

    assert aggregator.include_untracked is False
    assert aggregator.fallback_baseline_total == Decimal("4000")
