"""
Application constants.
"""
from decimal import Decimal
from enum import Enum


class ConfigFile:
    """Configuration file names."""
    PRODUCTION = "production.toml"
    DEVELOPMENT = "development.toml"
    TEST = "test.toml"


class ActivityName:
    """Activity names tracked by the default emission factor set."""
    GENERATOR_FUEL = "Generator Fuel Consumption"
    REFRIGERANT = "Refrigerant Leakages/Refilling"
    ELECTRICITY = "Electricity Consumption"


class ScopeEnum(int, Enum):
    """GHG Protocol scope enum carried with every emission factor."""
    SCOPE_1 = 1
    SCOPE_2 = 2


# Substrings that mark a free-text activity name as a direct (Scope 1) source
SCOPE_1_MARKERS = ("Generator", "Refrigerant")


class MonthEnum(str, Enum):
    """Abbreviated month names as stored on readings."""
    JAN = "Jan"
    FEB = "Feb"
    MAR = "Mar"
    APR = "Apr"
    MAY = "May"
    JUN = "Jun"
    JUL = "Jul"
    AUG = "Aug"
    SEP = "Sep"
    OCT = "Oct"
    NOV = "Nov"
    DEC = "Dec"


MONTH_ORDER = {
    "Jan": 1, "Feb": 2, "Mar": 3, "Apr": 4, "May": 5, "Jun": 6,
    "Jul": 7, "Aug": 8, "Sep": 9, "Oct": 10, "Nov": 11, "Dec": 12,
}

# Months outside the table sort after December
UNKNOWN_MONTH_INDEX = 13


class BaselineDefaults:
    """Defaults for baseline validation and comparison."""
    MIN_YEAR = 1900
    MAX_YEAR = 2100
    DEFAULT_YEAR = 2022
    FALLBACK_TOTAL = Decimal("0")


DEFAULT_SUGGESTION_THRESHOLD = 80

NOTHING_TO_EXPORT = "Nothing to export"


class ExportHeaders:
    """Header rows for CSV exports."""
    ANNUAL = ["Year", "Scope 1 (KgCO2e)", "Scope 2 (KgCO2e)", "Total (KgCO2e)"]
    MONTHLY = [
        "Year",
        "Month",
        "Scope 1 (KgCO2e)",
        "Scope 2 (KgCO2e)",
        "Total (KgCO2e)",
    ]
    BREAKDOWN = ["Activity", "Scope", "Raw Total", "CO2e (KgCO2e)", "Share (%)"]
    READINGS = ["Activity", "Year", "Month", "Value", "CO2e (KgCO2e)"]
