"""
Emission factor registry.

Immutable mapping from activity name to emission factor and scope. Built once
per deployment (from configuration or the default set) and injected into the
aggregation pipeline.
"""

import logging
from decimal import Decimal
from types import MappingProxyType
from typing import Iterable, Iterator, Optional

from rapidfuzz import fuzz, process

from carbon_reporting.core.config import Config
from carbon_reporting.pydantic_models.emission_factor import (
    EmissionFactor,
    EmissionFactorLookup,
)
from carbon_reporting.utils.constants import (
    DEFAULT_SUGGESTION_THRESHOLD,
    SCOPE_1_MARKERS,
    ActivityName,
    ScopeEnum,
)

logger = logging.getLogger(__name__)


DEFAULT_EMISSION_FACTORS = (
    EmissionFactor(
        activity_name=ActivityName.GENERATOR_FUEL,
        factor=Decimal("3.761"),
        scope=ScopeEnum.SCOPE_1,
        unit="litres",
        source="SEFR (Singapore Emission Factors Registry)",
        category="Direct Combustion",
        description="Diesel fuel combustion in backup generators",
    ),
    EmissionFactor(
        activity_name=ActivityName.REFRIGERANT,
        factor=Decimal("1.000"),
        scope=ScopeEnum.SCOPE_1,
        unit="litres",
        source="Carrier Centrifugal Chiller Spec",
        category="Fugitive Emissions",
        description="HFC refrigerant leakage and refilling",
    ),
    EmissionFactor(
        activity_name=ActivityName.ELECTRICITY,
        factor=Decimal("0.412"),
        scope=ScopeEnum.SCOPE_2,
        unit="kWh",
        source="Singapore EMA - Energy Statistics 2023",
        category="Purchased Electricity",
        description="Grid electricity for HVAC systems",
    ),
)


def classify_scope_by_name(activity_name: str) -> ScopeEnum:
    """
    Classify a free-text activity name by substring.

    Names mentioning a generator or refrigerant are direct (Scope 1) sources,
    everything else is purchased energy (Scope 2).
    """
    if any(marker in activity_name for marker in SCOPE_1_MARKERS):
        return ScopeEnum.SCOPE_1
    return ScopeEnum.SCOPE_2


class EmissionFactorRegistry:
    """
    Read-only registry of emission factors keyed by exact activity name.

    Lookups are case-sensitive. Unknown activities have a factor of 0 and are
    classified with the substring rule.
    """

    def __init__(
        self,
        factors: Iterable[EmissionFactor] = DEFAULT_EMISSION_FACTORS,
        suggestion_threshold: int = DEFAULT_SUGGESTION_THRESHOLD,
    ):
        by_name = {}
        for factor in factors:
            if factor.activity_name in by_name:
                raise ValueError(f"Duplicate emission factor for {factor.activity_name!r}")
            by_name[factor.activity_name] = factor

        self._factors = MappingProxyType(by_name)
        self.suggestion_threshold = suggestion_threshold

    @classmethod
    def from_config(cls, config: Config) -> "EmissionFactorRegistry":
        """
        Build a registry from the ``[[emission_factors]]`` tables of a config.

        Falls back to the default factor set when the config defines none.
        """
        threshold = config.section("aggregation").get(
            "suggestion_threshold", DEFAULT_SUGGESTION_THRESHOLD
        )
        entries = config.data.get("emission_factors")
        if not entries:
            logger.info("No emission factors configured, using defaults")
            return cls(DEFAULT_EMISSION_FACTORS, suggestion_threshold=threshold)

        factors = [EmissionFactor.model_validate(entry) for entry in entries]
        logger.info(f"Loaded {len(factors)} emission factors from {config.config_file}")
        return cls(factors, suggestion_threshold=threshold)

    def __iter__(self) -> Iterator[EmissionFactor]:
        return iter(self._factors.values())

    def __len__(self) -> int:
        return len(self._factors)

    def __contains__(self, activity_name: object) -> bool:
        return activity_name in self._factors

    def get(self, activity_name: str) -> Optional[EmissionFactor]:
        return self._factors.get(activity_name)

    def is_tracked(self, activity_name: str) -> bool:
        return activity_name in self._factors

    def factor_of(self, activity_name: str) -> Decimal:
        """Factor for an exact activity name, 0 when the name is not registered."""
        factor = self._factors.get(activity_name)
        if factor is None:
            return Decimal("0")
        return factor.factor

    def scope_of(self, activity_name: str) -> ScopeEnum:
        """Scope tag of a registered activity, else the substring classification."""
        factor = self._factors.get(activity_name)
        if factor is not None:
            return factor.scope
        return classify_scope_by_name(activity_name)

    def suggest(self, activity_name: str) -> Optional[str]:
        """
        Closest registered activity name for an untracked one.

        Returns None for tracked names, empty input, or when nothing scores
        above the suggestion threshold.
        """
        if not activity_name or activity_name in self._factors or not self._factors:
            return None

        match = process.extractOne(
            activity_name,
            list(self._factors.keys()),
            scorer=fuzz.token_sort_ratio,
            processor=str.lower,
        )
        if match is None:
            return None

        matched_name, score, _ = match
        if score < self.suggestion_threshold:
            return None
        return matched_name

    def lookup(self, activity_name: str) -> EmissionFactorLookup:
        """Resolve a name to its factor, scope and, if untracked, a suggestion."""
        return EmissionFactorLookup(
            activity_name=activity_name,
            tracked=self.is_tracked(activity_name),
            factor=self.factor_of(activity_name),
            scope=self.scope_of(activity_name),
            suggestion=self.suggest(activity_name),
        )
