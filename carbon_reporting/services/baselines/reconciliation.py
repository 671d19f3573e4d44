"""
Baseline reconciliation service.

Drives a single operator submission of a baseline value through validation,
duplicate detection against the last fetched snapshot, and an explicit
confirm-or-cancel step before an existing baseline is overwritten.

The duplicate check runs against a point-in-time snapshot of the store, so the
one-record-per-key guarantee only holds for writes made through this service.
"""

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, Protocol

from carbon_reporting.core.config import Config
from carbon_reporting.pydantic_models.baseline import (
    Baseline,
    BaselineForm,
    SubmissionOutcome,
    SubmissionState,
    normalize_activity_key,
)
from carbon_reporting.utils.constants import BaselineDefaults

logger = logging.getLogger(__name__)


class BaselineStore(Protocol):
    """Read and write access to stored baselines."""

    async def list_baselines(self) -> list[Baseline]:
        ...

    async def upsert_baseline(self, baseline: Baseline) -> Baseline:
        ...


class BaselineStateError(Exception):
    """Raised when an action is not allowed in the current submission state."""

    def __init__(self, action: str, state: SubmissionState):
        self.action = action
        self.state = state
        super().__init__(f"Cannot {action} a baseline submission in state {state.value!r}")


def parse_baseline_value(raw) -> Optional[Decimal]:
    """Parse the typed value, None when it is empty, non-numeric or not finite."""
    if raw is None or isinstance(raw, bool):
        return None
    text = str(raw).strip()
    if not text:
        return None
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value


class BaselineReconciliationService:
    """
    Upsert-with-confirmation workflow for baseline values.

    States: IDLE -> VALIDATING -> (INSERTING | CONFLICT_PENDING) -> (SAVED | CANCELLED).
    A failed insert returns to IDLE.
    """

    RESTING_STATES = (
        SubmissionState.IDLE,
        SubmissionState.SAVED,
        SubmissionState.CANCELLED,
    )

    def __init__(
        self,
        store: BaselineStore,
        min_year: int = BaselineDefaults.MIN_YEAR,
        max_year: int = BaselineDefaults.MAX_YEAR,
    ):
        self.store = store
        self.min_year = min_year
        self.max_year = max_year

        self.state = SubmissionState.IDLE
        self.form = self._blank_form()
        self.snapshot: list[Baseline] = []
        self.last_error: Optional[str] = None

        self._pending: Optional[SubmissionOutcome] = None

    @classmethod
    def from_config(cls, config: Config, store: BaselineStore) -> "BaselineReconciliationService":
        baseline = config.section("baseline")
        return cls(
            store,
            min_year=baseline.get("min_year", BaselineDefaults.MIN_YEAR),
            max_year=baseline.get("max_year", BaselineDefaults.MAX_YEAR),
        )

    @staticmethod
    def _blank_form() -> BaselineForm:
        return BaselineForm(activity_name="", year=date.today().year, value="")

    def reset_form(self) -> None:
        self.form = self._blank_form()

    async def refresh(self) -> list[Baseline]:
        """
        Re-fetch the baseline snapshot.

        A failed fetch clears the snapshot and records the error; it never
        raises.
        """
        try:
            self.snapshot = list(await self.store.list_baselines())
        except Exception as e:
            logger.error(f"Error fetching baselines: {e}")
            self.snapshot = []
            self.last_error = "Failed to load baselines."
        return self.snapshot

    def find_existing(self, activity_name: str, year: int) -> Optional[Baseline]:
        """Stored baseline with the same trimmed, case-insensitive name and year."""
        key = (normalize_activity_key(activity_name), int(year))
        for baseline in self.snapshot:
            if baseline.key == key:
                return baseline
        return None

    def validate(self, form: BaselineForm) -> Optional[str]:
        """Return a validation message, or None when the form is valid."""
        if not form.activity_name or not form.activity_name.strip():
            return "Please select an activity."
        if not form.year or form.year < self.min_year or form.year > self.max_year:
            return "Please enter a valid year."
        value = parse_baseline_value(form.value)
        if value is None or value < 0:
            return "Please enter a valid positive number for the baseline value."
        return None

    async def submit(self, form: Optional[BaselineForm] = None) -> SubmissionOutcome:
        """
        Submit the form.

        Returns an IDLE outcome with a message when validation fails, a
        CONFLICT_PENDING outcome when a baseline already exists for the key, or
        the result of writing the new baseline.
        """
        if self.state not in self.RESTING_STATES:
            raise BaselineStateError("submit", self.state)

        if form is not None:
            self.form = form

        self.state = SubmissionState.VALIDATING
        error = self.validate(self.form)
        if error:
            logger.info(f"Baseline submission rejected: {error}")
            self.state = SubmissionState.IDLE
            return SubmissionOutcome(state=self.state, message=error)

        proposed = Baseline(
            activity_name=self.form.activity_name.strip(),
            year=self.form.year,
            value=parse_baseline_value(self.form.value),
        )

        existing = self.find_existing(proposed.activity_name, proposed.year)
        if existing is None:
            return await self._insert(proposed)

        logger.info(
            f"Baseline already exists for {existing.activity_name} in {existing.year}: "
            f"{existing.value} (proposed {proposed.value})"
        )
        self.state = SubmissionState.CONFLICT_PENDING
        self._pending = SubmissionOutcome(
            state=self.state,
            message=(
                f"A baseline value already exists for {proposed.activity_name} "
                f"in {proposed.year}. Do you want to update it?"
            ),
            existing=existing,
            proposed=proposed,
        )
        return self._pending

    async def confirm(self) -> SubmissionOutcome:
        """Overwrite the conflicting baseline with the proposed value."""
        if self.state != SubmissionState.CONFLICT_PENDING:
            raise BaselineStateError("confirm", self.state)

        pending = self._pending
        # keep the stored spelling so the write lands on the same key
        proposed = pending.proposed.model_copy(
            update={"activity_name": pending.existing.activity_name}
        )
        return await self._insert(proposed)

    def cancel(self) -> SubmissionOutcome:
        """Abandon the overwrite; the form keeps what the operator typed."""
        if self.state != SubmissionState.CONFLICT_PENDING:
            raise BaselineStateError("cancel", self.state)

        pending = self._pending
        self._pending = None
        self.state = SubmissionState.CANCELLED
        logger.info("Baseline update cancelled")
        return SubmissionOutcome(
            state=self.state,
            message="Update cancelled. No changes were made.",
            existing=pending.existing,
            proposed=pending.proposed,
        )

    async def _insert(self, baseline: Baseline) -> SubmissionOutcome:
        self.state = SubmissionState.INSERTING
        self._pending = None
        logger.info(
            f"Saving baseline {baseline.activity_name} {baseline.year}: {baseline.value}"
        )

        try:
            saved = await self.store.upsert_baseline(baseline)
        except Exception as e:
            logger.error(f"Error saving baseline: {e}")
            self.state = SubmissionState.IDLE
            self.last_error = "Failed to save baseline value. Please try again."
            return SubmissionOutcome(state=self.state, message=self.last_error, proposed=baseline)

        self.state = SubmissionState.SAVED
        self.last_error = None
        self.reset_form()
        await self.refresh()
        return SubmissionOutcome(
            state=self.state,
            message="Baseline value saved successfully!",
            saved=saved,
        )
