"""
Keeps a validation result in step with the store and holiday selection.

Every store change clears the current result first, so nobody can read a
result computed against state that has since changed. With auto_validate
on, the result is recomputed straight away from the delivered snapshot.
"""

import logging
from dataclasses import replace
from typing import Callable, List, Optional

from holiday_integration import HolidayIntegration
from settings import TrackerSettings
from signals import Signal
from store import DateStore, StoreSnapshot, StoreStatistics
from validator import ValidationResult, validate

logger = logging.getLogger(__name__)


class ComplianceMonitor:

    def __init__(
        self,
        store: DateStore,
        integration: HolidayIntegration,
        settings: TrackerSettings,
        auto_validate: bool = True,
    ):
        self._store = store
        self._integration = integration
        self._settings = settings
        self.auto_validate = auto_validate
        self._result: Optional[ValidationResult] = None

        self.validated = Signal("compliance.validated")
        self.invalidated = Signal("compliance.invalidated")

        self._unsubscribers: List[Callable[[], None]] = [
            store.subscribe(self._on_store_changed),
            integration.holidays_applied.connect(self._on_holidays_changed),
            integration.holidays_removed.connect(self._on_holidays_changed),
        ]

    @property
    def result(self) -> Optional[ValidationResult]:
        """Latest result, or None if state changed since the last run."""
        return self._result

    @property
    def settings(self) -> TrackerSettings:
        return self._settings

    def _run(self, snapshot: StoreSnapshot) -> ValidationResult:
        result = validate(
            snapshot.date_states,
            snapshot.date_range,
            self._integration.exclusions,
            self._settings.window_weeks,
            self._settings.min_compliant_days,
            self._settings.validation_mode,
        )
        self._result = result
        logger.debug("Validation: %s (%d windows)", result.message, result.windows_checked)
        self.validated.emit(result)
        return result

    def validate(self) -> ValidationResult:
        """Run a full scan against the current store state."""
        return self._run(self._store.snapshot())

    def _clear(self) -> None:
        if self._result is not None:
            self._result = None
            self.invalidated.emit()

    def _on_store_changed(self, snapshot: StoreSnapshot, stats: StoreStatistics) -> None:
        self._clear()
        if self.auto_validate:
            self._run(snapshot)

    def _on_holidays_changed(self, *args) -> None:
        self._clear()
        if self.auto_validate:
            self.validate()

    def update_policy(
        self,
        window_weeks: int,
        min_compliant_days: int,
        validation_mode: Optional[str] = None,
    ) -> ValidationResult:
        """Change the window policy (and optionally the mode) and re-run validation."""
        self._settings = replace(
            self._settings,
            window_weeks=window_weeks,
            min_compliant_days=min_compliant_days,
            validation_mode=validation_mode or self._settings.validation_mode,
        )
        self._clear()
        return self.validate()

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
