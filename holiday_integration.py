"""
Applies holiday selections to the date store.

Consumes "settings changed" events carrying a holiday selector and emits
`holidays_applied` / `holidays_removed` for anything that needs to react,
such as re-running validation. Lookup failures never escape: they
degrade to an empty exclusion set with a warning.
"""

import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional

from dates import is_date_in_range, is_weekend, to_date
from holiday_provider import HolidayProvider
from signals import Signal
from states import DateState
from store import DateStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HolidaySelector:
    country_code: Optional[str] = None
    company_name: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.country_code


class HolidayIntegration:

    def __init__(self, store: DateStore, provider: HolidayProvider):
        self._store = store
        self._provider = provider
        self._selector = HolidaySelector()
        self._exclusions: FrozenSet[str] = frozenset()
        self._marked: FrozenSet[str] = frozenset()
        self._generation = 0

        self.holidays_applied = Signal("holidays.applied")
        self.holidays_removed = Signal("holidays.removed")

    @property
    def selector(self) -> HolidaySelector:
        return self._selector

    @property
    def exclusions(self) -> FrozenSet[str]:
        """Weekday holiday dates (ISO) excluded from validation."""
        return self._exclusions

    async def _lookup(self, selector: HolidaySelector, years: List[int]):
        try:
            return await self._provider.get_holiday_dates(
                selector.country_code, selector.company_name, years
            )
        except Exception as e:
            logger.warning(
                "Holiday lookup failed for %s (%s): %s; continuing without holidays",
                selector.country_code, selector.company_name or "all holidays", e,
            )
            return set()

    async def apply(self, selector: HolidaySelector, years: Optional[Iterable[int]] = None) -> bool:
        """
        Fetch holidays for the selector and mark them in the store.

        Args:
            selector: Country and optional company
            years: Years to fetch (defaults to the years the store range spans)

        Returns:
            False if a newer request superseded this one before it finished
        """
        self._generation += 1
        generation = self._generation

        if years is None:
            years = self._store.get_date_range().years()
        years = sorted(set(years))

        if selector.is_empty:
            all_dates = set()
        else:
            all_dates = await self._lookup(selector, years)

        if generation != self._generation:
            logger.debug("Discarding stale holiday result for %s", selector.country_code)
            return False

        date_range = self._store.get_date_range()
        in_range = [to_date(d) for d in all_dates if is_date_in_range(d, date_range)]

        self._selector = selector
        self._exclusions = frozenset(d.isoformat() for d in in_range if not is_weekend(d))
        if all_dates:
            self._store.mark_dates(sorted(all_dates), DateState.HOLIDAY)
        # Out-of-range dates were skipped by the store
        self._marked = frozenset(
            d for d in all_dates if self._store.get_date_state(d) is DateState.HOLIDAY
        )

        logger.info(
            "Applied %d holidays for %s (%s), years %s",
            len(self._marked), selector.country_code,
            selector.company_name or "all holidays", years,
        )
        self.holidays_applied.emit(selector, years, self._exclusions)
        return True

    def remove(self) -> None:
        """Clear applied holiday marks and exclusions."""
        # A pending apply must not land after a removal
        self._generation += 1

        still_holiday = [d for d in self._marked if self._store.get_date_state(d) is DateState.HOLIDAY]

        # Reset before touching the store so listeners never see the old exclusions
        self._selector = HolidaySelector()
        self._exclusions = frozenset()
        self._marked = frozenset()

        if still_holiday:
            self._store.clear_dates(still_holiday)
        self.holidays_removed.emit()

    async def on_settings_changed(self, selector: Optional[HolidaySelector]) -> None:
        """React to a settings change: drop current holidays, apply the new ones."""
        if selector is None:
            return
        self.remove()
        if not selector.is_empty:
            await self.apply(selector)
