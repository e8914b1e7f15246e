"""
Public holiday lookup for compliance exclusions.

HolidayProvider is the contract the rest of the tracker depends on.
HolidaysLibProvider serves it from the `holidays` package, optionally
narrowed to the holidays a given company observes.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Set, Tuple

import holidays

from dates import is_weekend
from errors import HolidayLookupError

logger = logging.getLogger(__name__)

OBSERVED_SUFFIX = " (observed)"

# Company -> holiday names the company gives off, per country code.
# Names follow the English names used by the holidays package.
COMPANY_FILTERS: Dict[str, Dict[str, List[str]]] = {
    "US": {
        "Contoso": [
            "New Year's Day",
            "Memorial Day",
            "Independence Day",
            "Labor Day",
            "Thanksgiving Day",
            "Christmas Day",
        ],
        "Fabrikam": [
            "New Year's Day",
            "Martin Luther King Jr. Day",
            "Memorial Day",
            "Juneteenth National Independence Day",
            "Independence Day",
            "Labor Day",
            "Thanksgiving Day",
            "Christmas Day",
        ],
    },
    "GB": {
        "Contoso": [
            "New Year's Day",
            "Good Friday",
            "Easter Monday",
            "Christmas Day",
            "Boxing Day",
        ],
    },
}


@dataclass(frozen=True)
class HolidayInfo:
    date: date
    name: str
    country_code: str
    is_weekday: bool


@dataclass
class HolidayResult:
    country_code: Optional[str]
    company_name: Optional[str]
    years: List[int]
    holidays: List[HolidayInfo] = field(default_factory=list)
    filtered_count: int = 0

    # Counts are per day: two holidays sharing a date mark one day off

    @property
    def total(self) -> int:
        return len(self.dates())

    @property
    def weekday_count(self) -> int:
        return len({h.date for h in self.holidays if h.is_weekday})

    def dates(self) -> Set[str]:
        return {h.date.isoformat() for h in self.holidays}


class HolidayProvider(ABC):
    """Source of holiday exclusion dates."""

    @abstractmethod
    async def get_holiday_dates(
        self,
        country_code: Optional[str],
        company_name: Optional[str],
        years: Iterable[int],
        weekdays_only: bool = False,
    ) -> Set[str]:
        """Return ISO dates of holidays for the selector and years."""


def _base_name(name: str) -> str:
    if name.endswith(OBSERVED_SUFFIX):
        return name[: -len(OBSERVED_SUFFIX)]
    return name


class HolidaysLibProvider(HolidayProvider):
    """
    Holiday provider backed by the holidays package.

    Lookups run in a worker thread and are cached per
    (country, company, years, weekdays_only).
    """

    def __init__(self, company_filters: Optional[Dict[str, Dict[str, List[str]]]] = None):
        self._company_filters = COMPANY_FILTERS if company_filters is None else company_filters
        self._cache: Dict[Tuple, HolidayResult] = {}

    def clear_cache(self) -> None:
        self._cache.clear()

    # ── companies / countries ────────────────────────────────────────────

    def get_available_companies(self, country_code: str) -> List[str]:
        return sorted(self._company_filters.get(country_code, {}))

    def has_company_filters(self, country_code: str) -> bool:
        return bool(self._company_filters.get(country_code))

    def get_available_countries(self) -> List[str]:
        return sorted(holidays.list_supported_countries())

    def _company_holidays(self, country_code: str, company_name: Optional[str]) -> Optional[Set[str]]:
        if not company_name:
            return None
        names = self._company_filters.get(country_code, {}).get(company_name)
        if names is None:
            logger.info("No holiday filter for %s in %s; using all holidays", company_name, country_code)
            return None
        return set(names)

    # ── lookups ──────────────────────────────────────────────────────────

    @staticmethod
    def _lookup(country_code: str, years: List[int]) -> List[Tuple[date, str]]:
        try:
            calendar = holidays.country_holidays(country_code, years=years)
        except NotImplementedError as e:
            raise HolidayLookupError(f"Country {country_code!r} is not supported") from e
        entries = []
        for day, names in sorted(calendar.items()):
            # Several holidays on one day come back joined with "; "
            for name in names.split("; "):
                entries.append((day, name))
        return entries

    async def fetch_holidays(
        self,
        country_code: Optional[str],
        company_name: Optional[str],
        years: Iterable[int],
        weekdays_only: bool = False,
    ) -> HolidayResult:
        """
        Fetch holidays for a country, optionally narrowed to a company.

        Args:
            country_code: ISO country code; empty or None yields no holidays
            company_name: Company whose holiday list to apply (None for all)
            years: Calendar years to cover
            weekdays_only: Drop holidays that fall on Saturday or Sunday

        Returns:
            HolidayResult

        Raises:
            HolidayLookupError: If the country is not supported
        """
        years = sorted(set(years))
        company_name = company_name or None
        if not country_code:
            return HolidayResult(None, company_name, years)

        key = (country_code, company_name, tuple(years), weekdays_only)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        entries = await asyncio.to_thread(self._lookup, country_code, years)
        company_holidays = self._company_holidays(country_code, company_name)

        infos = []
        filtered = 0
        seen = set()
        for day, name in entries:
            if company_holidays is not None and _base_name(name) not in company_holidays:
                filtered += 1
                continue
            info = HolidayInfo(day, name, country_code, not is_weekend(day))
            if weekdays_only and not info.is_weekday:
                continue
            if (day, name) in seen:
                continue
            seen.add((day, name))
            infos.append(info)

        result = HolidayResult(country_code, company_name, years, infos, filtered)
        self._cache[key] = result
        logger.debug("Cached %s", self.summary(result))
        return result

    async def get_holiday_dates(
        self,
        country_code: Optional[str],
        company_name: Optional[str],
        years: Iterable[int],
        weekdays_only: bool = False,
    ) -> Set[str]:
        result = await self.fetch_holidays(country_code, company_name, years, weekdays_only)
        return result.dates()

    async def is_holiday(self, day: date, country_code: str, company_name: Optional[str] = None) -> bool:
        dates = await self.get_holiday_dates(country_code, company_name, [day.year])
        return day.isoformat() in dates

    @staticmethod
    def summary(result: HolidayResult) -> str:
        """One-line description of a lookup result."""
        if result.total == 0:
            return f"No holidays found for {result.country_code}"
        plural = "s" if result.total != 1 else ""
        text = f"{result.total} holiday{plural} found for {result.country_code}"
        if result.weekday_count > 0:
            text += f" ({result.weekday_count} on weekdays)"
        if result.company_name:
            text += f" filtered by {result.company_name}"
        return text
