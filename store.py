"""
In-memory date state store.

Owns the mapping from ISO date to work-location state and the active
marking mode. Nothing is persisted; the store lives as long as its owner.
Priority on unforced writes: holiday > oof > working.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from dates import DateLike, DateRange, default_range, to_date
from errors import OutOfRangeError
from signals import Signal
from states import DateState, MarkingMode, coerce_mode, coerce_state, next_mode, rank

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreStatistics:
    working_days: int = 0
    oof_days: int = 0
    holiday_days: int = 0

    @property
    def total_marked_days(self) -> int:
        return self.working_days + self.oof_days + self.holiday_days


@dataclass(frozen=True)
class StoreSnapshot:
    """Read-only copy of the store handed to listeners."""

    date_states: Mapping[str, DateState]
    marking_mode: MarkingMode
    date_range: DateRange


StoreListener = Callable[[StoreSnapshot, StoreStatistics], None]


class DateStore:

    def __init__(
        self,
        date_range: Optional[DateRange] = None,
        marking_mode: MarkingMode = DateState.WORKING,
    ):
        self._date_states: Dict[str, DateState] = {}
        self._date_range = date_range or default_range()
        self._marking_mode = coerce_mode(marking_mode)
        self.changed = Signal("store.changed")

    # ── writes ───────────────────────────────────────────────────────────

    def _write(self, value: DateLike, state: DateState, force: bool) -> bool:
        """Apply one write without notifying. Returns True if it was stored."""
        day = to_date(value)
        iso = day.isoformat()
        if not self._date_range.contains(day):
            raise OutOfRangeError(iso, self._date_range)

        current = self._date_states.get(iso)
        if current is not None and not force and rank(current) > rank(state):
            # A stickier state is already there
            return False

        self._date_states[iso] = state
        return True

    def mark_date(self, value: DateLike, state, force: bool = False) -> None:
        """
        Mark a date with a state.

        Args:
            value: date, datetime or YYYY-MM-DD string
            state: DateState (or its string value)
            force: Overwrite even a higher-priority existing state

        Raises:
            InvalidDateError: If the date cannot be normalized
            OutOfRangeError: If the date is outside the store's range
        """
        state = coerce_state(state)
        if self._write(value, state, force):
            self._notify()

    def mark_dates(self, values: Iterable[DateLike], state) -> int:
        """
        Force-mark several dates, skipping those outside the range.

        Exactly one notification fires after the batch.

        Returns:
            Number of dates written
        """
        state = coerce_state(state)
        written = 0
        try:
            for value in values:
                try:
                    self._write(value, state, force=True)
                    written += 1
                except OutOfRangeError as e:
                    logger.debug("Skipping %s in batch: outside range", e.iso_date)
        finally:
            # Dates written before an aborting error are already stored
            self._notify()
        return written

    def clear_date(self, value: DateLike) -> None:
        iso = to_date(value).isoformat()
        self._date_states.pop(iso, None)
        self._notify()

    def clear_dates(self, values: Iterable[DateLike]) -> None:
        for value in values:
            self._date_states.pop(to_date(value).isoformat(), None)
        self._notify()

    def clear_all(self) -> None:
        self._date_states.clear()
        self._notify()

    def set_date_range(self, date_range: DateRange) -> None:
        """Replace the range, dropping marks that fall outside it."""
        self._date_range = date_range
        for iso in [k for k in self._date_states if not date_range.contains(to_date(k))]:
            del self._date_states[iso]
        self._notify()

    # ── marking mode ─────────────────────────────────────────────────────

    def set_marking_mode(self, mode: MarkingMode) -> None:
        self._marking_mode = coerce_mode(mode)
        self._notify()

    def get_marking_mode(self) -> MarkingMode:
        return self._marking_mode

    def cycle_marking_mode(self) -> MarkingMode:
        """Advance working -> oof -> holiday -> working and return the new mode."""
        mode = next_mode(self._marking_mode)
        self.set_marking_mode(mode)
        return mode

    # ── reads ────────────────────────────────────────────────────────────

    def get_date_state(self, value: DateLike) -> Optional[DateState]:
        """Get the state of a date, or None when unmarked."""
        return self._date_states.get(to_date(value).isoformat())

    def get_marked_dates(self) -> List[Tuple[str, DateState]]:
        return sorted(self._date_states.items())

    def get_dates_by_state(self, state) -> List[str]:
        state = coerce_state(state)
        return sorted(iso for iso, s in self._date_states.items() if s is state)

    def get_date_range(self) -> DateRange:
        return self._date_range

    def get_statistics(self) -> StoreStatistics:
        working = oof = holiday = 0
        for state in self._date_states.values():
            if state is DateState.WORKING:
                working += 1
            elif state is DateState.OOF:
                oof += 1
            elif state is DateState.HOLIDAY:
                holiday += 1
        return StoreStatistics(working, oof, holiday)

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(
            date_states=MappingProxyType(dict(self._date_states)),
            marking_mode=self._marking_mode,
            date_range=self._date_range,
        )

    # ── notifications ────────────────────────────────────────────────────

    def subscribe(self, callback: StoreListener) -> Callable[[], None]:
        """
        Register a listener and call it once with the current state.

        Returns:
            Unsubscribe function
        """
        unsubscribe = self.changed.connect(callback)
        try:
            callback(self.snapshot(), self.get_statistics())
        except Exception:
            logger.exception("Store listener %r failed on subscribe", callback)
        return unsubscribe

    def _notify(self) -> None:
        self.changed.emit(self.snapshot(), self.get_statistics())

    def __len__(self) -> int:
        return len(self._date_states)
