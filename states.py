"""
Work-location states, their priority and their display vocabulary.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from errors import InvalidModeError


class DateState(str, Enum):
    WORKING = "working"
    OOF = "oof"
    HOLIDAY = "holiday"


# The marking mode paints with the same vocabulary as the stored states
MarkingMode = DateState

# Cycle order for the marking mode: working -> oof -> holiday -> working
MODE_CYCLE = (DateState.WORKING, DateState.OOF, DateState.HOLIDAY)

# States that count as an in-office day
IN_OFFICE_STATES = frozenset({DateState.WORKING})


def rank(state: DateState) -> int:
    """
    Priority of a state for conflict resolution.

    holiday > oof > working; a higher rank is never overwritten by a
    lower one unless the write is forced.
    """
    if state is DateState.HOLIDAY:
        return 3
    if state is DateState.OOF:
        return 2
    if state is DateState.WORKING:
        return 1
    raise ValueError(f"Unknown date state: {state!r}")


def coerce_state(value) -> DateState:
    """Accept a DateState or its string value."""
    try:
        return DateState(value)
    except ValueError as e:
        raise ValueError(f"Unknown date state: {value!r}") from e


def coerce_mode(value) -> MarkingMode:
    try:
        return DateState(value)
    except ValueError as e:
        raise InvalidModeError(value) from e


def next_mode(mode: MarkingMode) -> MarkingMode:
    """Get next marking mode in cycle: working -> oof -> holiday -> working."""
    if mode not in MODE_CYCLE:
        raise InvalidModeError(mode)
    current_index = MODE_CYCLE.index(mode)
    return MODE_CYCLE[(current_index + 1) % len(MODE_CYCLE)]


@dataclass(frozen=True)
class StateStyle:
    label: str
    color: str
    background: str
    icon: str = ""
    icon_position: str = "left"


STATE_STYLES = {
    DateState.WORKING: StateStyle("In office", "#1b5e20", "#e6f4ea", "🏢"),
    DateState.OOF: StateStyle("Out of office", "#374151", "#f3f4f6", "🏠"),
    DateState.HOLIDAY: StateStyle("Holiday", "#b45309", "#fff7cc", "🎉", "right"),
}

UNMARKED_STYLE = StateStyle("—", "#6b7280", "#fafafa")


def state_style(state: Optional[DateState]) -> StateStyle:
    """Get display style for a state (None means unmarked)."""
    if state is None:
        return UNMARKED_STYLE
    return STATE_STYLES[state]


def state_class(state: Optional[DateState]) -> str:
    """Map state to CSS class name."""
    if state is None:
        return "empty"
    return f"status-{state.value}"


def with_icon(style: StateStyle, text: str) -> str:
    """Place the style's icon on the side its icon_position names."""
    if not style.icon:
        return text
    if style.icon_position == "right":
        return f"{text} {style.icon}"
    return f"{style.icon} {text}"
