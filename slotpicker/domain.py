from __future__ import annotations

import enum
from dataclasses import dataclass, field


@dataclass
class Day:
    """One cell of the month grid.

    A leading blank only aligns the 1st under its weekday column: it has no digit
    and no hours.
    """

    digit: str | None = None  # "1".."31"
    hours: list[str] = field(default_factory=list)  # "HH:MM" labels

    @property
    def is_blank(self) -> bool:
        return not self.digit


@dataclass(frozen=True)
class EventRecord:
    """A busy event as returned by the calendar source."""

    start: str  # e.g. 2024-03-05T10:30:00+01:00
    summary: str | None = None
    event_id: str | None = None


class DayKind(enum.Enum):
    BLANK = "blank"
    PAST_IN_CURRENT_MONTH = "past_in_current_month"
    TODAY = "today"
    FUTURE = "future"


class Direction(enum.Enum):
    PREVIOUS = "previous"
    NEXT = "next"


class InvalidDayIndex(IndexError):
    """Day-name lookup outside of [0, 6]."""


class FetchFailure(RuntimeError):
    """The calendar source call failed for the current selection.

    The busy hours of the previous selection stay in effect.
    """


class MalformedTimestamp(ValueError):
    pass


class UnknownLanguage(KeyError):
    pass
