from __future__ import annotations

import calendar
import datetime as dt
import logging
from typing import Awaitable, Callable, Iterable, Sequence

from slotpicker.busy_hours import busy_hours_from_events
from slotpicker.domain import Day, DayKind, Direction, EventRecord, FetchFailure, InvalidDayIndex
from slotpicker.locales import get_locale

logger = logging.getLogger(__name__)

FetchEvents = Callable[[dt.date], Awaitable[Iterable[EventRecord]]]


def _first_of_month(d: dt.date) -> dt.date:
    return dt.date(d.year, d.month, 1)


def _shift_month(anchor: dt.date, delta: int) -> dt.date:
    index = anchor.year * 12 + (anchor.month - 1) + delta
    return dt.date(index // 12, index % 12 + 1, 1)


class CalendarController:
    """Visible month, day grid and busy-hour state of the day picker.

    The controller is the only writer of the anchor and of the busy hours.
    Everything except select_day() is synchronous.
    """

    def __init__(
        self,
        language: str,
        *,
        fetch_events: FetchEvents,
        slot_hours: Sequence[str] = (),
        today: Callable[[], dt.date] = dt.date.today,
    ) -> None:
        self._locale = get_locale(language)
        self.language = self._locale.code
        self._fetch_events = fetch_events
        self._slot_hours = tuple(slot_hours)
        self._today = today

        self._anchor = _first_of_month(self._today())
        self._busy_hours: frozenset[str] = frozenset()
        self._selected_date: dt.date | None = None
        # Bumped on every select_day(); only the latest number may write state.
        self._selection_seq = 0

    # --- anchor ---------------------------------------------------------

    @property
    def anchor(self) -> dt.date:
        return self._anchor

    @property
    def year(self) -> int:
        return self._anchor.year

    def is_current_month(self) -> bool:
        today = self._today()
        return (self._anchor.year, self._anchor.month) == (today.year, today.month)

    def navigate(self, direction: Direction) -> bool:
        """Move the anchor one month. Returns False when the move was refused."""
        if direction is Direction.NEXT:
            if (self._anchor.year, self._anchor.month) == (dt.MAXYEAR, 12):
                logger.debug("Not navigating past the last representable month (anchor=%s)", self._anchor)
                return False
            self._anchor = _shift_month(self._anchor, 1)
        else:
            target = _shift_month(self._anchor, -1)
            if target < _first_of_month(self._today()):
                logger.debug("Not navigating before the current month (anchor=%s)", self._anchor)
                return False
            self._anchor = target

        logger.debug("Anchor moved to %s", self._anchor)
        return True

    def jump_to(self, date: dt.date) -> None:
        # No past-bound clamp here, unlike navigate(PREVIOUS).
        self._anchor = _first_of_month(date)
        logger.debug("Anchor set to %s", self._anchor)

    # --- localization ---------------------------------------------------

    def month_name(self) -> str:
        return self._locale.month_names[self._anchor.month - 1]

    def month_names(self) -> list[str]:
        return list(self._locale.month_names)

    def day_names(self) -> list[str]:
        return list(self._locale.day_names)

    def day_name(self, index: int) -> str:
        if not 0 <= index < len(self._locale.day_names):
            raise InvalidDayIndex(f"Day index must be within [0, 6], got {index}")
        return self._locale.day_names[index]

    # --- grid -----------------------------------------------------------

    def month_days(self) -> int:
        return calendar.monthrange(self._anchor.year, self._anchor.month)[1]

    def first_day_column(self) -> int:
        """Grid column of the 1st of the anchor month, 0 being the locale's first weekday."""
        return (self._anchor.weekday() - self._locale.first_weekday) % 7

    def month_grid(self, hours: Sequence[str] | None = None) -> list[Day]:
        slate = self._slot_hours if hours is None else tuple(hours)
        blanks = [Day() for _ in range(self.first_day_column())]
        days = [Day(digit=str(n), hours=list(slate)) for n in range(1, self.month_days() + 1)]
        return blanks + days

    def classify(self, day: Day) -> DayKind:
        if day.is_blank:
            return DayKind.BLANK
        if not self.is_current_month():
            return DayKind.FUTURE

        digit = int(day.digit)
        today = self._today().day
        if digit < today:
            return DayKind.PAST_IN_CURRENT_MONTH
        if digit == today:
            return DayKind.TODAY
        return DayKind.FUTURE

    # --- availability ---------------------------------------------------

    @property
    def busy_hours(self) -> frozenset[str]:
        return self._busy_hours

    @property
    def selected_date(self) -> dt.date | None:
        return self._selected_date

    def _resolve_date(self, digit: str) -> dt.date:
        try:
            return self._anchor.replace(day=int(digit))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid day {digit!r} for {self._anchor:%Y-%m}") from e

    async def select_day(self, digit: str) -> bool:
        """Fetch busy events for a day of the anchor month and replace the busy hours.

        Returns False when a newer selection was issued while this one was in
        flight; its outcome (events or error) is then dropped.
        Raises FetchFailure when the source fails for the latest selection.
        """
        date = self._resolve_date(digit)

        self._selection_seq += 1
        seq = self._selection_seq

        try:
            events = await self._fetch_events(date)
            busy = busy_hours_from_events(events)
        except Exception as e:
            if seq != self._selection_seq:
                logger.debug("Dropping failed stale selection %s (%s: %s)", date, type(e).__name__, e)
                return False
            logger.error("Fetching busy hours for %s failed (%s: %s)", date, type(e).__name__, e)
            raise FetchFailure(f"Could not fetch busy hours for {date.isoformat()}") from e

        if seq != self._selection_seq:
            logger.debug("Dropping stale selection %s", date)
            return False

        self._busy_hours = busy
        self._selected_date = date
        logger.info("Busy hours for %s: %s", date, ", ".join(sorted(busy)) or "none")
        return True

    def available_hours(self, day: Day) -> list[str]:
        if day.is_blank:
            return []
        busy = self._busy_hours
        return [h for h in day.hours if h not in busy]
