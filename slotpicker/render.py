from __future__ import annotations

from typing import Iterable, Sequence

from slotpicker.calendar_controller import CalendarController
from slotpicker.domain import Day, DayKind

_CELL_WIDTH = 4

_MARKERS = {
    DayKind.PAST_IN_CURRENT_MONTH: "-",
    DayKind.TODAY: "*",
    DayKind.FUTURE: " ",
}


def _cell(controller: CalendarController, day: Day) -> str:
    kind = controller.classify(day)
    if kind is DayKind.BLANK:
        return " " * _CELL_WIDTH
    return f"{day.digit:>{_CELL_WIDTH - 1}}{_MARKERS[kind]}"


def render_month(controller: CalendarController, grid: Sequence[Day] | None = None) -> str:
    """Plain-text month view: title, weekday header, one line per week.

    Past days of the current month are suffixed with '-', today with '*'.
    """
    cells = list(grid) if grid is not None else controller.month_grid()

    lines = [f"{controller.month_name()} {controller.year}"]
    lines.append("".join(f"{name:>{_CELL_WIDTH - 1}} " for name in controller.day_names()).rstrip())
    for i in range(0, len(cells), 7):
        lines.append("".join(_cell(controller, d) for d in cells[i : i + 7]).rstrip())
    return "\n".join(lines)


def render_hours(hours: Iterable[str]) -> str:
    hours = list(hours)
    if not hours:
        return "No available hours."
    return "\n".join([f"• {h}" for h in hours])
