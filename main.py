import argparse
import asyncio
import datetime as dt
import logging

from slotpicker.calendar_controller import CalendarController
from slotpicker.config import load_settings
from slotpicker.domain import FetchFailure
from slotpicker.google_calendar import GoogleCalendarClient
from slotpicker.render import render_hours, render_month


def _setup_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


def _parse_month(raw: str) -> dt.date:
    try:
        return dt.datetime.strptime(raw, "%Y-%m").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected YYYY-MM, got {raw!r}") from None


def main() -> int:
    parser = argparse.ArgumentParser(description="SlotPicker: appointment day picker")
    parser.add_argument("--month", type=_parse_month, help="Month to show (YYYY-MM), defaults to the current one")
    parser.add_argument("--day", type=int, help="Day of the shown month to list available hours for")
    parser.add_argument("--language", help="Override CALENDAR_LANGUAGE")
    args = parser.parse_args()

    _setup_logging()
    settings = load_settings()

    client = GoogleCalendarClient(
        api_key=settings.google_api_key,
        calendar_id=settings.google_calendar_id,
        utc_offset=settings.utc_offset,
        timeout_seconds=settings.fetch_timeout_seconds,
        retry_attempts=settings.fetch_retry_attempts,
    )
    controller = CalendarController(
        args.language or settings.language,
        fetch_events=client.fetch_events,
        slot_hours=settings.slot_hours,
    )
    if args.month is not None:
        controller.jump_to(args.month)

    grid = controller.month_grid()
    print(render_month(controller, grid))

    if args.day is None:
        return 0

    day = next((d for d in grid if d.digit == str(args.day)), None)
    if day is None:
        parser.error(f"Day {args.day} is not in {controller.month_name()} {controller.year}")

    try:
        asyncio.run(controller.select_day(day.digit))
    except FetchFailure:
        # Already logged by the controller.
        return 1

    print()
    print(render_hours(controller.available_hours(day)))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
