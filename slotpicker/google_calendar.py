from __future__ import annotations

import datetime as dt
import logging
from typing import Any
from urllib.parse import quote

import httpx
from tenacity import RetryCallState, retry, retry_if_exception, stop_after_attempt, wait_exponential
from tenacity.wait import wait_base

from slotpicker.domain import EventRecord

logger = logging.getLogger(__name__)

BASE_URL = "https://www.googleapis.com/calendar/v3"


def build_events_url(calendar_id: str) -> str:
    return f"{BASE_URL}/calendars/{quote(calendar_id, safe='')}/events"


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or status >= 500
    return False


def _short_exc(retry_state: RetryCallState) -> str | None:
    if retry_state.outcome is None or not retry_state.outcome.failed:
        return None
    exc = retry_state.outcome.exception()
    if exc is None:
        return None
    # Type and message only, no traceback between attempts.
    msg = str(exc).strip()
    return f"{type(exc).__name__}: {msg}" if msg else type(exc).__name__


def _log_before_attempt(retry_state: RetryCallState) -> None:
    logger.info("Events request attempt %s: start", retry_state.attempt_number)


def _log_after_attempt(retry_state: RetryCallState) -> None:
    if retry_state.outcome is not None and retry_state.outcome.failed:
        reason = _short_exc(retry_state)
        if reason:
            logger.warning("Events request attempt %s: failed (%s)", retry_state.attempt_number, reason)
        else:
            logger.warning("Events request attempt %s: failed", retry_state.attempt_number)


def _log_before_sleep(retry_state: RetryCallState) -> None:
    sleep_seconds = getattr(retry_state.next_action, "sleep", None)
    if sleep_seconds is None:
        logger.info("Waiting before the next events request... (reason: %s)", _short_exc(retry_state))
        return
    logger.info(
        "Events request attempt %s in %.0f s (reason: %s)",
        retry_state.attempt_number + 1,
        sleep_seconds,
        _short_exc(retry_state),
    )


def parse_events(data: dict[str, Any]) -> list[EventRecord]:
    """Turn an events.list response body into EventRecords.

    All-day events only carry start.date and are skipped: they have no hour
    to block.
    """
    events: list[EventRecord] = []
    for item in data.get("items", []):
        start = (item.get("start") or {}).get("dateTime")
        if not start:
            logger.debug("Skipping event without start.dateTime (id=%s)", item.get("id"))
            continue
        events.append(EventRecord(start=str(start), summary=item.get("summary"), event_id=item.get("id")))
    return events


class GoogleCalendarClient:
    """Read-only client for busy events of one calendar, one day at a time."""

    def __init__(
        self,
        *,
        api_key: str,
        calendar_id: str,
        utc_offset: str = "+00:00",
        timeout_seconds: float = 20.0,
        retry_attempts: int = 2,
        transport: httpx.AsyncBaseTransport | None = None,
        retry_wait: wait_base | None = None,
    ) -> None:
        self._api_key = api_key
        self._calendar_id = calendar_id
        self._utc_offset = utc_offset
        self._timeout_seconds = timeout_seconds
        self._retry_attempts = retry_attempts
        self._transport = transport
        self._retry_wait = retry_wait if retry_wait is not None else wait_exponential(multiplier=2, min=2, max=4)

    def _day_window(self, date: dt.date) -> dict[str, str]:
        next_day = date + dt.timedelta(days=1)
        return {
            "timeMin": f"{date.isoformat()}T00:00:00{self._utc_offset}",
            "timeMax": f"{next_day.isoformat()}T00:00:00{self._utc_offset}",
        }

    async def _fetch_events_once(self, date: dt.date) -> list[EventRecord]:
        params = {"key": self._api_key, **self._day_window(date)}

        async with httpx.AsyncClient(timeout=self._timeout_seconds, transport=self._transport) as client:
            r = await client.get(build_events_url(self._calendar_id), params=params)
            r.raise_for_status()
            return parse_events(r.json())

    async def fetch_events(self, date: dt.date) -> list[EventRecord]:
        decorated = retry(
            retry=retry_if_exception(_is_retryable),
            stop=stop_after_attempt(self._retry_attempts),
            wait=self._retry_wait,
            before=_log_before_attempt,
            after=_log_after_attempt,
            before_sleep=_log_before_sleep,
            reraise=True,
        )(self._fetch_events_once)

        events = await decorated(date)
        logger.info("Fetched %d timed events for %s", len(events), date)
        return events
