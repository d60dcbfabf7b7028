from __future__ import annotations

import asyncio
import datetime as dt

import httpx
import pytest
from tenacity import wait_none

from slotpicker.domain import EventRecord
from slotpicker.google_calendar import GoogleCalendarClient, build_events_url, parse_events


def _client(handler, *, retry_attempts: int = 1, utc_offset: str = "+01:00") -> GoogleCalendarClient:
    return GoogleCalendarClient(
        api_key="TEST_KEY",
        calendar_id="team@group.calendar.google.com",
        utc_offset=utc_offset,
        timeout_seconds=5,
        retry_attempts=retry_attempts,
        transport=httpx.MockTransport(handler),
        retry_wait=wait_none(),
    )


def test_build_events_url_quotes_calendar_id() -> None:
    assert build_events_url("team@group.calendar.google.com") == (
        "https://www.googleapis.com/calendar/v3/calendars/team%40group.calendar.google.com/events"
    )


def test_fetch_events_queries_one_day_window() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "items": [
                    {"id": "a", "summary": "Call", "start": {"dateTime": "2024-03-05T10:30:00+01:00"}},
                    {"id": "b", "summary": "Holiday", "start": {"date": "2024-03-05"}},
                    {"id": "c", "start": {"dateTime": "2024-03-05T16:00:00+01:00"}},
                ]
            },
        )

    events = asyncio.run(_client(handler).fetch_events(dt.date(2024, 3, 5)))

    assert events == [
        EventRecord(start="2024-03-05T10:30:00+01:00", summary="Call", event_id="a"),
        EventRecord(start="2024-03-05T16:00:00+01:00", summary=None, event_id="c"),
    ]

    assert len(seen) == 1
    params = seen[0].url.params
    assert seen[0].url.path == "/calendar/v3/calendars/team@group.calendar.google.com/events"
    assert params["key"] == "TEST_KEY"
    assert params["timeMin"] == "2024-03-05T00:00:00+01:00"
    assert params["timeMax"] == "2024-03-06T00:00:00+01:00"
    # Recurring events are not expanded.
    assert "singleEvents" not in params


def test_fetch_events_window_crosses_month_end() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={})

    events = asyncio.run(_client(handler, utc_offset="Z").fetch_events(dt.date(2024, 12, 31)))

    assert events == []
    assert seen[0].url.params["timeMin"] == "2024-12-31T00:00:00Z"
    assert seen[0].url.params["timeMax"] == "2025-01-01T00:00:00Z"


def test_fetch_events_retries_server_errors() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        if calls == 1:
            return httpx.Response(503, json={"error": "unavailable"})
        return httpx.Response(200, json={"items": [{"start": {"dateTime": "2024-03-05T09:00:00Z"}}]})

    events = asyncio.run(_client(handler, retry_attempts=2).fetch_events(dt.date(2024, 3, 5)))

    assert calls == 2
    assert [e.start for e in events] == ["2024-03-05T09:00:00Z"]


def test_fetch_events_retries_transport_errors_then_reraises() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(httpx.ConnectError):
        asyncio.run(_client(handler, retry_attempts=3).fetch_events(dt.date(2024, 3, 5)))

    assert calls == 3


def test_fetch_events_does_not_retry_client_errors() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(403, json={"error": "forbidden"})

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(_client(handler, retry_attempts=3).fetch_events(dt.date(2024, 3, 5)))

    assert calls == 1


def test_parse_events_tolerates_missing_items() -> None:
    assert parse_events({}) == []
    assert parse_events({"items": [{"id": "x"}, {"start": None}]}) == []
