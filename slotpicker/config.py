from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Callable, TypeVar

from dotenv import load_dotenv

from slotpicker.locales import SUPPORTED_LANGUAGES

DEFAULT_SLOT_HOURS: tuple[str, ...] = tuple(f"{h:02d}:00" for h in range(9, 18))

_HOUR_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_OFFSET_RE = re.compile(r"^(Z|[+-](0\d|1[0-4]):[0-5]\d)$")

N = TypeVar("N", int, float)


def _parse_slot_hours(raw: str) -> tuple[str, ...]:
    # SLOT_HOURS is a comma-separated list of HH:MM labels, kept in the given order.
    # Example:
    #   SLOT_HOURS=09:00,09:30,10:00
    parts = [p.strip() for p in raw.split(",")]
    parts = [p for p in parts if p]

    seen: set[str] = set()
    result: list[str] = []
    for p in parts:
        if not _HOUR_RE.match(p):
            raise RuntimeError(f"Invalid SLOT_HOURS value: {p!r}. Expected HH:MM.")
        if p in seen:
            continue
        seen.add(p)
        result.append(p)

    if not result:
        raise RuntimeError("SLOT_HOURS is empty. Provide at least one HH:MM label.")

    return tuple(result)


@dataclass(frozen=True)
class Settings:
    google_api_key: str
    google_calendar_id: str

    language: str = "en"
    slot_hours: tuple[str, ...] = DEFAULT_SLOT_HOURS

    # Offset appended to the day window sent to the calendar API (timeMin/timeMax).
    utc_offset: str = "+00:00"

    fetch_timeout_seconds: float = 20.0
    # How many times one events request may be attempted on transient failures.
    fetch_retry_attempts: int = 2


def _require(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _getenv_number(name: str, default: str, convert: Callable[[str], N]) -> N:
    raw = os.getenv(name, default).strip()
    try:
        return convert(raw)
    except ValueError as e:
        raise RuntimeError(f"Invalid {name} value: {raw!r}. Expected a number.") from e


def load_settings(dotenv_path: str | None = None) -> Settings:
    # Prefer .env in repo root; dotenv_path allows overriding in tests.
    load_dotenv(dotenv_path=dotenv_path, override=False)

    language = os.getenv("CALENDAR_LANGUAGE", "en").strip().lower()
    if language not in SUPPORTED_LANGUAGES:
        raise RuntimeError(
            f"Invalid CALENDAR_LANGUAGE value: {language!r}. Expected one of: {', '.join(SUPPORTED_LANGUAGES)}"
        )

    slot_hours_raw = os.getenv("SLOT_HOURS")
    slot_hours = _parse_slot_hours(slot_hours_raw) if slot_hours_raw is not None else DEFAULT_SLOT_HOURS

    utc_offset = os.getenv("CALENDAR_UTC_OFFSET", "+00:00").strip()
    if not _OFFSET_RE.match(utc_offset):
        raise RuntimeError(f"Invalid CALENDAR_UTC_OFFSET value: {utc_offset!r}. Expected Z or +HH:MM.")

    fetch_timeout_seconds = _getenv_number("FETCH_TIMEOUT_SECONDS", "20", float)
    if fetch_timeout_seconds <= 0:
        raise RuntimeError("FETCH_TIMEOUT_SECONDS must be > 0")

    fetch_retry_attempts = _getenv_number("FETCH_RETRY_ATTEMPTS", "2", int)
    if fetch_retry_attempts < 1:
        raise RuntimeError("FETCH_RETRY_ATTEMPTS must be >= 1")

    return Settings(
        google_api_key=_require("GOOGLE_API_KEY"),
        google_calendar_id=_require("GOOGLE_CALENDAR_ID"),
        language=language,
        slot_hours=slot_hours,
        utc_offset=utc_offset,
        fetch_timeout_seconds=fetch_timeout_seconds,
        fetch_retry_attempts=fetch_retry_attempts,
    )
