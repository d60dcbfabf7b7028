from __future__ import annotations

import re
from typing import Iterable

from slotpicker.domain import EventRecord, MalformedTimestamp

# <date>T<HH>:<MM>[:<SS>[.<fraction>]][Z|+HH:MM|-HH:MM|+HHMM|-HHMM]
# Only HH:MM is kept; the offset is dropped without conversion.
_START_RE = re.compile(
    r"T(?P<hour>[01]\d|2[0-3]):(?P<minute>[0-5]\d)"
    r"(?::[0-5]\d(?:\.\d+)?)?"
    r"(?:Z|[+-]\d{2}:?\d{2})?$"
)


def parse_start_hour(timestamp: str) -> str:
    m = _START_RE.search(timestamp.strip())
    if not m:
        raise MalformedTimestamp(f"Cannot read start hour from timestamp: {timestamp!r}")
    return f"{m.group('hour')}:{m.group('minute')}"


def busy_hours_from_events(events: Iterable[EventRecord]) -> frozenset[str]:
    return frozenset(parse_start_hour(e.start) for e in events)
