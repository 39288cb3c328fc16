"""
Resolution of the incident window from explicit bounds, a relative duration, a calendar day or an offset into the past.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import calendar
import re
from datetime import datetime, timedelta
from typing import Optional, Tuple

from datasources.exceptions import InvalidTimeWindow
from engine.timeline.timestamps import UTC, parse_iso

_DURATION = re.compile(r"^(\d+)([hdwm])$", re.I)
_OFFSET = re.compile(r"^(?:\d+[hdwm])+$", re.I)
_OFFSET_PART = re.compile(r"(\d+)([hdwm])", re.I)
_UNIT_SECONDS = {"h": 3600, "d": 86400, "w": 604800, "m": 2592000}

DAY = timedelta(days=1)
END_OF_DAY = DAY - timedelta(seconds=1)

Window = Tuple[Optional[datetime], Optional[datetime]]


def parse_duration(value: str) -> timedelta:
    m = _DURATION.match((value or "").strip())
    if not m:
        raise InvalidTimeWindow(f"Invalid duration {value!r} (use: 6h, 2d, 1w, 1m)")
    return timedelta(seconds=int(m.group(1)) * _UNIT_SECONDS[m.group(2).lower()])


def _months_before(value: datetime, months: int) -> datetime:
    index = value.year * 12 + value.month - 1 - months
    year, month = divmod(index, 12)
    day = min(value.day, calendar.monthrange(year, month + 1)[1])
    return value.replace(year=year, month=month + 1, day=day)


def go_back(value: str, now: datetime) -> datetime:
    """
    Shift ``now`` back by a compound offset such as ``2m1w3d`` or ``36h``.

    Months are calendar months, clamped to the last day of a shorter month;
    weeks, days and hours are exact.
    """
    text = (value or "").strip()
    if not _OFFSET.match(text):
        raise InvalidTimeWindow(f"Invalid offset {value!r} (use: 2m1w3d, 36h)")
    amounts = {"m": 0, "w": 0, "d": 0, "h": 0}
    for number, unit in _OFFSET_PART.findall(text):
        amounts[unit.lower()] += int(number)
    shifted = _months_before(now, amounts["m"])
    return shifted - timedelta(weeks=amounts["w"], days=amounts["d"], hours=amounts["h"])


def day_window(day: datetime) -> Window:
    midnight = day.astimezone(UTC).replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight, midnight + END_OF_DAY


def resolve_window(
    start: str | None = None,
    end: str | None = None,
    last: str | None = None,
    now: datetime | None = None,
    today: bool = False,
    yesterday: bool = False,
    back: str | None = None,
) -> Window:
    """
    Turn the command-line window options into inclusive UTC bounds.

    Only one way of choosing the window may be used at a time. ``today`` and
    ``yesterday`` cover a whole UTC calendar day; ``back`` covers one day
    starting at the shifted instant. Explicit bounds may be open on either side.
    """
    modes = [bool(start or end), bool(last), today, yesterday, bool(back)]
    if sum(modes) > 1:
        raise InvalidTimeWindow("choose one of --start/--end, --last, --today, --yesterday or --back")

    now = now or datetime.now(UTC)
    if last:
        return now - parse_duration(last), now
    if today:
        return day_window(now)
    if yesterday:
        return day_window(now - DAY)
    if back:
        shifted = go_back(back, now)
        return shifted, shifted + END_OF_DAY

    try:
        s = parse_iso(start) if start else None
        e = parse_iso(end) if end else None
    except ValueError as exc:
        raise InvalidTimeWindow(str(exc)) from exc

    if s and e and s > e:
        raise InvalidTimeWindow(f"window start {s.isoformat()} is after end {e.isoformat()}")
    return s, e
