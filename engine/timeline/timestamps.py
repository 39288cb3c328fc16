"""
Timestamp extraction for raw event rows, trying an ordered list of format matchers and normalising every hit to a timezone-aware UTC datetime.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Tuple

UTC = timezone.utc

_MONTHS = {
    name: idx
    for idx, name in enumerate(
        ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"),
        start=1,
    )
}

_ISO = re.compile(
    r"(?P<date>\d{4}-\d{2}-\d{2})[T ](?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:[.,](?P<frac>\d+))?"
    r"(?:\s?(?P<tz>Z|[+-]\d{2}:?\d{2}))?",
    re.I,
)
_SYSLOG = re.compile(
    r"\b(?P<mon>[A-Z][a-z]{2})\s+(?P<day>\d{1,2})\s+"
    r"(?P<h>\d{2}):(?P<m>\d{2}):(?P<s>\d{2})\b"
)
_WINDOWS = re.compile(
    r"\b(?P<mo>\d{1,2})/(?P<day>\d{1,2})/(?P<y>\d{4})\s+"
    r"(?P<h>\d{1,2}):(?P<m>\d{2}):(?P<s>\d{2})(?:\s*(?P<ampm>[AaPp][Mm]))?"
)


def _offset(tz: str | None) -> timezone:
    if not tz or tz.upper() == "Z":
        return UTC
    sign = -1 if tz[0] == "-" else 1
    digits = tz[1:].replace(":", "")
    delta = timedelta(hours=int(digits[:2]), minutes=int(digits[2:4]))
    return timezone(sign * delta)


def _from_iso(m: re.Match, reference: datetime | None) -> datetime:
    base = datetime.strptime(f"{m.group('date')} {m.group('time')}", "%Y-%m-%d %H:%M:%S")
    frac = m.group("frac")
    if frac:
        base = base.replace(microsecond=int(frac[:6].ljust(6, "0")))
    return base.replace(tzinfo=_offset(m.group("tz"))).astimezone(UTC)


def _from_syslog(m: re.Match, reference: datetime | None) -> datetime:
    month = _MONTHS.get(m.group("mon").lower())
    if month is None:
        raise ValueError(f"unknown month {m.group('mon')!r}")
    ref = reference or datetime.now(UTC)
    ts = datetime(
        ref.year, month, int(m.group("day")),
        int(m.group("h")), int(m.group("m")), int(m.group("s")),
        tzinfo=UTC,
    )
    # syslog carries no year; a date well past the reference belongs to last year
    if ts > ref + timedelta(days=1):
        ts = ts.replace(year=ref.year - 1)
    return ts


def _from_windows(m: re.Match, reference: datetime | None) -> datetime:
    hour = int(m.group("h"))
    ampm = (m.group("ampm") or "").lower()
    if ampm == "pm" and hour < 12:
        hour += 12
    elif ampm == "am" and hour == 12:
        hour = 0
    return datetime(
        int(m.group("y")), int(m.group("mo")), int(m.group("day")),
        hour, int(m.group("m")), int(m.group("s")),
        tzinfo=UTC,
    )


Matcher = Tuple[str, re.Pattern, Callable[[re.Match, Optional[datetime]], datetime]]

MATCHERS: List[Matcher] = [
    ("iso8601", _ISO, _from_iso),
    ("syslog", _SYSLOG, _from_syslog),
    ("windows", _WINDOWS, _from_windows),
]


def parse_timestamp(value: str | None, reference: datetime | None = None) -> datetime | None:
    """Return the first timestamp any matcher finds in ``value``, or None."""
    text = (value or "").strip()
    if not text:
        return None
    for _name, pattern, build in MATCHERS:
        m = pattern.search(text)
        if not m:
            continue
        try:
            return build(m, reference)
        except ValueError:
            # a matcher can recognise the shape but still reject the values (e.g. month 13)
            continue
    return None


def parse_iso(value: str) -> datetime:
    """Parse a user-supplied ISO-8601 bound; naive values are taken as UTC."""
    dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)
