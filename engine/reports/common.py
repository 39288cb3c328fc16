"""
Shared formatting helpers for the plain-text reports.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple

WIDE = 120
NARROW = 100


def rule(char: str = "=", width: int = NARROW) -> str:
    return char * width


def fmt_ts(ts: Optional[datetime], fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
    return ts.strftime(fmt) if ts else "unknown"


def fmt_window(
    start: Optional[datetime],
    end: Optional[datetime],
    observed: Optional[Tuple[datetime, datetime]] = None,
) -> str:
    # an open bound falls back to the first/last observed event
    if observed:
        start = start or observed[0]
        end = end or observed[1]
    if start is None and end is None:
        return "unbounded"
    return f"{fmt_ts(start)} -> {fmt_ts(end)} UTC"


def section(title: str, char: str = "-", width: int = NARROW) -> list[str]:
    return [title, rule(char, width)]
