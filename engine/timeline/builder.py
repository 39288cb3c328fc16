"""
Timeline construction: normalises raw rows from every tabular source into immutable Events and orders them chronologically inside the incident window.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Mapping, Optional, Sequence

from config import (
    MESSAGE_COLUMNS,
    ORIGIN_COLUMNS,
    SEVERITY_COLUMNS,
    SOURCE_COLUMNS,
    TIMESTAMP_COLUMNS,
    settings,
)
from datasources.exceptions import SourceUnreadable
from datasources.tabular import TabularSource, read_rows
from engine.enums import Severity
from engine.timeline.timestamps import parse_timestamp
from models import Event

log = logging.getLogger(__name__)

# every character str.splitlines() treats as a line boundary, plus tab
_WHITESPACE = re.compile(r"[\r\n\t\x0b\x0c\x1c-\x1e\x85\u2028\u2029]+")


@dataclass
class TimelineResult:
    events: List[Event] = field(default_factory=list)
    window_start: Optional[datetime] = None
    window_end: Optional[datetime] = None
    files_read: int = 0
    rows_read: int = 0
    skipped_rows: int = 0
    out_of_window_rows: int = 0
    unreadable_sources: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.events)

    @property
    def time_range(self) -> tuple[datetime, datetime] | None:
        if not self.events:
            return None
        return self.events[0].timestamp, self.events[-1].timestamp


def _first(row: Mapping[str, str], columns: Sequence[str]) -> Optional[str]:
    for column in columns:
        value = row.get(column)
        if value is not None and str(value).strip():
            return str(value)
    return None


def clean_field(value: str | None) -> str:
    return _WHITESPACE.sub(" ", value or "").strip()


def clean_message(value: str | None) -> str:
    return clean_field(value)[: settings.message_max_length]


class TimelineBuilder:
    def __init__(self, start: datetime | None = None, end: datetime | None = None) -> None:
        self.start = start
        self.end = end
        self._result = TimelineResult(window_start=start, window_end=end)
        self._pending: List[Event] = []

    def _in_window(self, ts: datetime) -> bool:
        if self.start is not None and ts < self.start:
            return False
        if self.end is not None and ts > self.end:
            return False
        return True

    def add_rows(self, label: str, rows: Iterable[Mapping[str, str]], origin: str = "") -> int:
        added = 0
        for row in rows:
            self._result.rows_read += 1
            ts = parse_timestamp(_first(row, TIMESTAMP_COLUMNS), reference=self.end)
            if ts is None:
                self._result.skipped_rows += 1
                continue
            if not self._in_window(ts):
                self._result.out_of_window_rows += 1
                continue
            message = clean_message(_first(row, MESSAGE_COLUMNS))
            self._pending.append(Event(
                timestamp=ts,
                source=clean_field(_first(row, SOURCE_COLUMNS) or label),
                severity=Severity.parse(_first(row, SEVERITY_COLUMNS), message),
                message=message,
                origin_file=_first(row, ORIGIN_COLUMNS) or origin,
            ))
            added += 1
        return added

    def add_source(self, source: TabularSource) -> int:
        try:
            rows = read_rows(source)
        except SourceUnreadable as e:
            log.warning("Source unreadable, continuing without it: %s", e)
            self._result.unreadable_sources.append(str(source.path))
            return 0
        self._result.files_read += 1
        added = self.add_rows(source.label, rows, origin=str(source.path))
        log.debug("%s: %d event(s) from %d row(s)", source.path, added, len(rows))
        return added

    def build(self) -> TimelineResult:
        # sorted() is stable: equal (timestamp, source) keys keep insertion order
        self._result.events = sorted(self._pending, key=lambda e: (e.timestamp, e.source))
        if self._result.skipped_rows:
            log.info("Skipped %d row(s) with unparsable timestamps", self._result.skipped_rows)
        return self._result


def build_timeline(
    sources: Iterable[TabularSource],
    start: datetime | None = None,
    end: datetime | None = None,
) -> TimelineResult:
    builder = TimelineBuilder(start, end)
    for source in sources:
        builder.add_source(source)
    result = builder.build()
    log.info("Built timeline with %d event(s) from %d file(s)", len(result), result.files_read)
    return result
