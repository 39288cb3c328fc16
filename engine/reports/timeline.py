"""
Chronological timeline report with inline anomaly banners, and the parser that reads the event lines back.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import List, NamedTuple

from config import settings
from engine.anomaly.detection import AnomalyResult
from engine.enums import Severity
from engine.reports.common import WIDE, fmt_ts, fmt_window, rule
from engine.timeline.builder import TimelineResult
from engine.timeline.buckets import bucket_key
from engine.timeline.timestamps import UTC
from models import Event

_LINE = re.compile(
    r"^\[(?P<ts>\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}(?:\.\d{6})?)\] "
    r"(?P<marker>..) (?P<severity>\S+)\s* \| (?P<rest>.*)$"
)

_MARKERS = {
    Severity.ERROR: "XX",
    Severity.ALERT: "XX",
    Severity.WARN: "! ",
}


class TimelineLine(NamedTuple):
    timestamp: datetime
    source: str
    severity: str
    message: str


def event_line(event: Event) -> str:
    ts = event.timestamp.strftime("%Y-%m-%d %H:%M:%S")
    if event.timestamp.microsecond:
        ts += f".{event.timestamp.microsecond:06d}"
    marker = _MARKERS.get(event.severity, "  ")
    return (
        f"[{ts}] {marker} {event.severity.value:<8} | {event.source:<15} | "
        f"{event.message[: settings.report_message_width]}"
    )


def render_timeline(timeline: TimelineResult, anomalies: AnomalyResult) -> str:
    lines: List[str] = [
        rule("=", WIDE),
        "INCIDENT TIMELINE".center(WIDE),
        f"Window: {fmt_window(timeline.window_start, timeline.window_end, timeline.time_range)}".center(WIDE),
        rule("=", WIDE),
        "",
    ]

    if not timeline.events:
        lines.append("No events in the analysis window.")

    flagged = anomalies.by_window()
    announced = set()
    for event in timeline.events:
        key = bucket_key(event, anomalies.window_seconds)
        if key in flagged and key not in announced:
            announced.add(key)
            lines.append("")
            lines.append(rule("!", 60))
            for anomaly in flagged[key]:
                lines.append(
                    f"  ANOMALY DETECTED: {anomaly.type.value.upper()} at "
                    f"{anomaly.window_start.strftime('%H:%M:%S')} ({anomaly.count} events)"
                )
            lines.append(rule("!", 60))
            lines.append("")
        lines.append(event_line(event))

    lines.append("")
    lines.append(rule("=", WIDE))
    lines.append(f"Total Events: {len(timeline.events)}")
    if anomalies.anomalies:
        lines.append(f"Anomaly Windows: {len(flagged)} ({len(anomalies.anomalies)} anomaly record(s))")
    else:
        lines.append("Anomalies: none detected")
    return "\n".join(lines) + "\n"


def parse_timeline_report(text: str) -> List[TimelineLine]:
    parsed: List[TimelineLine] = []
    for line in text.splitlines():
        m = _LINE.match(line)
        if not m:
            continue
        source, _, message = m.group("rest").partition(" | ")
        parsed.append(TimelineLine(
            timestamp=datetime.fromisoformat(m.group("ts")).replace(tzinfo=UTC),
            source=source.rstrip(),
            severity=m.group("severity"),
            message=message,
        ))
    return parsed
