"""
Incident summary report: event breakdowns, anomalies, the root-cause judgment with its evidence, every detected incident with its cascade effects, cross-source correlations, and the critical moments of the window.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from collections import Counter
from typing import List, Optional, Sequence

from config import settings
from engine.anomaly.detection import AnomalyResult
from engine.correlation.temporal import Correlation
from engine.patterns.matcher import Incident, MatchResult
from engine.reports.common import fmt_ts, fmt_window, rule, section
from engine.timeline.builder import TimelineResult
from models import RootCause


def sort_incidents(incidents: Sequence[Incident]) -> List[Incident]:
    return sorted(incidents, key=lambda i: (-i.severity.weight(), i.root_event.timestamp))


def _breakdown(timeline: TimelineResult) -> List[str]:
    events = timeline.events
    lines = section("EVENT BREAKDOWN:")
    for sev, count in Counter(e.severity.value for e in events).most_common():
        lines.append(f"  {sev:<10}: {count:>6} events")
    lines.append("")

    lines.extend(section("BY SOURCE:"))
    by_source = Counter(e.source for e in events)
    errors = Counter(e.source for e in events if e.severity.is_error())
    for src, count in by_source.most_common():
        lines.append(f"  {src:<20}: {count:>6} events ({errors.get(src, 0)} errors)")
    lines.append("")
    return lines


def _anomalies(anomalies: AnomalyResult) -> List[str]:
    lines = section("ANOMALIES DETECTED:")
    if not anomalies.anomalies:
        lines.append("  No anomalies detected.")
        lines.append("")
        return lines

    lines.append(f"  Baseline: {anomalies.baseline} events per {anomalies.window_seconds}s bucket")
    grouped = {}
    for a in anomalies.anomalies:
        grouped.setdefault(a.type, []).append(a)
    for kind, items in grouped.items():
        lines.append(f"  {kind.value.upper()}: {len(items)} occurrence(s)")
        for a in items[: settings.report_sample_limit]:
            detail = f"{a.count} events"
            if a.sources:
                detail += f" across {len(a.sources)} sources ({', '.join(a.sources)})"
            lines.append(f"    - {fmt_ts(a.window_start, '%H:%M:%S')}: {detail}")
    lines.append("")
    return lines


def _root_cause(root_cause: Optional[RootCause], recs: Sequence[str]) -> List[str]:
    lines = section("ROOT CAUSE:")
    if root_cause is None:
        lines.append("  No definitive root cause: no critical failure pattern was matched.")
    else:
        root = root_cause.root_event
        lines.extend([
            f"  Pattern:    {root_cause.pattern} ({root_cause.description})",
            f"  Confidence: {root_cause.confidence * 100:.0f}%",
            f"  Time:       {fmt_ts(root_cause.timestamp)}",
            f"  Source:     {root.source}",
            f"  Message:    {root.message[: settings.report_root_message_width]}",
            "  Evidence:",
        ])
        lines.extend(f"    - {item}" for item in root_cause.evidence)
        lines.append("  Resolution:")
        lines.extend(f"    {line}" for line in (root_cause.resolution or "n/a").splitlines())
    lines.append("")

    lines.extend(section("RECOMMENDATIONS:"))
    lines.extend(f"  {r}" if r else "" for r in recs)
    lines.append("")
    return lines


def format_incident(incident: Incident, number: int) -> List[str]:
    root = incident.root_event
    marker = "[CRITICAL]" if incident.pattern.is_critical else f"[{incident.severity.value.upper()}]"
    lines = [
        f"{marker} INCIDENT #{number}: {incident.pattern.description}",
        rule("-", 70),
        "",
        "ROOT CAUSE:",
        f"  Time:     {fmt_ts(root.timestamp)}",
        f"  Source:   {root.source}",
        f"  Severity: {root.severity.value}",
        f"  Message:  {root.message[: settings.report_root_message_width]}",
        f"  Location: {root.origin_file or 'unknown'}",
        "",
    ]
    if incident.effects:
        lines.append(f"CASCADE EFFECTS ({len(incident.effects)} events):")
        for effect in incident.effects:
            e = effect.event
            lines.append(
                f"  [+{int(effect.delay_seconds):>3}s] {e.source}: {e.message[: settings.report_effect_width]}"
            )
    else:
        lines.append("NO CASCADE EFFECTS DETECTED")
    lines.append("")
    return lines


def _incidents(match: MatchResult) -> List[str]:
    lines = section(f"INCIDENTS ({len(match.incidents)}):")
    if not match.incidents:
        lines.append("  No known failure pattern matched any event in the window.")
        lines.append("")
        return lines
    lines.append("")
    for idx, incident in enumerate(sort_incidents(match.incidents), start=1):
        lines.extend(format_incident(incident, idx))
    return lines


def _correlations(correlations: Sequence[Correlation]) -> List[str]:
    lines = section("TEMPORAL CORRELATIONS:")
    if not correlations:
        lines.append("  No simultaneous failures across sources.")
        lines.append("")
        return lines
    lines.append("  Multiple services experienced issues simultaneously:")
    lines.append("")
    for corr in correlations:
        lines.append(f"  Time Window: {fmt_ts(corr.window_start)} (+{corr.window_seconds}s)")
        lines.append(f"  Affected Services: {', '.join(corr.sources)}")
        lines.append("  Events:")
        for event in corr.events:
            lines.append(f"    [{fmt_ts(event.timestamp, '%H:%M:%S')}] {event.source}: {event.message[:80]}")
        lines.append("")
    return lines


def _critical_moments(timeline: TimelineResult) -> List[str]:
    lines = section("CRITICAL MOMENTS (Errors):")
    critical = [e for e in timeline.events if e.severity.is_error()]
    if not critical:
        lines.append("  No error events in the window.")
    for event in critical[: settings.report_critical_moment_limit]:
        lines.append(f"  [{fmt_ts(event.timestamp, '%H:%M:%S')}] {event.source:<15} | {event.message[:70]}")
    lines.append("")
    return lines


def render_summary(
    timeline: TimelineResult,
    match: MatchResult,
    anomalies: AnomalyResult,
    correlations: Sequence[Correlation],
    root_cause: Optional[RootCause],
    recs: Sequence[str],
) -> str:
    lines: List[str] = [rule("="), "INCIDENT ANALYSIS SUMMARY", rule("="), ""]

    lines.append(f"Time Window: {fmt_window(timeline.window_start, timeline.window_end, timeline.time_range)}")
    if timeline.window_start and timeline.window_end:
        minutes = (timeline.window_end - timeline.window_start).total_seconds() / 60
        lines.append(f"Duration: {minutes:.1f} minutes")
    lines.append(f"Total Events: {len(timeline.events)} from {timeline.files_read} file(s)")
    if timeline.skipped_rows:
        lines.append(f"Skipped Rows: {timeline.skipped_rows} (unparsable timestamp)")
    if timeline.unreadable_sources:
        lines.append(f"Unreadable Sources: {len(timeline.unreadable_sources)}")
        lines.extend(f"  - {path}" for path in timeline.unreadable_sources)
    lines.append("")

    lines.extend(_breakdown(timeline))
    lines.extend(_anomalies(anomalies))
    lines.extend(_root_cause(root_cause, recs))
    lines.extend(_incidents(match))
    lines.extend(_correlations(correlations))
    lines.extend(_critical_moments(timeline))
    lines.append(rule("="))
    return "\n".join(lines) + "\n"
