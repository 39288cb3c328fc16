"""
Pattern-analysis report: every matched failure-pattern type with its occurrences, followed by root-cause suggestions derived from which pattern types are present.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from collections import Counter
from typing import Dict, List

from config import settings
from engine.patterns.matcher import Incident, MatchResult
from engine.reports.common import rule


def group_by_pattern(match: MatchResult) -> Dict[str, List[Incident]]:
    groups: Dict[str, List[Incident]] = {}
    for incident in match.incidents:
        groups.setdefault(incident.pattern.name, []).append(incident)
    return dict(sorted(groups.items(), key=lambda kv: (-len(kv[1]), kv[0])))


def suggestions(match: MatchResult) -> List[str]:
    present = {name for name, count in match.matched.items() if count}
    out: List[str] = []

    if "disk_full" in present:
        out.append("DISK SPACE: Check disk usage immediately. Clean up logs or increase disk capacity.")
    if "out_of_memory" in present:
        out.append("MEMORY: Investigate memory leak. Check heap dumps, recent deployments, or traffic spikes.")

    db = {"database_connection_exhausted", "database_crash"} & present
    if db and "service_unavailable" in present:
        out.append("DATABASE CASCADE: Database issues likely caused service failures. Check DB connection pool settings.")
    elif db:
        out.append("DATABASE: Check database connection pool size, query performance, and DB server health.")

    if "crash" in present:
        out.append("APPLICATION CRASH: Review stack traces, recent code changes, and crash dumps.")
    if "network_timeout" in present and "service_unavailable" in present:
        out.append("NETWORK/SERVICE: Network issues may have caused service unavailability. Check network logs and firewall.")
    if "authentication" in present:
        sources = {i.root_event.source for i in match.for_pattern("authentication")}
        out.append(
            f"AUTHENTICATION: {len(sources)} source(s) had auth failures. "
            "Check credentials, certificate expiry, or IDP status."
        )
    if "deadlock" in present:
        out.append("DEADLOCK: Database deadlocks detected. Review transaction isolation levels and query patterns.")
    if "high_cpu" in present:
        out.append("CPU: High CPU usage detected. Check for infinite loops, inefficient queries, or traffic spikes.")
    if "agent_connection_loss" in present:
        out.append("MONITORING: Agent lost its connection; telemetry for this window may be incomplete.")

    if len(present) >= 3:
        out.append(
            "CASCADING FAILURE: Multiple pattern types detected - likely cascading failure. "
            "Review timeline for trigger event."
        )
    if not out:
        out.append("Review the timeline to understand the sequence of events.")
    return out


def _no_patterns() -> List[str]:
    return [
        "No known incident patterns detected.",
        "",
        "This could mean:",
        "  - The incident was caused by a novel issue",
        "  - The relevant logs are not being collected",
        "  - The time window doesn't capture the root cause",
    ]


def render_pattern_analysis(match: MatchResult) -> str:
    lines: List[str] = [rule("="), "INCIDENT PATTERN DETECTION", rule("="), ""]

    groups = group_by_pattern(match)
    if not groups:
        lines.extend(_no_patterns())
        return "\n".join(lines) + "\n"

    lines.append(f"DETECTED PATTERNS ({len(groups)} types):")
    lines.append(rule("-"))
    for name, incidents in groups.items():
        pattern = incidents[0].pattern
        effects = sum(len(i.effects) for i in incidents)
        lines.append(
            f"  {name.upper():<30} | {pattern.severity.value.upper():<10} | "
            f"{len(incidents)} occurrence(s), {effects} cascade effect(s)"
        )
        lines.append(f"    -> {pattern.description}")
    lines.append("")

    lines.append("DETAILED BREAKDOWN:")
    lines.append(rule("="))
    for name, incidents in groups.items():
        pattern = incidents[0].pattern
        lines.append("")
        lines.append(f"+- {name.upper()} ({pattern.severity.value.upper()})")
        lines.append(f"|  {pattern.description}")
        lines.append(f"|  Occurrences: {len(incidents)}")
        lines.append("|")

        per_minute = Counter(i.root_event.timestamp.strftime("%H:%M") for i in incidents)
        lines.append("|  Timeline:")
        for minute, count in sorted(per_minute.items())[: settings.report_minute_limit]:
            lines.append(f"|    [{minute}] {count} event(s)")

        sources = list(dict.fromkeys(i.root_event.source for i in incidents))
        lines.append("|")
        lines.append(f"|  Affected Sources: {', '.join(sources)}")
        lines.append("|")

        lines.append("|  Sample Messages:")
        for incident in incidents[: settings.report_sample_limit]:
            root = incident.root_event
            lines.append(
                f"|    [{root.timestamp.strftime('%H:%M:%S')}] {root.source}: {root.message[:70]}"
            )
        lines.append("+" + rule("-", 99))

    lines.append("")
    lines.append(rule("="))
    lines.append("LIKELY ROOT CAUSES (based on patterns):")
    lines.append(rule("-"))
    for idx, suggestion in enumerate(suggestions(match), start=1):
        lines.append(f"  {idx}. {suggestion}")
    lines.append("")
    lines.append(rule("="))
    return "\n".join(lines) + "\n"
