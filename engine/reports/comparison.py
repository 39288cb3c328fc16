"""
Baseline comparison report rendering for a normal period against the incident period.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import List

from config import settings
from engine.baseline.compare import format_change, pct_change
from engine.baseline.compute import TimelineStats
from engine.reports.common import rule
from models import BaselineDiff


def render_comparison(baseline: TimelineStats, incident: TimelineStats, diff: BaselineDiff) -> str:
    lines: List[str] = [rule("="), "BASELINE vs INCIDENT COMPARISON", rule("="), ""]

    lines.extend([
        "OVERALL METRICS:",
        rule("-"),
        "  Total Events:",
        f"    Baseline:  {diff.baseline_total}",
        f"    Incident:  {diff.incident_total}",
        f"    Change:    {format_change(diff.event_delta, diff.event_delta_pct)}",
        "",
        "  Error Events:",
        f"    Baseline:  {diff.baseline_errors} ({diff.baseline_error_rate:.1f}% of events)",
        f"    Incident:  {diff.incident_errors} ({diff.incident_error_rate:.1f}% of events)",
        f"    Change:    {diff.error_delta:+d} ({diff.error_rate_delta:+.1f} pp error rate)",
        "",
    ])

    lines.append("SEVERITY COMPARISON:")
    lines.append(rule("-"))
    lines.append(f"  {'Severity':<15} {'Baseline':>15} {'Incident':>15} {'Change':>20}")
    lines.append("  " + rule("-", 65))
    for sev in sorted(set(baseline.by_severity) | set(incident.by_severity)):
        base = baseline.by_severity.get(sev, 0)
        inc = incident.by_severity.get(sev, 0)
        lines.append(f"  {sev:<15} {base:>15d} {inc:>15d} {inc - base:>10d} ({pct_change(base, inc):+.1f}%)")
    lines.append("")

    lines.append("SIGNIFICANT SOURCE CHANGES:")
    lines.append(rule("-"))
    if diff.source_changes:
        lines.append(f"  {'Source':<20} {'Baseline':>12} {'Incident':>12} {'Change':>15}")
        lines.append("  " + rule("-", 60))
        for c in diff.source_changes:
            lines.append(f"  {c.source:<20} {c.baseline:>12d} {c.incident:>12d} {c.change:>8d} ({c.change_pct:+.1f}%)")
    else:
        lines.append(f"  No source changed by more than {settings.baseline_significance_pct:g}%.")
    lines.append("")

    if diff.new_sources:
        lines.append("NEW SOURCES (not seen in baseline):")
        lines.append(rule("-"))
        for src in diff.new_sources:
            lines.append(f"  {src:<20} {incident.by_source.get(src, 0):>12d} events")
        lines.append("")

    lines.append("NEW ERROR PATTERNS (not seen in baseline):")
    lines.append(rule("-"))
    if diff.new_error_patterns:
        for pattern in diff.new_error_patterns[: settings.report_new_pattern_limit]:
            lines.append(f"  [{incident.error_patterns.get(pattern, 0)}x] {pattern}")
    else:
        lines.append("  None.")
    lines.append("")

    lines.append("KEY FINDINGS:")
    lines.append(rule("-"))
    lines.extend(f"  * {finding}" for finding in diff.findings)
    lines.append("")
    lines.append(rule("="))
    return "\n".join(lines) + "\n"
