"""
Baseline comparison: diffs the statistics of a normal period against the incident period and distils the changes an investigator should look at first.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from config import settings
from engine.baseline.compute import TimelineStats, compute
from models import BaselineDiff, Event, SourceChange

log = logging.getLogger(__name__)


def pct_change(old: float, new: float) -> float:
    if old == 0:
        return 0.0
    return round((new - old) / old * 100, 1)


def format_change(absolute: float, pct: float) -> str:
    sign = "+" if absolute >= 0 else ""
    return f"{sign}{absolute:g} ({sign}{pct:g}%)"


def source_changes(baseline: TimelineStats, incident: TimelineStats) -> List[SourceChange]:
    changes: List[SourceChange] = []
    for source in dict.fromkeys(list(baseline.by_source) + list(incident.by_source)):
        base = baseline.by_source.get(source, 0)
        inc = incident.by_source.get(source, 0)
        pct = pct_change(base, inc)
        if abs(pct) > settings.baseline_significance_pct:
            changes.append(SourceChange(
                source=source, baseline=base, incident=inc, change=inc - base, change_pct=pct,
            ))
    return sorted(changes, key=lambda c: abs(c.change), reverse=True)


def _findings(baseline: TimelineStats, incident: TimelineStats, diff: BaselineDiff) -> List[str]:
    findings: List[str] = []
    if diff.event_delta_pct > settings.baseline_volume_finding_pct:
        findings.append(f"Event volume increased significantly ({diff.event_delta_pct:g}%)")
    if diff.error_delta > settings.baseline_error_finding_count:
        findings.append(f"Error count spiked dramatically (+{diff.error_delta} errors)")
    if diff.error_rate_delta > settings.baseline_error_rate_finding_pp:
        findings.append(
            f"Error rate increased from {baseline.error_rate:.1f}% to {incident.error_rate:.1f}%"
        )
    if diff.new_error_patterns:
        findings.append(f"{len(diff.new_error_patterns)} new error pattern(s) detected")
    if diff.new_sources:
        findings.append(f"{len(diff.new_sources)} source(s) only present during the incident")
    if diff.source_changes:
        biggest = diff.source_changes[0]
        findings.append(
            f"{biggest.source} had largest change: {format_change(biggest.change, biggest.change_pct)}"
        )
    if not findings:
        findings.append("No significant anomalies detected")
    return findings


def compare_stats(baseline: TimelineStats, incident: TimelineStats) -> BaselineDiff:
    new_patterns = [p for p in incident.error_patterns if p not in baseline.error_patterns]
    new_sources = [s for s in incident.by_source if s not in baseline.by_source]

    diff = BaselineDiff(
        baseline_total=baseline.total,
        incident_total=incident.total,
        event_delta=incident.total - baseline.total,
        event_delta_pct=pct_change(baseline.total, incident.total),
        baseline_errors=baseline.errors,
        incident_errors=incident.errors,
        error_delta=incident.errors - baseline.errors,
        baseline_error_rate=round(baseline.error_rate, 2),
        incident_error_rate=round(incident.error_rate, 2),
        error_rate_delta=round(incident.error_rate - baseline.error_rate, 2),
        new_error_patterns=new_patterns,
        new_sources=new_sources,
        source_changes=source_changes(baseline, incident),
    )
    diff.findings = _findings(baseline, incident, diff)
    return diff


def compare(baseline_events: Sequence[Event], incident_events: Sequence[Event]) -> BaselineDiff:
    diff = compare_stats(compute(baseline_events), compute(incident_events))
    log.info(
        "Baseline comparison: %+d event(s) (%+.1f%%), %d new error pattern(s)",
        diff.event_delta, diff.event_delta_pct, len(diff.new_error_patterns),
    )
    return diff
