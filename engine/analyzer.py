"""
Analysis pipeline taking a directory of collected event files to the written reports.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from config import (
    REPORT_COMPARISON,
    REPORT_HEATMAP,
    REPORT_JSON,
    REPORT_PATTERNS,
    REPORT_SUMMARY,
    REPORT_TIMELINE,
    settings,
)
from datasources.tabular import discover_sources
from engine import anomaly, baseline, correlation, patterns, rca, reports
from engine.anomaly import AnomalyResult
from engine.baseline import TimelineStats
from engine.correlation import Correlation
from engine.patterns import DEFAULT_CATALOG, FailurePattern, MatchResult
from engine.timeline import TimelineResult, build_timeline
from models import AnalysisReport, BaselineDiff, RootCause

log = logging.getLogger(__name__)


@dataclass
class AnalysisContext:
    timeline: TimelineResult
    catalog: Sequence[FailurePattern] = field(default_factory=lambda: list(DEFAULT_CATALOG))
    baseline: Optional[TimelineResult] = None
    anomaly_window_seconds: int = field(default_factory=lambda: settings.anomaly_window_seconds)
    correlation_window_seconds: int = field(default_factory=lambda: settings.correlation_window_seconds)

    @property
    def window_start(self) -> Optional[datetime]:
        return self.timeline.window_start

    @property
    def window_end(self) -> Optional[datetime]:
        return self.timeline.window_end


@dataclass
class AnalysisOutcome:
    context: AnalysisContext
    match: MatchResult
    anomalies: AnomalyResult
    correlations: List[Correlation]
    root_cause: Optional[RootCause]
    recommendations: List[str]
    baseline_stats: Optional[TimelineStats] = None
    incident_stats: Optional[TimelineStats] = None
    diff: Optional[BaselineDiff] = None


def analyze(ctx: AnalysisContext) -> AnalysisOutcome:
    events = ctx.timeline.events

    # the three detectors only read the timeline; none depends on another
    match = patterns.detect(events, ctx.catalog)
    anomalies = anomaly.detect(events, ctx.anomaly_window_seconds)
    correlations = correlation.correlate(events, ctx.correlation_window_seconds)

    root_cause = rca.resolve(match.incidents, anomalies.anomalies, correlations)
    outcome = AnalysisOutcome(
        context=ctx,
        match=match,
        anomalies=anomalies,
        correlations=correlations,
        root_cause=root_cause,
        recommendations=rca.recommendations(root_cause, events),
    )

    if ctx.baseline is not None:
        outcome.baseline_stats = baseline.compute(ctx.baseline.events)
        outcome.incident_stats = baseline.compute(events)
        outcome.diff = baseline.compare_stats(outcome.baseline_stats, outcome.incident_stats)
    return outcome


def render(outcome: AnalysisOutcome) -> Dict[str, str]:
    timeline = outcome.context.timeline
    rendered = {
        REPORT_TIMELINE: reports.render_timeline(timeline, outcome.anomalies),
        REPORT_SUMMARY: reports.render_summary(
            timeline,
            outcome.match,
            outcome.anomalies,
            outcome.correlations,
            outcome.root_cause,
            outcome.recommendations,
        ),
        REPORT_PATTERNS: reports.render_pattern_analysis(outcome.match),
        REPORT_HEATMAP: reports.render_heatmap(timeline.events),
    }
    if outcome.diff is not None:
        rendered[REPORT_COMPARISON] = reports.render_comparison(
            outcome.baseline_stats, outcome.incident_stats, outcome.diff,
        )
    return rendered


def _summary(report: AnalysisReport) -> str:
    parts = [f"{report.total_events} event(s)"]
    if report.incident_count:
        parts.append(f"{report.incident_count} incident(s) across {len(report.matched_patterns)} pattern type(s)")
    if report.anomaly_counts:
        parts.append(f"{sum(report.anomaly_counts.values())} anomaly record(s)")
    if report.correlation_count:
        parts.append(f"{report.correlation_count} cross-source correlation(s)")
    if report.skipped_rows:
        parts.append(f"{report.skipped_rows} skipped row(s)")
    if report.root_cause:
        top = f" Root cause: {report.root_cause.pattern} ({report.root_cause.confidence * 100:.0f}% confidence)."
    else:
        top = " No definitive root cause."
    return f"{' | '.join(parts)}.{top}"


def build_report(outcome: AnalysisOutcome, paths: Optional[Dict[str, str]] = None) -> AnalysisReport:
    timeline = outcome.context.timeline
    report = AnalysisReport(
        window_start=timeline.window_start,
        window_end=timeline.window_end,
        total_events=len(timeline.events),
        files_read=timeline.files_read,
        skipped_rows=timeline.skipped_rows,
        out_of_window_rows=timeline.out_of_window_rows,
        unreadable_sources=list(timeline.unreadable_sources),
        incident_count=len(outcome.match.incidents),
        matched_patterns=dict(outcome.match.matched),
        anomaly_counts=outcome.anomalies.counts(),
        correlation_count=len(outcome.correlations),
        root_cause=outcome.root_cause,
        baseline=outcome.diff,
        reports=dict(paths or {}),
        time_range=timeline.time_range,
    )
    report.summary = _summary(report)
    return report


def load_timeline(
    input_dir: str | Path,
    start: datetime | None = None,
    end: datetime | None = None,
    output_dir: str | Path | None = None,
) -> TimelineResult:
    extra = (Path(output_dir).name,) if output_dir else ()
    return build_timeline(discover_sources(input_dir, extra_reserved=extra), start, end)


def run(
    input_dir: str | Path,
    output_dir: str | Path | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    catalog: Sequence[FailurePattern] | None = None,
    baseline_dir: str | Path | None = None,
    baseline_start: datetime | None = None,
    baseline_end: datetime | None = None,
    anomaly_window_seconds: int | None = None,
    correlation_window_seconds: int | None = None,
    write_json: bool = False,
) -> AnalysisReport:
    input_dir = Path(input_dir)
    output_dir = Path(output_dir) if output_dir else input_dir / settings.output_dir_name

    ctx = AnalysisContext(
        timeline=load_timeline(input_dir, start, end, output_dir),
        catalog=list(catalog) if catalog is not None else list(DEFAULT_CATALOG),
        anomaly_window_seconds=anomaly_window_seconds or settings.anomaly_window_seconds,
        correlation_window_seconds=correlation_window_seconds or settings.correlation_window_seconds,
    )
    if baseline_dir is not None:
        ctx.baseline = load_timeline(baseline_dir, baseline_start, baseline_end)

    outcome = analyze(ctx)
    paths = reports.write_reports(output_dir, render(outcome))
    report = build_report(outcome, paths)

    if write_json:
        json_path = output_dir / REPORT_JSON
        json_path.write_text(report.model_dump_json(indent=2), encoding="utf-8")
        report.reports[REPORT_JSON] = str(json_path)
        log.info("Report written: %s", json_path)
    return report
