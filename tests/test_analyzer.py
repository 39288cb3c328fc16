"""
Integration tests for the analysis pipeline, running a small collected incident directory through timeline, pattern, anomaly, correlation, root-cause and baseline stages and checking the written artifacts.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import json
from datetime import timedelta

import pytest

from config import (
    REPORT_COMPARISON,
    REPORT_HEATMAP,
    REPORT_JSON,
    REPORT_PATTERNS,
    REPORT_SUMMARY,
    REPORT_TIMELINE,
)
from engine import analyzer
from engine.enums import Severity
from engine.timeline import TimelineResult


@pytest.fixture
def incident_dir(tmp_path, write_tsv):
    root = tmp_path / "incident"
    write_tsv("PostgreSQL/postgres.tsv", [(0, "FATAL", "", "FATAL: too many connections for role app")], root=root)
    write_tsv("app/app.tsv", [
        (5, "ERROR", "", "connection refused by db"),
        (10, "ERROR", "", "cannot connect to database"),
        (12, "INFO", "", "healthcheck ok"),
        (7200, "INFO", "", "late noise"),
    ], root=root)
    (root / "app" / "broken.tsv").write_text("timestamp\tmessage\nnot-a-time\thello\n", encoding="utf-8")
    return root


@pytest.fixture
def baseline_dir(tmp_path, write_tsv):
    root = tmp_path / "baseline"
    write_tsv("app/app.tsv", [(i, "INFO", "", "healthcheck ok") for i in range(4)], root=root)
    return root


def test_run_writes_all_reports_and_finds_root_cause(incident_dir, t0):
    report = analyzer.run(incident_dir, start=t0, end=t0 + timedelta(hours=1))

    out = incident_dir / "Analysis"
    for name in (REPORT_TIMELINE, REPORT_SUMMARY, REPORT_PATTERNS, REPORT_HEATMAP):
        assert (out / name).is_file()
        assert report.reports[name] == str(out / name)
    assert REPORT_COMPARISON not in report.reports

    assert report.total_events == 4
    assert report.files_read == 3
    assert report.skipped_rows == 1
    assert report.out_of_window_rows == 1
    assert report.matched_patterns["database_connection_exhausted"] == 1
    assert report.root_cause.pattern == "database_connection_exhausted"
    assert report.root_cause.effect_count == 2
    assert report.root_cause.confidence == 0.5
    assert report.correlation_count == 1
    assert "Root cause: database_connection_exhausted" in report.summary


def test_rerun_ignores_previous_output(incident_dir, t0):
    first = analyzer.run(incident_dir, start=t0, end=t0 + timedelta(hours=1))
    second = analyzer.run(incident_dir, start=t0, end=t0 + timedelta(hours=1))
    assert first.total_events == second.total_events


def test_baseline_comparison_and_json(incident_dir, baseline_dir, tmp_path):
    out = tmp_path / "reports"
    report = analyzer.run(incident_dir, output_dir=out, baseline_dir=baseline_dir, write_json=True)

    assert (out / REPORT_COMPARISON).is_file()
    assert report.baseline.new_sources == ["PostgreSQL"]
    assert report.baseline.baseline_total == 4

    payload = json.loads((out / REPORT_JSON).read_text(encoding="utf-8"))
    assert payload["root_cause"]["pattern"] == "database_connection_exhausted"
    assert payload["total_events"] == 5


def test_analyze_without_critical_incident(make_event):
    events = [make_event(0, "web", Severity.WARN, "cpu usage at 97%")]
    ctx = analyzer.AnalysisContext(timeline=TimelineResult(events=events))

    outcome = analyzer.analyze(ctx)
    rendered = analyzer.render(outcome)
    report = analyzer.build_report(outcome)

    assert [i.pattern.name for i in outcome.match.incidents] == ["high_cpu"]
    assert outcome.root_cause is None
    assert "No definitive root cause" in rendered[REPORT_SUMMARY]
    assert report.summary.endswith("No definitive root cause.")
    assert REPORT_COMPARISON not in rendered


def test_custom_window_widths_reach_detectors(make_event):
    events = [make_event(i * 20, src, Severity.ERROR, "x") for i, src in enumerate(["a", "b"])]
    ctx = analyzer.AnalysisContext(timeline=TimelineResult(events=events), correlation_window_seconds=60)

    assert len(analyzer.analyze(ctx).correlations) == 1
    ctx.correlation_window_seconds = 10
    assert analyzer.analyze(ctx).correlations == []
