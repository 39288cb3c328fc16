"""
Test cases for the baseline comparator: percentage change rules, significance filtering of per-source changes, error-pattern normalisation, and key findings.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.baseline import TimelineStats, compare, compare_stats, compute, error_pattern, pct_change
from engine.enums import Severity


def test_pct_change():
    assert pct_change(100, 150) == 50.0
    assert pct_change(100, 50) == -50.0
    assert pct_change(3, 4) == 33.3
    assert pct_change(0, 25) == 0.0


def test_error_pattern_normalises_digits_after_truncation():
    assert error_pattern("Timeout after 3000ms on port 5432") == "Timeout after Nms on port N"
    long = "x" * 48 + "123456"
    assert error_pattern(long) == "x" * 48 + "N"


def test_compute_counts_severities_sources_and_error_patterns(make_event):
    events = [
        make_event(0, "db", Severity.ERROR, "conn 1 refused"),
        make_event(1, "db", Severity.ERROR, "conn 2 refused"),
        make_event(2, "web", Severity.WARN, "slow 3"),
    ]

    stats = compute(events)

    assert stats.total == 3
    assert stats.by_severity == {"ERROR": 2, "WARN": 1}
    assert stats.by_source == {"db": 2, "web": 1}
    assert stats.error_patterns == {"conn N refused": 2}
    assert round(stats.error_rate, 1) == 66.7


def test_exactly_ten_percent_is_not_significant():
    baseline = TimelineStats(total=200, by_source={"steady": 100, "busy": 100})
    incident = TimelineStats(total=221, by_source={"steady": 110, "busy": 111})

    diff = compare_stats(baseline, incident)

    assert [c.source for c in diff.source_changes] == ["busy"]
    assert diff.source_changes[0].change_pct == 11.0


def test_source_changes_sorted_by_absolute_change():
    baseline = TimelineStats(total=300, by_source={"a": 100, "b": 100, "c": 100})
    incident = TimelineStats(total=280, by_source={"a": 150, "b": 20, "c": 110})

    diff = compare_stats(baseline, incident)

    assert [(c.source, c.change) for c in diff.source_changes] == [("b", -80), ("a", 50)]


def test_new_sources_are_listed_separately():
    baseline = TimelineStats(total=10, by_source={"a": 10})
    incident = TimelineStats(total=15, by_source={"a": 10, "fresh": 5})

    diff = compare_stats(baseline, incident)

    assert diff.new_sources == ["fresh"]
    assert diff.source_changes == []


def test_compare_events_reports_new_error_patterns_and_findings(make_event):
    baseline = [make_event(i, "app", Severity.INFO, "ok") for i in range(100)]
    baseline.append(make_event(200, "app", Severity.ERROR, "disk check 1 passed late"))
    incident = [make_event(i, "app", Severity.INFO, "ok") for i in range(100)]
    incident += [make_event(200 + i, "app", Severity.ERROR, f"disk full on /dev/sda{i}") for i in range(51)]

    diff = compare(baseline, incident)

    assert diff.event_delta == 50
    assert diff.event_delta_pct == 49.5
    assert diff.new_error_patterns == ["disk full on /dev/sdaN"]
    assert diff.error_delta == 50
    assert any(f.startswith("Error rate increased") for f in diff.findings)
    assert "1 new error pattern(s) detected" in diff.findings


def test_identical_periods_have_no_findings(make_event):
    events = [make_event(i) for i in range(10)]
    diff = compare(events, events)
    assert diff.findings == ["No significant anomalies detected"]
    assert diff.event_delta_pct == 0.0


def test_empty_baseline_does_not_divide_by_zero(make_event):
    diff = compare([], [make_event(0, severity=Severity.ERROR, message="x")])
    assert diff.event_delta_pct == 0.0
    assert diff.baseline_error_rate == 0.0
    assert diff.new_sources == ["app"]
