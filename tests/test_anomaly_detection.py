"""
Test cases for bucketed anomaly detection in the analysis engine, validating thresholds for each anomaly type as well as overlapping anomaly types in a single bucket.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from config import settings
from engine.anomaly import detect, median_baseline
from engine.enums import AnomalyType, Severity


def _quiet_buckets(make_event, per_bucket, buckets=4):
    return [make_event(b * 60 + i) for b in range(buckets) for i in range(per_bucket)]


def _types(result):
    return [a.type for a in result.anomalies]


def test_median_baseline_takes_middle_of_sorted_counts():
    assert median_baseline([5, 1, 9]) == 5
    assert median_baseline([1, 2, 3, 4]) == 3
    assert median_baseline([]) == 0


def test_spike_fires_above_three_times_baseline(make_event):
    events = _quiet_buckets(make_event, 5) + [make_event(300 + i * 0.5) for i in range(20)]

    result = detect(events)

    assert result.baseline == 5
    assert _types(result) == [AnomalyType.spike]
    spike = result.anomalies[0]
    assert spike.count == 20
    assert spike.window_start.timestamp() % 60 == 0
    assert len(spike.sample_events) == 10


def test_spike_below_multiplier_does_not_fire(make_event):
    events = _quiet_buckets(make_event, 5) + [make_event(300 + i) for i in range(12)]
    assert detect(events).anomalies == []


def test_spike_needs_minimum_count(make_event):
    # 10 events against a baseline of 1 clears the multiplier but not the floor
    events = _quiet_buckets(make_event, 1) + [make_event(300 + i) for i in range(10)]
    assert detect(events).anomalies == []


def test_error_cluster_needs_more_than_five_errors(make_event):
    six = [make_event(i, "app", Severity.ERROR, "x") for i in range(6)]
    five = [make_event(i, "app", Severity.ERROR, "x") for i in range(5)]

    assert _types(detect(six)) == [AnomalyType.error_cluster]
    assert detect(five).anomalies == []


def test_cascade_needs_three_error_sources(make_event):
    three = [make_event(i, src, Severity.ERROR, "x") for i, src in enumerate(["a", "b", "c"])]
    two = [make_event(i, src, Severity.ERROR, "x") for i, src in enumerate(["a", "b", "b"])]

    result = detect(three)
    assert _types(result) == [AnomalyType.cascade]
    assert result.anomalies[0].sources == ["a", "b", "c"]
    assert detect(two).anomalies == []


def test_overlapping_types_in_one_bucket_are_all_kept(make_event):
    burst = [make_event(300 + i, "abc"[i % 3], Severity.ERROR, "x") for i in range(12)]
    result = detect(_quiet_buckets(make_event, 1) + burst)

    assert _types(result) == [AnomalyType.spike, AnomalyType.error_cluster, AnomalyType.cascade]
    assert len(result.by_window()) == 1
    assert result.counts() == {"spike": 1, "error_cluster": 1, "cascade": 1}


def test_custom_window_width(make_event):
    events = [make_event(i * 10, "app", Severity.ERROR, "x") for i in range(6)]

    assert _types(detect(events, window_seconds=60)) == [AnomalyType.error_cluster]
    assert detect(events, window_seconds=30).anomalies == []


def test_thresholds_follow_settings(make_event, monkeypatch):
    monkeypatch.setattr(settings, "anomaly_error_cluster_threshold", 2)
    events = [make_event(i, "app", Severity.ERROR, "x") for i in range(3)]
    assert _types(detect(events)) == [AnomalyType.error_cluster]


def test_empty_timeline_has_no_anomalies():
    result = detect([])
    assert result.anomalies == []
    assert result.baseline == 0
    assert result.bucket_count == 0
