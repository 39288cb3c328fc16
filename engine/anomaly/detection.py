"""
Detection of statistically abnormal time buckets in the incident timeline, measured against the median bucket volume.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import numpy as np

from config import settings
from engine.enums import AnomalyType
from engine.timeline.buckets import bucket_start, bucketize
from models import AnomalyBucket, Event

log = logging.getLogger(__name__)


@dataclass
class AnomalyResult:
    anomalies: List[AnomalyBucket] = field(default_factory=list)
    baseline: int = 0
    bucket_count: int = 0
    window_seconds: int = 60

    def counts(self) -> Dict[str, int]:
        return dict(Counter(a.type.value for a in self.anomalies))

    def by_window(self) -> Dict[int, List[AnomalyBucket]]:
        out: Dict[int, List[AnomalyBucket]] = {}
        for a in self.anomalies:
            out.setdefault(int(a.window_start.timestamp()), []).append(a)
        return out


def median_baseline(counts: Sequence[int]) -> int:
    # middle element of the sorted counts, not the numpy mean-of-two median
    if len(counts) == 0:
        return 0
    arr = np.sort(np.asarray(counts, dtype=int))
    return int(arr[len(arr) // 2])


def _is_spike(count: int, baseline: int) -> bool:
    return (
        count > baseline * settings.anomaly_spike_multiplier
        and count > settings.anomaly_spike_min_count
    )


def _classify(key: int, bucket: List[Event], baseline: int) -> List[AnomalyBucket]:
    found: List[AnomalyBucket] = []
    start = bucket_start(key)
    count = len(bucket)

    if _is_spike(count, baseline):
        found.append(AnomalyBucket(
            type=AnomalyType.spike,
            window_start=start,
            count=count,
            baseline=baseline,
            sample_events=bucket[: settings.anomaly_sample_limit],
        ))

    errors = [e for e in bucket if e.severity.is_error()]
    if len(errors) > settings.anomaly_error_cluster_threshold:
        found.append(AnomalyBucket(
            type=AnomalyType.error_cluster,
            window_start=start,
            count=len(errors),
            baseline=baseline,
            sample_events=errors[: settings.anomaly_sample_limit],
        ))

    sources = list(dict.fromkeys(e.source for e in errors))
    if len(sources) >= settings.anomaly_cascade_min_sources:
        found.append(AnomalyBucket(
            type=AnomalyType.cascade,
            window_start=start,
            count=len(errors),
            baseline=baseline,
            sources=sources,
            sample_events=errors[: settings.anomaly_cascade_sample_limit],
        ))

    return found


def detect(events: Sequence[Event], window_seconds: int | None = None) -> AnomalyResult:
    if window_seconds is None:
        window_seconds = settings.anomaly_window_seconds

    buckets = bucketize(events, window_seconds)
    baseline = median_baseline([len(b) for b in buckets.values()])

    anomalies: List[AnomalyBucket] = []
    for key, bucket in buckets.items():
        anomalies.extend(_classify(key, bucket, baseline))

    log.info(
        "Anomaly scan: %d bucket(s), baseline %d event(s)/bucket, %d anomaly record(s)",
        len(buckets), baseline, len(anomalies),
    )
    return AnomalyResult(
        anomalies=anomalies,
        baseline=baseline,
        bucket_count=len(buckets),
        window_seconds=window_seconds,
    )
