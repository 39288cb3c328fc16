"""
Fixed-width, epoch-aligned grouping of timeline events.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Dict, List, Sequence

from engine.timeline.timestamps import UTC
from models import Event


def bucket_key(event: Event, window_seconds: int) -> int:
    return int(math.floor(event.epoch / window_seconds)) * window_seconds


def bucketize(events: Sequence[Event], window_seconds: int) -> Dict[int, List[Event]]:
    """Group events into fixed windows keyed by window-start epoch, keys ascending."""
    if window_seconds <= 0:
        raise ValueError("window_seconds must be positive")
    buckets: Dict[int, List[Event]] = {}
    for event in events:
        buckets.setdefault(bucket_key(event, window_seconds), []).append(event)
    return dict(sorted(buckets.items()))


def bucket_start(key: int) -> datetime:
    return datetime.fromtimestamp(key, tz=UTC)
