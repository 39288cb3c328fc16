"""
Temporal correlation logic to identify windows where error-like events from several distinct sources occur together, independent of any named failure pattern, to highlight services that failed at the same time.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Sequence

from config import settings
from engine.timeline.buckets import bucket_start, bucketize
from models import Event

log = logging.getLogger(__name__)


@dataclass
class Correlation:
    window_start: datetime
    window_seconds: int
    events: List[Event] = field(default_factory=list)
    sources: List[str] = field(default_factory=list)


def _error_matcher() -> re.Pattern:
    return re.compile(settings.correlation_error_regex, re.I)


def is_error_like(event: Event, matcher: re.Pattern | None = None) -> bool:
    if event.severity.is_error():
        return True
    matcher = matcher or _error_matcher()
    return bool(matcher.search(event.message))


def correlate(events: Sequence[Event], window_seconds: int | None = None) -> List[Correlation]:
    if window_seconds is None:
        window_seconds = settings.correlation_window_seconds

    matcher = _error_matcher()
    correlations: List[Correlation] = []
    for key, bucket in bucketize(events, window_seconds).items():
        errors = [e for e in bucket if is_error_like(e, matcher)]
        if len(errors) < settings.correlation_min_events:
            continue
        sources = list(dict.fromkeys(e.source for e in errors))
        if len(sources) < settings.correlation_min_sources:
            continue
        correlations.append(Correlation(
            window_start=bucket_start(key),
            window_seconds=window_seconds,
            events=errors,
            sources=sources,
        ))

    log.info("Found %d temporal correlation(s)", len(correlations))
    return correlations
