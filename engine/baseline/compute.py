"""
Aggregate statistics of one timeline, used as either side of a baseline-versus-incident comparison.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Sequence

from config import settings
from engine.enums import Severity
from models import Event

_DIGITS = re.compile(r"\d+")


@dataclass(frozen=True)
class TimelineStats:
    total: int
    by_severity: Dict[str, int] = field(default_factory=dict)
    by_source: Dict[str, int] = field(default_factory=dict)
    error_patterns: Dict[str, int] = field(default_factory=dict)

    @property
    def errors(self) -> int:
        return self.by_severity.get(Severity.ERROR.value, 0)

    @property
    def error_rate(self) -> float:
        return self.errors / self.total * 100 if self.total else 0.0


def error_pattern(message: str) -> str:
    return _DIGITS.sub("N", (message or "")[: settings.baseline_pattern_length])


def compute(events: Sequence[Event]) -> TimelineStats:
    by_severity: Counter = Counter()
    by_source: Counter = Counter()
    patterns: Counter = Counter()

    for event in events:
        by_severity[event.severity.value] += 1
        by_source[event.source] += 1
        if event.severity.is_error():
            patterns[error_pattern(event.message)] += 1

    return TimelineStats(
        total=len(events),
        by_severity=dict(by_severity),
        by_source=dict(by_source),
        error_patterns=dict(patterns),
    )
