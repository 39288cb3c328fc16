"""
Per-minute activity heatmap report.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from config import settings
from engine.reports.common import rule
from engine.timeline.buckets import bucket_start, bucketize
from models import Event


def render_heatmap(events: Sequence[Event]) -> str:
    lines: List[str] = [
        rule("="),
        "EVENT HEATMAP (Events per minute)",
        rule("="),
        "",
    ]

    buckets = bucketize(events, 60)
    if not buckets:
        lines.append("No events in the analysis window; nothing to chart.")
        return "\n".join(lines) + "\n"

    width = settings.heatmap_bar_width
    counts = np.array([len(b) for b in buckets.values()], dtype=float)
    max_count = float(counts.max())
    # half-up rounding so a bucket at exactly half a cell still draws one
    bars = np.floor(counts / max_count * width + 0.5).astype(int)

    for (key, bucket), bar in zip(buckets.items(), bars):
        errors = sum(1 for e in bucket if e.severity.is_error())
        suffix = f" ({errors} errors)" if errors else ""
        lines.append(
            f"[{bucket_start(key).strftime('%Y-%m-%d %H:%M')}] {len(bucket):>5} | {'#' * int(bar)}{suffix}"
        )

    lines.append("")
    lines.append(f"Peak: {int(max_count)} events/minute")
    lines.append(f"Scale: Each # ~ {max_count / width:.1f} events")
    return "\n".join(lines) + "\n"
