"""
Baseline statistics for a timeline and the comparison of a normal period against the incident period.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.baseline.compare import compare, compare_stats, pct_change
from engine.baseline.compute import TimelineStats, compute, error_pattern

__all__ = ["TimelineStats", "compare", "compare_stats", "compute", "error_pattern", "pct_change"]
