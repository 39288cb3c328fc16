"""
Plain-text rendering of the incident analysis artifacts.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.reports.comparison import render_comparison
from engine.reports.heatmap import render_heatmap
from engine.reports.patterns import render_pattern_analysis, suggestions
from engine.reports.summary import render_summary
from engine.reports.timeline import parse_timeline_report, render_timeline
from engine.reports.writer import write_reports

__all__ = [
    "parse_timeline_report",
    "render_comparison",
    "render_heatmap",
    "render_pattern_analysis",
    "render_summary",
    "render_timeline",
    "suggestions",
    "write_reports",
]
