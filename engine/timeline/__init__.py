"""
Timeline construction for incident analysis: the chronological event builder every analysis stage reads from.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.timeline.builder import TimelineBuilder, TimelineResult, build_timeline
from engine.timeline.timestamps import parse_timestamp
from engine.timeline.window import resolve_window

__all__ = ["TimelineBuilder", "TimelineResult", "build_timeline", "parse_timestamp", "resolve_window"]
