"""
Result models shared by the engine stages and the report renderer.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, model_serializer

from engine.enums import AnomalyType, Severity


def _coerce(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {k: _coerce(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_coerce(v) for v in obj]
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    return obj


class NpModel(BaseModel):

    @model_serializer(mode="wrap")
    def _serialize(self, handler: Any) -> Any:
        return _coerce(handler(self))


class Event(NpModel):
    """One normalized log record. Never mutated once the timeline is built."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    source: str
    severity: Severity
    message: str = ""
    origin_file: str = ""

    @property
    def epoch(self) -> float:
        return self.timestamp.timestamp()


class AnomalyBucket(NpModel):

    type: AnomalyType
    window_start: datetime
    count: int
    baseline: int = 0
    sources: List[str] = Field(default_factory=list)
    sample_events: List[Event] = Field(default_factory=list)


class RootCause(NpModel):

    pattern: str
    description: str
    confidence: float = Field(ge=0.0, le=0.95)
    timestamp: datetime
    evidence: List[str]
    resolution: str
    root_event: Event
    effect_count: int = 0
    affected_sources: List[str] = Field(default_factory=list)


class SourceChange(NpModel):

    source: str
    baseline: int
    incident: int
    change: int
    change_pct: float


class BaselineDiff(NpModel):

    baseline_total: int
    incident_total: int
    event_delta: int
    event_delta_pct: float
    baseline_errors: int
    incident_errors: int
    error_delta: int
    baseline_error_rate: float
    incident_error_rate: float
    error_rate_delta: float
    new_error_patterns: List[str] = Field(default_factory=list)
    new_sources: List[str] = Field(default_factory=list)
    source_changes: List[SourceChange] = Field(default_factory=list)
    findings: List[str] = Field(default_factory=list)


class AnalysisReport(NpModel):

    window_start: Optional[datetime] = None
    window_end: Optional[datetime] = None
    total_events: int
    files_read: int = 0
    skipped_rows: int = 0
    out_of_window_rows: int = 0
    unreadable_sources: List[str] = Field(default_factory=list)
    incident_count: int = 0
    matched_patterns: Dict[str, int] = Field(default_factory=dict)
    anomaly_counts: Dict[str, int] = Field(default_factory=dict)
    correlation_count: int = 0
    root_cause: Optional[RootCause] = None
    baseline: Optional[BaselineDiff] = None
    reports: Dict[str, str] = Field(default_factory=dict)
    time_range: Optional[Tuple[datetime, datetime]] = None
    summary: str = ""
