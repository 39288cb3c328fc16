"""
Root-cause resolution: the earliest critical incident is taken as the trigger of the whole incident and scored against the supporting evidence.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from config import settings
from engine.correlation.temporal import Correlation
from engine.patterns.matcher import Incident
from engine.rca.scoring import score_incident
from models import AnomalyBucket, Event, RootCause

log = logging.getLogger(__name__)


def select_root_incident(incidents: Sequence[Incident]) -> Optional[Incident]:
    best: Optional[Incident] = None
    for incident in incidents:
        if not incident.pattern.is_critical:
            continue
        # strict comparison keeps the first of several equally-early incidents
        if best is None or incident.root_event.timestamp < best.root_event.timestamp:
            best = incident
    return best


def resolve(
    incidents: Sequence[Incident],
    anomalies: Sequence[AnomalyBucket] = (),
    correlations: Sequence[Correlation] = (),
) -> Optional[RootCause]:
    chosen = select_root_incident(incidents)
    if chosen is None:
        log.info("No critical incident; no definitive root cause")
        return None

    occurrences = sum(1 for i in incidents if i.pattern.name == chosen.pattern.name)
    confidence, evidence = score_incident(chosen, anomalies, correlations, occurrences)

    log.info("Root cause: %s (confidence %.0f%%)", chosen.pattern.name, confidence * 100)
    return RootCause(
        pattern=chosen.pattern.name,
        description=chosen.pattern.description,
        confidence=confidence,
        timestamp=chosen.root_event.timestamp,
        evidence=evidence,
        resolution=chosen.pattern.resolution,
        root_event=chosen.root_event,
        effect_count=len(chosen.effects),
        affected_sources=chosen.sources,
    )


def error_rate(events: Sequence[Event]) -> float:
    if not events:
        return 0.0
    errors = sum(1 for e in events if e.severity.is_error())
    return errors / len(events) * 100


def recommendations(root_cause: Optional[RootCause], events: Sequence[Event]) -> List[str]:
    recs: List[str] = []

    if root_cause is not None:
        recs.append("IMMEDIATE:")
        recs.extend(f"  {line}" for line in (root_cause.resolution or root_cause.description).splitlines())

    error_sources = {e.source for e in events if e.severity.is_error()}
    if len(error_sources) > settings.rca_cascade_source_advice:
        recs.extend([
            "CASCADING FAILURE DETECTED:",
            "  1. Focus on earliest failure point",
            "  2. Check dependencies between services",
            "  3. Review circuit breaker patterns",
        ])

    rate = error_rate(events)
    if rate > settings.rca_high_error_rate_pct:
        recs.extend([
            "HIGH ERROR RATE:",
            f"  - Error rate: {rate:.1f}% (threshold: {settings.rca_high_error_rate_pct:.0f}%)",
            "  - Consider rolling back recent deployments",
            "  - Enable debug logging",
        ])

    if not recs:
        recs = [
            "No critical issues detected",
            "Review logs for any patterns or trends",
        ]
    return recs
