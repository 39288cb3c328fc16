"""
Confidence scoring for root-cause determinations, built from a fixed base plus additive bonuses and capped below certainty.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from config import settings
from engine.correlation.temporal import Correlation
from engine.patterns.matcher import Incident
from models import AnomalyBucket


def score_effects(effect_count: int) -> float:
    bonus = 0.0
    for threshold, weight in settings.rca_effect_bonuses:
        if effect_count > threshold:
            bonus += weight
    return bonus


def score_incident(
    incident: Incident,
    anomalies: Sequence[AnomalyBucket] = (),
    correlations: Sequence[Correlation] = (),
    occurrences: int = 1,
) -> Tuple[float, List[str]]:
    effect_count = len(incident.effects)
    confidence = settings.rca_base_confidence + score_effects(effect_count)
    evidence = [
        f"Pattern '{incident.pattern.name}' triggered at "
        f"{incident.root_event.timestamp.strftime('%Y-%m-%d %H:%M:%S')} by {incident.root_event.source}",
        f"{effect_count} cascade effect(s) within {int(incident.pattern.look_ahead_seconds)}s",
    ]
    if occurrences > 1:
        evidence.append(f"Pattern matched {occurrences} time(s) in the window")

    if anomalies:
        confidence += settings.rca_anomaly_bonus
        evidence.append(f"{len(anomalies)} anomaly window(s) detected")

    sources = incident.sources
    if len(sources) > settings.rca_source_threshold:
        confidence += settings.rca_source_bonus
        evidence.append(f"{len(sources)} sources affected: {', '.join(sources)}")

    if correlations:
        evidence.append(f"{len(correlations)} temporal correlation(s) across sources")

    return round(min(confidence, settings.rca_confidence_cap), 3), evidence
