"""
Cascade pattern matching: finds events that trigger a known failure pattern and scans the look-ahead window after each one for the downstream effects that pattern predicts.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from engine.enums import PatternSeverity
from engine.patterns.catalog import DEFAULT_CATALOG, FailurePattern
from models import Event

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class EffectMatch:
    event: Event
    delay_seconds: float
    matched_pattern: str


@dataclass
class Incident:
    pattern: FailurePattern
    root_event: Event
    effects: List[EffectMatch] = field(default_factory=list)

    @property
    def severity(self) -> PatternSeverity:
        return self.pattern.severity

    @property
    def sources(self) -> List[str]:
        seen = [self.root_event.source] + [e.event.source for e in self.effects]
        return list(dict.fromkeys(seen))


@dataclass
class MatchResult:
    incidents: List[Incident] = field(default_factory=list)
    matched: Dict[str, int] = field(default_factory=dict)
    effect_count: int = 0

    def for_pattern(self, name: str) -> List[Incident]:
        return [i for i in self.incidents if i.pattern.name == name]


def find_effects(events: Sequence[Event], root_index: int, pattern: FailurePattern) -> List[EffectMatch]:
    root = events[root_index]
    effects: List[EffectMatch] = []
    for i in range(root_index + 1, len(events)):
        event = events[i]
        delay = event.epoch - root.epoch
        if delay > pattern.look_ahead_seconds:
            break
        for rule in pattern.expected_effects:
            if rule.pattern.search(event.message) and rule.accepts(delay):
                effects.append(EffectMatch(
                    event=event,
                    delay_seconds=delay,
                    matched_pattern=rule.pattern.pattern,
                ))
    return effects


def detect(events: Sequence[Event], catalog: Sequence[FailurePattern] | None = None) -> MatchResult:
    """One Incident per (trigger event, pattern); an incident with no effects is still kept."""
    if catalog is None:
        catalog = DEFAULT_CATALOG

    incidents: List[Incident] = []
    for idx, event in enumerate(events):
        for pattern in catalog:
            if not pattern.triggers_on(event.message, event.source):
                continue
            incidents.append(Incident(
                pattern=pattern,
                root_event=event,
                effects=find_effects(events, idx, pattern),
            ))

    matched = Counter(i.pattern.name for i in incidents)
    result = MatchResult(
        incidents=incidents,
        matched=dict(matched),
        effect_count=sum(len(i.effects) for i in incidents),
    )
    log.info("Detected %d potential incident(s) across %d pattern type(s)", len(incidents), len(matched))
    return result
