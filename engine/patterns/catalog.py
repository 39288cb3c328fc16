"""
Failure-pattern catalog: the static table of trigger -> effect chains the cascade matcher iterates, plus loading of operator-supplied catalogs from YAML.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

from datasources.exceptions import PatternCatalogError
from engine.enums import PatternSeverity


@dataclass(frozen=True)
class ExpectedEffect:
    pattern: re.Pattern
    delay_range: Tuple[float, float]

    def accepts(self, delay: float) -> bool:
        lo, hi = self.delay_range
        return lo <= delay <= hi


@dataclass(frozen=True)
class FailurePattern:
    name: str
    trigger: re.Pattern
    look_ahead_seconds: float
    severity: PatternSeverity
    description: str
    resolution: str = ""
    source_filter: Optional[str] = None
    expected_effects: Tuple[ExpectedEffect, ...] = field(default_factory=tuple)

    def triggers_on(self, message: str, source: str) -> bool:
        if self.source_filter is not None and source != self.source_filter:
            return False
        return bool(self.trigger.search(message))

    @property
    def is_critical(self) -> bool:
        return self.severity is PatternSeverity.critical


def _rx(expr: str) -> re.Pattern:
    return re.compile(expr, re.I)


def _keywords(*words: str) -> re.Pattern:
    return _rx("|".join(re.escape(w) for w in words))


def _effect(expr: str, lo: float, hi: float) -> ExpectedEffect:
    return ExpectedEffect(pattern=_rx(expr), delay_range=(float(lo), float(hi)))


DEFAULT_CATALOG: List[FailurePattern] = [
    FailurePattern(
        name="database_connection_exhausted",
        trigger=_rx(r"FATAL.*too many connections|connection pool exhausted"),
        source_filter="PostgreSQL",
        look_ahead_seconds=60,
        expected_effects=(
            _effect(r"connection.*refused|timeout.*database", 0, 30),
            _effect(r"cannot connect|database.*unavailable", 0, 30),
        ),
        severity=PatternSeverity.critical,
        description="Database connection pool exhaustion",
        resolution=(
            "1. Increase pool size\n"
            "2. Check for connection leaks\n"
            "3. Review recent deployments"
        ),
    ),
    FailurePattern(
        name="database_crash",
        trigger=_rx(r"database system.*shutting down|panic|abnormal.*shutdown"),
        source_filter="PostgreSQL",
        look_ahead_seconds=120,
        expected_effects=(
            _effect(r"connection.*refused|could not connect", 0, 60),
            _effect(r"database.*not.*available", 0, 60),
        ),
        severity=PatternSeverity.critical,
        description="Database crash or shutdown",
        resolution=(
            "1. Inspect the database server log around the shutdown\n"
            "2. Check host resources and storage health\n"
            "3. Fail over to a replica if recovery is slow"
        ),
    ),
    FailurePattern(
        name="out_of_memory",
        trigger=_rx(r"out of memory|cannot allocate|OOM"),
        look_ahead_seconds=30,
        expected_effects=(
            _effect(r"killed|terminated|exit.*137", 0, 15),
            _effect(r"crash|fatal|core dump", 0, 15),
        ),
        severity=PatternSeverity.critical,
        description="Out of memory condition",
        resolution=(
            "1. Check memory usage trends\n"
            "2. Look for memory leaks\n"
            "3. Increase available memory"
        ),
    ),
    FailurePattern(
        name="disk_full",
        trigger=_rx(r"no space left|disk full|write failed.*space"),
        look_ahead_seconds=60,
        expected_effects=(
            _effect(r"cannot write|write.*fail|IO error", 0, 30),
            _effect(r"crash|fatal", 0, 30),
        ),
        severity=PatternSeverity.critical,
        description="Disk space exhausted",
        resolution=(
            "1. Clean up old logs\n"
            "2. Increase disk capacity\n"
            "3. Enable log rotation"
        ),
    ),
    FailurePattern(
        name="agent_connection_loss",
        trigger=_rx(r"connection.*lost|disconnected from|connection.*closed unexpectedly"),
        source_filter="Datadog_Agent",
        look_ahead_seconds=30,
        expected_effects=(
            _effect(r"reconnect|retry|attempting.*connect", 0, 20),
        ),
        severity=PatternSeverity.warning,
        description="Monitoring agent connection lost",
        resolution=(
            "1. Verify agent connectivity to the intake endpoint\n"
            "2. Check proxy and firewall rules"
        ),
    ),
    FailurePattern(
        name="network_timeout",
        trigger=_keywords("connection refused", "network unreachable", "host unreachable", "timed out"),
        look_ahead_seconds=60,
        expected_effects=(
            _effect(r"retry|reconnect", 0, 60),
            _effect(r"service unavailable|http 503|cannot reach", 0, 60),
        ),
        severity=PatternSeverity.high,
        description="Network connectivity issues",
        resolution=(
            "1. Check network logs and firewall changes\n"
            "2. Verify DNS resolution and routing"
        ),
    ),
    FailurePattern(
        name="authentication",
        trigger=_keywords("authentication failed", "unauthorized", "access denied", "invalid credentials"),
        look_ahead_seconds=60,
        expected_effects=(
            _effect(r"account.*locked|forbidden|401|403", 0, 60),
        ),
        severity=PatternSeverity.high,
        description="Authentication or authorization failures",
        resolution=(
            "1. Check credentials and certificate expiry\n"
            "2. Verify identity provider status"
        ),
    ),
    FailurePattern(
        name="service_unavailable",
        trigger=_keywords("service unavailable", "http 503", "cannot reach", "endpoint not found"),
        look_ahead_seconds=60,
        expected_effects=(
            _effect(r"timeout|failed|error", 0, 60),
        ),
        severity=PatternSeverity.critical,
        description="Service availability issue",
        resolution=(
            "1. Check health of the upstream service\n"
            "2. Review load balancer and circuit breaker state\n"
            "3. Roll back recent deployments if the outage followed one"
        ),
    ),
    FailurePattern(
        name="high_cpu",
        trigger=_keywords("cpu usage", "high cpu", "cpu spike"),
        look_ahead_seconds=120,
        expected_effects=(
            _effect(r"slow|timeout|latency", 0, 120),
        ),
        severity=PatternSeverity.high,
        description="High CPU utilization",
        resolution=(
            "1. Check for runaway processes or infinite loops\n"
            "2. Review inefficient queries and traffic spikes"
        ),
    ),
    FailurePattern(
        name="deadlock",
        trigger=_keywords("deadlock", "lock timeout", "waiting for lock"),
        look_ahead_seconds=60,
        expected_effects=(
            _effect(r"rollback|transaction.*abort|timeout", 0, 60),
        ),
        severity=PatternSeverity.high,
        description="Database or resource deadlock",
        resolution=(
            "1. Review transaction isolation levels\n"
            "2. Check lock ordering in recent query changes"
        ),
    ),
    FailurePattern(
        name="crash",
        trigger=_keywords("segfault", "core dump", "fatal error", "panic"),
        look_ahead_seconds=60,
        expected_effects=(
            _effect(r"restart|starting|exited", 0, 60),
        ),
        severity=PatternSeverity.critical,
        description="Application or system crash",
        resolution=(
            "1. Review stack traces and crash dumps\n"
            "2. Check recent code changes"
        ),
    ),
]


def _require(entry: Dict[str, Any], key: str, where: str) -> Any:
    if key not in entry or entry[key] in (None, ""):
        raise PatternCatalogError(f"{where}: missing '{key}'")
    return entry[key]


def _compile(expr: Any, where: str) -> re.Pattern:
    try:
        return _rx(str(expr))
    except re.error as e:
        raise PatternCatalogError(f"{where}: invalid regex {expr!r}: {e}") from e


def _parse_effect(entry: Any, where: str) -> ExpectedEffect:
    if not isinstance(entry, dict):
        raise PatternCatalogError(f"{where}: expected a mapping")
    pattern = _compile(_require(entry, "pattern", where), where)
    delay = entry.get("delay", [0, 0])
    if not isinstance(delay, Sequence) or isinstance(delay, str) or len(delay) != 2:
        raise PatternCatalogError(f"{where}: delay must be [min, max]")
    try:
        lo, hi = float(delay[0]), float(delay[1])
    except (TypeError, ValueError) as e:
        raise PatternCatalogError(f"{where}: delay values must be numbers") from e
    if lo < 0 or hi < lo:
        raise PatternCatalogError(f"{where}: invalid delay range [{lo}, {hi}]")
    return ExpectedEffect(pattern=pattern, delay_range=(lo, hi))


def parse_pattern(entry: Dict[str, Any], index: int = 0) -> FailurePattern:
    if not isinstance(entry, dict):
        raise PatternCatalogError(f"pattern #{index}: expected a mapping")
    name = str(_require(entry, "name", f"pattern #{index}"))
    where = f"pattern '{name}'"

    try:
        severity = PatternSeverity(str(entry.get("severity", "warning")).lower())
    except ValueError as e:
        raise PatternCatalogError(f"{where}: unknown severity {entry.get('severity')!r}") from e

    try:
        look_ahead = float(entry.get("look_ahead", 60))
    except (TypeError, ValueError) as e:
        raise PatternCatalogError(f"{where}: look_ahead must be a number") from e

    effects = entry.get("effects") or []
    if not isinstance(effects, list):
        raise PatternCatalogError(f"{where}: effects must be a list")

    return FailurePattern(
        name=name,
        trigger=_compile(_require(entry, "trigger", where), where),
        source_filter=entry.get("source") or None,
        look_ahead_seconds=look_ahead,
        expected_effects=tuple(
            _parse_effect(e, f"{where} effect #{i}") for i, e in enumerate(effects)
        ),
        severity=severity,
        description=str(entry.get("description", name)),
        resolution=str(entry.get("resolution", "")).strip(),
    )


def load_catalog(path: str | Path) -> List[FailurePattern]:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as e:
        raise PatternCatalogError(f"cannot read pattern catalog {path}: {e}") from e
    except yaml.YAMLError as e:
        raise PatternCatalogError(f"invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("patterns"), list):
        raise PatternCatalogError(f"{path}: expected a top-level 'patterns' list")

    patterns = [parse_pattern(entry, i) for i, entry in enumerate(data["patterns"])]
    names = [p.name for p in patterns]
    dupes = sorted({n for n in names if names.count(n) > 1})
    if dupes:
        raise PatternCatalogError(f"{path}: duplicate pattern name(s): {', '.join(dupes)}")
    return patterns


def merge_catalogs(base: List[FailurePattern], extra: List[FailurePattern]) -> List[FailurePattern]:
    """Entries in ``extra`` replace same-named entries in ``base``; new names append."""
    overrides = {p.name: p for p in extra}
    merged = [overrides.pop(p.name, p) for p in base]
    merged.extend(p for p in extra if p.name in overrides)
    return merged
