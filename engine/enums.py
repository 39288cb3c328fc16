"""
Enumerations for Event Severity, Pattern Severity, and Anomaly Types

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import re
from enum import Enum

from config import PATTERN_SEVERITY_WEIGHTS, SEVERITY_ALIASES

_ERROR_WORD = re.compile(r"\b(ERROR|FATAL|CRITICAL)\b", re.I)
_WARN_WORD = re.compile(r"\b(WARN|WARNING)\b", re.I)


class Severity(str, Enum):
    ERROR = "ERROR"
    WARN = "WARN"
    INFO = "INFO"
    DEBUG = "DEBUG"
    ALERT = "ALERT"

    @classmethod
    def parse(cls, value: str | None, message: str = "") -> Severity:
        # a missing level column falls back to sniffing the message itself
        from config import settings

        raw = (value or "").strip()
        if not raw:
            return cls.infer(message)
        alias = SEVERITY_ALIASES.get(raw.lower())
        if alias:
            return cls(alias)
        return cls(settings.default_severity)

    @classmethod
    def infer(cls, message: str) -> Severity:
        if _ERROR_WORD.search(message or ""):
            return cls.ERROR
        if _WARN_WORD.search(message or ""):
            return cls.WARN
        return cls.INFO

    def is_error(self) -> bool:
        return self is Severity.ERROR


class PatternSeverity(str, Enum):
    warning = "warning"
    high = "high"
    critical = "critical"

    def weight(self) -> int:
        return PATTERN_SEVERITY_WEIGHTS[self.value]


class AnomalyType(str, Enum):
    spike = "spike"
    error_cluster = "error_cluster"
    cascade = "cascade"
