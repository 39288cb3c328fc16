"""
Failure-pattern catalog and cascade matching over the incident timeline.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.patterns.catalog import DEFAULT_CATALOG, ExpectedEffect, FailurePattern, load_catalog, merge_catalogs
from engine.patterns.matcher import EffectMatch, Incident, MatchResult, detect

__all__ = [
    "DEFAULT_CATALOG",
    "EffectMatch",
    "ExpectedEffect",
    "FailurePattern",
    "Incident",
    "MatchResult",
    "detect",
    "load_catalog",
    "merge_catalogs",
]
