"""
Root-cause resolution and confidence scoring over detected incidents.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.rca.resolver import recommendations, resolve, select_root_incident
from engine.rca.scoring import score_incident

__all__ = ["recommendations", "resolve", "score_incident", "select_root_incident"]
