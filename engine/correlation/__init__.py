"""
Correlation logic for grouping simultaneous error-like events across different sources based on temporal proximity, to assist in root cause analysis and incident investigation.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.correlation.temporal import Correlation, correlate, is_error_like

__all__ = ["Correlation", "correlate", "is_error_like"]
