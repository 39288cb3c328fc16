"""
Readers for the already-normalized tabular event sources an incident run leaves on disk.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from datasources.exceptions import InvalidTimeWindow, PatternCatalogError, SourceError, SourceUnreadable
from datasources.tabular import TabularSource, discover_sources, read_rows

__all__ = [
    "InvalidTimeWindow",
    "PatternCatalogError",
    "SourceError",
    "SourceUnreadable",
    "TabularSource",
    "discover_sources",
    "read_rows",
]
