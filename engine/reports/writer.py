"""
Writes rendered reports into the output directory.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict

log = logging.getLogger(__name__)


def write_reports(output_dir: str | Path, rendered: Dict[str, str]) -> Dict[str, str]:
    """Write each rendered report under ``output_dir``; returns name -> path."""
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    paths: Dict[str, str] = {}
    for name, text in rendered.items():
        path = out / name
        path.write_text(text, encoding="utf-8")
        paths[name] = str(path)
        log.info("Report written: %s", path)
    return paths
