"""
Discovery and reading of delimited event files produced by the collectors.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List

from config import RESERVED_DIRS, SOURCE_DELIMITERS, settings
from datasources.exceptions import SourceUnreadable

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TabularSource:
    path: Path
    label: str
    delimiter: str


def _label_for(path: Path, root: Path) -> str:
    parent = path.parent
    if parent == root:
        return path.stem
    return parent.name


def _is_reserved(path: Path, root: Path, reserved: Iterable[str]) -> bool:
    try:
        parts = path.relative_to(root).parts[:-1]
    except ValueError:
        parts = path.parts[:-1]
    return any(part in reserved for part in parts)


def discover_sources(root: str | Path, extra_reserved: Iterable[str] = ()) -> List[TabularSource]:
    root = Path(root)
    reserved = set(RESERVED_DIRS) | {settings.output_dir_name} | set(extra_reserved)

    sources: List[TabularSource] = []
    for path in sorted(root.rglob("*")):
        delimiter = SOURCE_DELIMITERS.get(path.suffix.lower())
        if delimiter is None or not path.is_file():
            continue
        if _is_reserved(path, root, reserved):
            log.debug("Skipping report output %s", path)
            continue
        sources.append(TabularSource(path=path, label=_label_for(path, root), delimiter=delimiter))
    return sources


def read_rows(source: TabularSource) -> List[Dict[str, str]]:
    """
    Read a delimited file into header-keyed rows.

    A row the csv parser rejects is kept as an empty mapping so the timeline
    counts it as skipped; only failing to open or read the header makes the
    whole source unreadable.
    """
    quoting = csv.QUOTE_NONE if source.delimiter == "\t" else csv.QUOTE_MINIMAL
    csv.field_size_limit(settings.csv_field_size_limit)
    try:
        with open(source.path, "r", encoding="utf-8-sig", errors="replace", newline="") as fh:
            reader = csv.reader(fh, delimiter=source.delimiter, quoting=quoting)
            headers = next(reader, None)
            if not headers:
                return []
            headers = [h.strip() for h in headers]
            rows: List[Dict[str, str]] = []
            malformed = 0
            while True:
                try:
                    values = next(reader)
                except StopIteration:
                    break
                except csv.Error as e:
                    log.debug("%s line %d: %s", source.path, reader.line_num, e)
                    malformed += 1
                    rows.append({})
                    continue
                if not any(v.strip() for v in values):
                    continue
                if len(values) < len(headers):
                    values = values + [""] * (len(headers) - len(values))
                rows.append(dict(zip(headers, values)))
    except (OSError, csv.Error) as e:
        raise SourceUnreadable(f"{source.path}: {e}") from e
    if malformed:
        log.warning("%s: %d malformed row(s) skipped", source.path, malformed)
    return rows
