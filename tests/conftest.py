import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# ensure workspace root is on sys.path so our application packages can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from engine.enums import Severity
from models import Event

T0 = datetime(2024, 1, 15, 10, 0, 0, tzinfo=timezone.utc)

TSV_HEADER = ["timestamp", "severity", "source", "message"]


@pytest.fixture
def t0():
    return T0


@pytest.fixture
def make_event():
    """Factory for events offset in seconds from a fixed, minute-aligned T0."""
    def _make(offset=0.0, source="app", severity=Severity.INFO, message="ok", origin_file=""):
        return Event(
            timestamp=T0 + timedelta(seconds=offset),
            source=source,
            severity=Severity(severity),
            message=message,
            origin_file=origin_file,
        )
    return _make


@pytest.fixture
def write_tsv(tmp_path):
    """Write a tab-separated event file under tmp_path; rows are (offset, severity, source, message)."""
    def _write(relative, rows, header=TSV_HEADER, root=None):
        path = Path(root or tmp_path) / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        lines = ["\t".join(header)]
        for offset, severity, source, message in rows:
            ts = (T0 + timedelta(seconds=offset)).strftime("%Y-%m-%dT%H:%M:%SZ")
            lines.append("\t".join([ts, severity, source, message]))
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path
    return _write
