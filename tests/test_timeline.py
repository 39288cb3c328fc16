"""
Test cases for timeline construction, validating chronological ordering with tie-breaking and the accounting for rows that cannot be placed on the timeline.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from datetime import datetime, timedelta, timezone

import pytest

from datasources.tabular import TabularSource, discover_sources
from engine.enums import Severity
from engine.timeline import TimelineBuilder, build_timeline
from engine.timeline.buckets import bucketize
from engine.timeline.builder import clean_message


def _row(ts, message="ok", severity="INFO", **extra):
    row = {"timestamp": ts, "severity": severity, "message": message}
    row.update(extra)
    return row


def test_events_are_sorted_across_sources():
    builder = TimelineBuilder()
    builder.add_rows("web", [_row("2024-01-15T10:00:05Z", "b"), _row("2024-01-15T10:00:01Z", "a")])
    builder.add_rows("db", [_row("2024-01-15T10:00:03Z", "c")])
    result = builder.build()

    assert [e.message for e in result.events] == ["a", "c", "b"]
    assert [e.source for e in result.events] == ["web", "db", "web"]


def test_equal_timestamps_order_by_source_then_insertion():
    builder = TimelineBuilder()
    builder.add_rows("zeta", [_row("2024-01-15T10:00:00Z", "z")])
    builder.add_rows("alpha", [_row("2024-01-15T10:00:00Z", "first"), _row("2024-01-15T10:00:00Z", "second")])
    result = builder.build()

    assert [e.message for e in result.events] == ["first", "second", "z"]


def test_unparsable_timestamps_are_counted_not_raised():
    builder = TimelineBuilder()
    builder.add_rows("app", [_row("not a time"), _row(""), _row("2024-01-15T10:00:00Z")])
    result = builder.build()

    assert len(result) == 1
    assert result.skipped_rows == 2
    assert result.rows_read == 3


def test_window_bounds_are_inclusive(t0):
    builder = TimelineBuilder(start=t0, end=t0 + timedelta(seconds=60))
    builder.add_rows("app", [
        _row("2024-01-15T09:59:59Z", "before"),
        _row("2024-01-15T10:00:00Z", "start"),
        _row("2024-01-15T10:01:00Z", "end"),
        _row("2024-01-15T10:01:01Z", "after"),
    ])
    result = builder.build()

    assert [e.message for e in result.events] == ["start", "end"]
    assert result.out_of_window_rows == 2
    assert result.time_range == (t0, t0 + timedelta(seconds=60))


def test_source_column_overrides_file_label():
    builder = TimelineBuilder()
    builder.add_rows("System", [_row("2024-01-15T10:00:00Z", ProviderName="Service Control Manager")])
    builder.add_rows("System", [_row("2024-01-15T10:00:01Z")])
    events = builder.build().events

    assert events[0].source == "Service Control Manager"
    assert events[1].source == "System"


def test_missing_severity_is_inferred_from_message():
    builder = TimelineBuilder()
    builder.add_rows("app", [_row("2024-01-15T10:00:00Z", "FATAL: disk gone", severity="")])
    assert builder.build().events[0].severity is Severity.ERROR


def test_clean_message_flattens_and_truncates():
    assert clean_message("line one\r\nline two\tend") == "line one line two end"
    assert clean_message("page\x0cbreak\u2028next\x85end") == "page break next end"
    assert len(clean_message("x" * 2000)) == 500
    assert clean_message(None) == ""


def test_build_timeline_reads_discovered_files(tmp_path, write_tsv):
    write_tsv("PostgreSQL/postgres.tsv", [(5, "ERROR", "", "FATAL: too many connections")])
    write_tsv("app/app.tsv", [(1, "INFO", "", "request served"), (9, "ERROR", "", "connection refused")])
    write_tsv("Analysis/old.tsv", [(2, "INFO", "", "should be ignored")])

    result = build_timeline(discover_sources(tmp_path))

    assert result.files_read == 2
    assert [e.source for e in result.events] == ["app", "PostgreSQL", "app"]
    assert all(e.origin_file.endswith(".tsv") for e in result.events)


def test_unreadable_source_is_recorded_and_skipped(tmp_path, write_tsv):
    good = write_tsv("app/app.tsv", [(0, "INFO", "", "fine")])
    missing = TabularSource(path=tmp_path / "gone" / "gone.tsv", label="gone", delimiter="\t")
    sources = [TabularSource(path=good, label="app", delimiter="\t"), missing]

    result = build_timeline(sources)

    assert len(result) == 1
    assert result.files_read == 1
    assert result.unreadable_sources == [str(missing.path)]


def test_bucketize_aligns_to_epoch_windows(make_event):
    events = [make_event(0), make_event(59), make_event(60), make_event(125)]
    buckets = bucketize(events, 60)

    assert [len(b) for b in buckets.values()] == [2, 1, 1]
    assert list(buckets) == sorted(buckets)


def test_bucketize_rejects_non_positive_width(make_event):
    with pytest.raises(ValueError):
        bucketize([make_event()], 0)


def test_empty_timeline_has_no_range():
    result = TimelineBuilder().build()
    assert result.events == []
    assert result.time_range is None


def test_syslog_rows_late_in_a_long_window_keep_the_window_year():
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    end = datetime(2024, 3, 1, tzinfo=timezone.utc)
    builder = TimelineBuilder(start=start, end=end)
    builder.add_rows("syslog", [_row("Jan 02 08:00:00", "early"), _row("Feb 10 10:00:00", "late")])
    result = builder.build()

    assert [e.message for e in result.events] == ["early", "late"]
    assert result.events[1].timestamp == datetime(2024, 2, 10, 10, 0, tzinfo=timezone.utc)
    assert result.out_of_window_rows == 0


def test_source_column_is_flattened_like_messages():
    builder = TimelineBuilder()
    builder.add_rows("app", [_row("2024-01-15T10:00:00Z", source="edge\x0cproxy\n")])
    assert builder.build().events[0].source == "edge proxy"
