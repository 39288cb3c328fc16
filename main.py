"""
Command-line entry point for the Faultline incident correlation engine.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from config import settings
from datasources.exceptions import InvalidTimeWindow, PatternCatalogError
from engine import analyzer
from engine.patterns import DEFAULT_CATALOG, FailurePattern, load_catalog, merge_catalogs
from engine.timeline import resolve_window

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_USAGE = 2


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="faultline",
        description="Correlate collected event files into an incident timeline and root-cause report",
    )
    parser.add_argument("input_dir", help="Directory of collected .csv/.tsv event files")
    parser.add_argument("--start", default=None, help="Window start (ISO 8601, naive values are UTC)")
    parser.add_argument("--end", default=None, help="Window end (ISO 8601, naive values are UTC)")
    parser.add_argument("--last", default=None, help="Relative window ending now: 6h, 2d, 1w, 1m")
    parser.add_argument("--today", action="store_true", help="Window covering the current UTC day")
    parser.add_argument("--yesterday", action="store_true", help="Window covering the previous UTC day")
    parser.add_argument("--back", default=None, help="One-day window starting this far back: 2m1w3d, 36h")
    parser.add_argument("--output", default=None, help=f"Report directory (default: <input>/{settings.output_dir_name})")
    parser.add_argument("--baseline", default=None, help="Directory of normal-period event files to compare against")
    parser.add_argument("--baseline-start", default=None, help="Baseline window start (ISO 8601)")
    parser.add_argument("--baseline-end", default=None, help="Baseline window end (ISO 8601)")
    parser.add_argument("--patterns", default=None, help="YAML catalog replacing the built-in failure patterns")
    parser.add_argument("--extend-patterns", default=None, help="YAML catalog merged over the built-in failure patterns")
    parser.add_argument("--bucket-seconds", type=int, default=None, help="Anomaly bucket width (seconds)")
    parser.add_argument("--correlation-seconds", type=int, default=None, help="Correlation window width (seconds)")
    parser.add_argument("--json", action="store_true", help="Also write a machine-readable analysis.json")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def _catalog(args: argparse.Namespace) -> List[FailurePattern]:
    if args.patterns and args.extend_patterns:
        raise PatternCatalogError("--patterns and --extend-patterns are mutually exclusive")
    if args.patterns:
        return load_catalog(args.patterns)
    if args.extend_patterns:
        return merge_catalogs(list(DEFAULT_CATALOG), load_catalog(args.extend_patterns))
    return list(DEFAULT_CATALOG)


def _positive(name: str, value: Optional[int]) -> Optional[int]:
    if value is not None and value <= 0:
        raise InvalidTimeWindow(f"{name} must be positive, got {value}")
    return value


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stdout,
    )

    input_dir = Path(args.input_dir)
    if not input_dir.is_dir():
        log.error("Input directory not found: %s", input_dir)
        return EXIT_USAGE
    if args.baseline and not Path(args.baseline).is_dir():
        log.error("Baseline directory not found: %s", args.baseline)
        return EXIT_USAGE

    try:
        start, end = resolve_window(
            args.start, args.end, args.last,
            today=args.today, yesterday=args.yesterday, back=args.back,
        )
        baseline_start, baseline_end = resolve_window(args.baseline_start, args.baseline_end)
        bucket_seconds = _positive("--bucket-seconds", args.bucket_seconds)
        correlation_seconds = _positive("--correlation-seconds", args.correlation_seconds)
        catalog = _catalog(args)
    except (InvalidTimeWindow, PatternCatalogError) as exc:
        log.error("%s", exc)
        return EXIT_USAGE

    log.info("Analyzing %s with %d failure pattern(s)", input_dir, len(catalog))
    report = analyzer.run(
        input_dir,
        output_dir=args.output,
        start=start,
        end=end,
        catalog=catalog,
        baseline_dir=args.baseline,
        baseline_start=baseline_start,
        baseline_end=baseline_end,
        anomaly_window_seconds=bucket_seconds,
        correlation_window_seconds=correlation_seconds,
        write_json=args.json,
    )
    log.info("%s", report.summary)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
