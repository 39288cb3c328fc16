"""
Constants and configuration for Faultline.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from typing import Dict, List, Tuple

from pydantic_settings import BaseSettings


# column aliases accepted by the tabular reader, in lookup order
TIMESTAMP_COLUMNS: Tuple[str, ...] = ("timestamp", "TimeCreated", "Timestamp", "time", "date")
SEVERITY_COLUMNS: Tuple[str, ...] = ("severity", "LevelDisplayName", "level", "Level")
MESSAGE_COLUMNS: Tuple[str, ...] = ("message", "Message", "log_line", "msg")
SOURCE_COLUMNS: Tuple[str, ...] = ("source", "ProviderName", "service")
ORIGIN_COLUMNS: Tuple[str, ...] = ("file_path",)

# file suffix -> delimiter
SOURCE_DELIMITERS: Dict[str, str] = {
    ".tsv": "\t",
    ".csv": ",",
}

# report output lives under these; never read them back as input
RESERVED_DIRS: Tuple[str, ...] = ("Reports", "Alerts", "Analysis")

SEVERITY_ALIASES: Dict[str, str] = {
    "error": "ERROR",
    "err": "ERROR",
    "fatal": "ERROR",
    "critical": "ERROR",
    "crit": "ERROR",
    "emerg": "ERROR",
    "emergency": "ERROR",
    "severe": "ERROR",
    "warn": "WARN",
    "warning": "WARN",
    "info": "INFO",
    "information": "INFO",
    "informational": "INFO",
    "notice": "INFO",
    "debug": "DEBUG",
    "verbose": "DEBUG",
    "trace": "DEBUG",
    "alert": "ALERT",
}

# weight values assigned to pattern severity labels for ordering
PATTERN_SEVERITY_WEIGHTS: Dict[str, int] = {
    "warning": 1,
    "high": 2,
    "critical": 4,
}

REPORT_TIMELINE = "00_TIMELINE.txt"
REPORT_SUMMARY = "00_INCIDENT_SUMMARY.txt"
REPORT_PATTERNS = "00_PATTERN_ANALYSIS.txt"
REPORT_HEATMAP = "00_HEATMAP.txt"
REPORT_COMPARISON = "00_BASELINE_COMPARISON.txt"
REPORT_JSON = "analysis.json"


class Settings(BaseSettings):
    # timeline construction
    message_max_length: int = 500
    default_severity: str = "INFO"
    csv_field_size_limit: int = 16 * 1024 * 1024

    # anomaly detection over fixed buckets
    anomaly_window_seconds: int = 60
    anomaly_spike_multiplier: float = 3.0
    anomaly_spike_min_count: int = 10
    anomaly_error_cluster_threshold: int = 5
    anomaly_cascade_min_sources: int = 3
    anomaly_sample_limit: int = 10
    anomaly_cascade_sample_limit: int = 15

    # temporal correlation
    correlation_window_seconds: int = 30
    correlation_min_events: int = 2
    correlation_min_sources: int = 2
    correlation_error_regex: str = r"error|fail|crash"

    # rca heuristics; effect bonuses are (effects greater than, bonus)
    rca_base_confidence: float = 0.5
    rca_effect_bonuses: List[Tuple[int, float]] = [
        (10, 0.2),
        (50, 0.1),
    ]
    rca_anomaly_bonus: float = 0.1
    rca_source_bonus: float = 0.1
    rca_source_threshold: int = 2
    rca_confidence_cap: float = 0.95
    rca_cascade_source_advice: int = 3
    rca_high_error_rate_pct: float = 10.0

    # baseline comparison
    baseline_pattern_length: int = 50
    baseline_significance_pct: float = 10.0
    baseline_volume_finding_pct: float = 50.0
    baseline_error_finding_count: int = 100
    baseline_error_rate_finding_pp: float = 5.0

    # rendering
    report_message_width: int = 80
    report_effect_width: int = 100
    report_root_message_width: int = 200
    heatmap_bar_width: int = 50
    report_sample_limit: int = 5
    report_minute_limit: int = 10
    report_new_pattern_limit: int = 20
    report_critical_moment_limit: int = 20

    output_dir_name: str = "Analysis"

    model_config = {
        "env_prefix": "FAULTLINE_",
        "extra": "ignore",
    }


settings = Settings()
