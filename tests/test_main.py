import json

import pytest

import main
from config import REPORT_JSON, REPORT_SUMMARY


@pytest.fixture
def incident_dir(tmp_path, write_tsv):
    root = tmp_path / "incident"
    write_tsv("host/host.tsv", [
        (0, "ERROR", "", "write failed: no space left on device"),
        (3, "ERROR", "", "cannot write checkpoint"),
        (8, "INFO", "", "queue depth exceeded on orders"),
    ], root=root)
    return root


def test_cli_writes_reports_and_json(incident_dir):
    code = main.main([str(incident_dir), "--start", "2024-01-15T09:00:00Z", "--end", "2024-01-15T11:00:00Z", "--json"])

    assert code == main.EXIT_OK
    out = incident_dir / "Analysis"
    assert (out / REPORT_SUMMARY).is_file()
    payload = json.loads((out / REPORT_JSON).read_text(encoding="utf-8"))
    assert payload["root_cause"]["pattern"] == "disk_full"
    assert payload["window_start"].startswith("2024-01-15T09:00:00")


def test_cli_custom_output_dir(incident_dir, tmp_path):
    out = tmp_path / "elsewhere"
    assert main.main([str(incident_dir), "--output", str(out)]) == main.EXIT_OK
    assert (out / REPORT_SUMMARY).is_file()
    assert not (incident_dir / "Analysis").exists()


def test_cli_extend_patterns(incident_dir, tmp_path):
    catalog = tmp_path / "extra.yaml"
    catalog.write_text(
        "patterns:\n  - name: queue_backlog\n    trigger: queue depth exceeded\n    severity: high\n",
        encoding="utf-8",
    )

    assert main.main([str(incident_dir), "--extend-patterns", str(catalog), "--json"]) == main.EXIT_OK

    payload = json.loads((incident_dir / "Analysis" / REPORT_JSON).read_text(encoding="utf-8"))
    assert payload["matched_patterns"]["queue_backlog"] == 1
    assert payload["matched_patterns"]["disk_full"] == 1


def test_cli_replacing_patterns_drops_defaults(incident_dir, tmp_path):
    catalog = tmp_path / "only.yaml"
    catalog.write_text("patterns:\n  - name: queue_backlog\n    trigger: queue depth\n", encoding="utf-8")

    assert main.main([str(incident_dir), "--patterns", str(catalog), "--json"]) == main.EXIT_OK

    payload = json.loads((incident_dir / "Analysis" / REPORT_JSON).read_text(encoding="utf-8"))
    assert payload["matched_patterns"] == {"queue_backlog": 1}
    assert payload["root_cause"] is None


@pytest.mark.parametrize(
    "extra",
    [
        ["--last", "6h", "--start", "2024-01-15T09:00:00Z"],
        ["--start", "2024-01-15T11:00:00Z", "--end", "2024-01-15T09:00:00Z"],
        ["--last", "forever"],
        ["--today", "--last", "6h"],
        ["--yesterday", "--start", "2024-01-15T09:00:00Z"],
        ["--back", "soon"],
        ["--bucket-seconds", "0"],
        ["--correlation-seconds", "-5"],
        ["--baseline-start", "nonsense"],
    ],
)
def test_cli_rejects_bad_arguments(incident_dir, extra):
    assert main.main([str(incident_dir), *extra]) == main.EXIT_USAGE
    assert not (incident_dir / "Analysis").exists()


def test_cli_rejects_bad_catalog(incident_dir, tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("patterns:\n  - name: x\n    trigger: '(oops'\n", encoding="utf-8")
    assert main.main([str(incident_dir), "--patterns", str(bad)]) == main.EXIT_USAGE


def test_cli_missing_directories(tmp_path, incident_dir):
    assert main.main([str(tmp_path / "absent")]) == main.EXIT_USAGE
    assert main.main([str(incident_dir), "--baseline", str(tmp_path / "absent")]) == main.EXIT_USAGE
