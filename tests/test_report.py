"""Tests for report serialization and atomic persistence."""

from __future__ import annotations

import json
import os
import stat
from datetime import UTC, datetime
from pathlib import Path

import pytest

from practice_scan.errors import ReportWriteError
from practice_scan.report import Report, render_report_json, write_report
from practice_scan.rules.base import Evidence, Rating
from practice_scan.scoring import CheckResult, RunSummary


def test_report_payload_has_compatible_schema() -> None:
    payload = json.loads(render_report_json(_report()))

    assert list(payload.keys()) == [
        "timestamp",
        "project",
        "suite",
        "checks",
        "results",
        "issues",
        "summary",
        "meta",
    ]
    assert payload["timestamp"] == "2026-03-01T12:30:05Z"
    assert payload["checks"] == {"lib_installed": True, "pattern_used": False, "config": False}
    assert list(payload["results"]) == ["lib_installed", "pattern_used", "config"]
    assert payload["results"]["pattern_used"] == {
        "rating": "warn",
        "count": 1,
        "matched_paths": ["src/a.ts"],
        "detail": None,
        "message": "pattern_used: too few",
    }
    assert payload["issues"] == ["pattern_used: too few", "config: missing"]
    assert payload["summary"] == {
        "passed": 1,
        "warned": 1,
        "failed": 1,
        "total": 3,
        "score": 33,
    }
    assert "version" in payload["meta"]


def test_write_report_replaces_previous_file(tmp_path: Path) -> None:
    target = tmp_path / ".vitals-validation.json"
    target.write_text('{"stale": true}\n', encoding="utf-8")

    written = write_report(_report(), target)
    assert written == target.resolve()
    payload = json.loads(target.read_text(encoding="utf-8"))
    assert "stale" not in payload
    assert payload["summary"]["total"] == 3
    assert sorted(item.name for item in tmp_path.iterdir()) == [".vitals-validation.json"]


def test_failed_rename_keeps_previous_report_and_cleans_up(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    target = tmp_path / ".vitals-validation.json"
    previous = '{"previous": "valid"}\n'
    target.write_text(previous, encoding="utf-8")

    def broken_replace(src: str, dst: str) -> None:
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(os, "replace", broken_replace)
    with pytest.raises(ReportWriteError, match="No space left on device"):
        write_report(_report(), target)

    assert target.read_text(encoding="utf-8") == previous
    assert sorted(item.name for item in tmp_path.iterdir()) == [".vitals-validation.json"]


def test_unwritable_destination_raises_report_write_error(tmp_path: Path) -> None:
    blocker = tmp_path / "reports"
    blocker.write_text("a file, not a directory", encoding="utf-8")

    with pytest.raises(ReportWriteError):
        write_report(_report(), blocker / "out.json")


def test_suite_sections_sit_between_results_and_issues() -> None:
    report = _report()
    report.sections["images"] = {"total": 2, "webp": 1, "total_bytes": 2048}
    payload = json.loads(render_report_json(report))

    keys = list(payload.keys())
    assert keys.index("images") == keys.index("results") + 1
    assert keys.index("issues") == keys.index("images") + 1
    assert payload["images"] == {"total": 2, "webp": 1, "total_bytes": 2048}


@pytest.mark.skipif(os.name != "posix", reason="POSIX permissions required")
def test_written_report_follows_umask_not_temp_file_mode(tmp_path: Path) -> None:
    previous = os.umask(0o022)
    try:
        target = write_report(_report(), tmp_path / ".vitals-validation.json")
    finally:
        os.umask(previous)
    assert stat.S_IMODE(target.stat().st_mode) == 0o644


def _report() -> Report:
    results = {
        "lib_installed": CheckResult(
            rule_id="lib_installed",
            rating=Rating.PASS,
            evidence=Evidence(count=1, matched_paths=("package.json",), detail="lib 1.0.0"),
        ),
        "pattern_used": CheckResult(
            rule_id="pattern_used",
            rating=Rating.WARN,
            evidence=Evidence(count=1, matched_paths=("src/a.ts",)),
            message="pattern_used: too few",
        ),
        "config": CheckResult(
            rule_id="config",
            rating=Rating.FAIL,
            evidence=Evidence(count=0),
            message="config: missing",
        ),
    }
    return Report(
        timestamp=datetime(2026, 3, 1, 12, 30, 5, 123456, tzinfo=UTC),
        project_root=Path("/work/project"),
        suite="vitals",
        results=results,
        issues=["pattern_used: too few", "config: missing"],
        summary=RunSummary(passed=1, warned=1, failed=1),
    )
