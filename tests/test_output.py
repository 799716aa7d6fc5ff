"""Console rendering tests."""

from __future__ import annotations

from pathlib import Path

import click

from practice_scan.output import render_header, render_progress, render_summary
from practice_scan.rules.base import Evidence, Rating
from practice_scan.scoring import RunSummary, check_rule
from tests.helpers_project import fixture_rules


def test_progress_line_for_pass_shows_detail_or_file_count() -> None:
    lib_rule, pattern_rule = fixture_rules()

    with_detail = render_progress(
        0, 2, lib_rule, check_rule(lib_rule, Evidence(count=1, detail="tracker-lib 2.4.1"))
    )
    lines = click.unstyle(with_detail).splitlines()
    assert lines == ["[1/2] tracker-lib dependency ... PASS", "  tracker-lib 2.4.1"]

    with_paths = render_progress(
        1,
        2,
        pattern_rule,
        check_rule(pattern_rule, Evidence(count=2, matched_paths=("src/a.ts", "src/b.ts"))),
    )
    assert click.unstyle(with_paths).splitlines()[1] == "  2 matching files"


def test_progress_line_for_warn_shows_threshold_and_recommendation() -> None:
    _, pattern_rule = fixture_rules(pattern_threshold=4)
    result = check_rule(pattern_rule, Evidence(count=1, matched_paths=("src/a.ts",)))

    lines = click.unstyle(render_progress(1, 2, pattern_rule, result)).splitlines()
    assert lines == [
        "[2/2] track() calls ... WARN",
        "  found 1, expected >= 4",
        "  Recommendation: Call track() from every feature entrypoint.",
    ]


def test_progress_line_for_fail_omits_threshold() -> None:
    lib_rule, _ = fixture_rules()
    result = check_rule(lib_rule, Evidence(count=0))
    assert result.rating is Rating.FAIL

    text = click.unstyle(render_progress(0, 2, lib_rule, result))
    assert "expected" not in text
    assert "Recommendation: Run: npm install tracker-lib" in text


def test_summary_reports_counts_score_and_report_path() -> None:
    text = click.unstyle(
        render_summary(RunSummary(passed=7, warned=2, failed=1), Path("/tmp/.vitals.json"))
    )
    assert "Passed:  7" in text
    assert "Warned:  2" in text
    assert "Failed:  1" in text
    assert "Total:   10" in text
    assert "score: 70%" in text
    assert "Results saved to: /tmp/.vitals.json" in text
    assert "Review warnings and recommendations above." in text


def test_summary_without_report_path_when_all_pass() -> None:
    text = click.unstyle(render_summary(RunSummary(passed=3), None))
    assert "Results saved to" not in text
    assert "All checks passed!" in text


def test_header_names_suite_and_project() -> None:
    text = click.unstyle(render_header("Core Web Vitals Validation", Path("/work/app")))
    assert "Core Web Vitals Validation" in text
    assert "Project: /work/app" in text


def test_summary_appends_suite_section_before_report_path() -> None:
    text = click.unstyle(
        render_summary(
            RunSummary(passed=8),
            Path("/tmp/.image-validation.json"),
            ("Image Inventory", ["Total images: 3", "WebP: 2 | AVIF: 1"]),
        )
    )
    lines = text.splitlines()
    start = lines.index("Image Inventory:")
    assert lines[start - 1] == ""
    assert lines[start + 1 : start + 3] == ["  Total images: 3", "  WebP: 2 | AVIF: 1"]
    assert lines.index("score: 100%") < start < lines.index(
        "Results saved to: /tmp/.image-validation.json"
    )
