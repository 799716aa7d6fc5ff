"""Console rendering."""

from __future__ import annotations

from pathlib import Path

import click

from practice_scan.rules.base import Rating, Rule
from practice_scan.scoring import CheckResult, RunSummary

_RATING_STYLE = {
    Rating.PASS: ("PASS", "green"),
    Rating.WARN: ("WARN", "yellow"),
    Rating.FAIL: ("FAIL", "red"),
}


def render_header(title: str, project_root: Path) -> str:
    rule_line = click.style("=" * 40, fg="blue")
    return "\n".join(
        [
            rule_line,
            click.style(title, fg="blue", bold=True),
            click.style(f"Project: {project_root}", fg="blue"),
            rule_line,
        ]
    )


def render_progress(index: int, total: int, rule: Rule, result: CheckResult) -> str:
    """Render the line(s) printed as soon as a rule completes."""
    label, color = _RATING_STYLE[result.rating]
    counter = click.style(f"[{index + 1}/{total}]", fg="blue")
    lines = [f"{counter} {rule.description} ... {click.style(label, fg=color, bold=True)}"]

    evidence = result.evidence
    if result.rating is Rating.PASS:
        if evidence.detail:
            lines.append(f"  {evidence.detail}")
        elif evidence.matched_paths:
            lines.append(f"  {len(evidence.matched_paths)} matching files")
    else:
        if result.rating is Rating.WARN:
            lines.append(
                f"  found {evidence.count}, expected {rule.classification.describe()}"
            )
        if rule.recommendation:
            lines.append(f"  Recommendation: {rule.recommendation}")
    return "\n".join(lines)


def render_summary(
    summary: RunSummary,
    report_path: Path | None,
    section: tuple[str, list[str]] | None = None,
) -> str:
    """Render the closing counts, score, optional suite section and report location."""
    lines = [
        "",
        click.style("Validation Summary", bold=True),
        f"Passed:  {click.style(str(summary.passed), fg='green')}",
        f"Warned:  {click.style(str(summary.warned), fg='yellow')}",
        f"Failed:  {click.style(str(summary.failed), fg='red')}",
        f"Total:   {summary.total}",
        "",
        f"score: {summary.score}%",
    ]
    if section is not None:
        title, section_lines = section
        lines.extend(["", f"{title}:"])
        lines.extend(f"  {line}" for line in section_lines)
    if report_path is not None:
        lines.append(f"Results saved to: {report_path}")
    if summary.warned + summary.failed == 0:
        lines.append(click.style("All checks passed!", fg="green", bold=True))
    else:
        lines.append(click.style("Review warnings and recommendations above.", fg="yellow"))
    return "\n".join(lines)
