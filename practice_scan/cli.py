"""CLI entrypoints for practice-scan.

``practice-scan [ROOT]`` runs a suite against ROOT. Listing rules and
managing config files live under ``practice-scan-config``.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated, NoReturn

import typer

from practice_scan import __version__
from practice_scan.config import (
    AppConfig,
    default_config_template,
    load_app_config,
    parse_measurements,
)
from practice_scan.errors import ConfigurationError, ReportWriteError
from practice_scan.output import render_header, render_progress, render_summary
from practice_scan.report import Report, write_report
from practice_scan.rules import (
    build_rules,
    list_rule_info,
    suite_report_name,
    suite_section,
    suite_title,
)
from practice_scan.rules.base import Rule
from practice_scan.runner import run_rules, validate_root
from practice_scan.scoring import CheckResult

EXIT_NEEDS_ATTENTION = 1
EXIT_CONFIGURATION_ERROR = 2
EXIT_REPORT_WRITE_ERROR = 3

app = typer.Typer(
    name="practice-scan",
    add_completion=False,
    help="Scan a project for adoption of recommended practices and score it.",
)

config_app = typer.Typer(
    name="practice-scan-config",
    no_args_is_help=True,
    help="List practice-scan rules and manage its configuration files.",
)


def version_callback(value: bool) -> None:
    """Print version and exit when --version is provided."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.command()
def scan_command(
    root: Annotated[Path, typer.Argument(help="Project root to scan.")] = Path("."),
    suite: Annotated[
        str | None, typer.Option(help="Rule suite: vitals|images|testing-library.")
    ] = None,
    jobs: Annotated[int | None, typer.Option(help="Rules evaluated in parallel.")] = None,
    report: Annotated[
        Path | None, typer.Option(help="Report path (relative paths resolve against ROOT).")
    ] = None,
    no_report: Annotated[
        bool, typer.Option("--no-report", help="Skip writing the report file.")
    ] = False,
    measure: Annotated[
        list[str] | None,
        typer.Option(help="Pre-computed measurement KEY=VALUE, e.g. lcp_ms=2100."),
    ] = None,
    format: Annotated[
        str | None, typer.Option(help="Output format: human|json.", show_default="human")
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable debug logging.")] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version", help="Show version and exit.", callback=version_callback, is_eager=True
        ),
    ] = False,
) -> None:
    """Run every rule of a suite against ROOT (default: current directory) and write the report."""
    _ = version
    _configure_logging(verbose)
    started_at = datetime.now(tz=UTC)
    started = time.perf_counter()

    try:
        project_root = validate_root(root)
    except ConfigurationError as exc:
        _fail_configuration(str(exc))

    app_config = _load_config_or_raise(project_root, config_file)
    output_format = (format or app_config.format).lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    suite_name = (suite or app_config.suite).lower()
    try:
        cli_measurements = parse_measurements(measure or [])
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--measure") from exc
    context = app_config.scan_context(cli_measurements)
    rules = _build_configured_rules_or_raise(
        app_config, suite=suite_name, measurements=context.measurements
    )
    if not rules:
        _fail_configuration("No rules selected; the rule registry is empty.")

    worker_count = jobs if jobs is not None else app_config.jobs
    if worker_count < 1:
        raise typer.BadParameter("jobs must be >= 1", param_hint="--jobs")

    human = output_format == "human"
    if human:
        typer.echo(render_header(suite_title(suite_name), project_root))

    def on_result(index: int, rule: Rule, result: CheckResult) -> None:
        if human:
            typer.echo(render_progress(index, len(rules), rule, result))

    try:
        aggregator = run_rules(
            project_root, rules, context=context, jobs=worker_count, on_result=on_result
        )
        summary = aggregator.summary()
    except ConfigurationError as exc:
        _fail_configuration(str(exc))

    section = suite_section(suite_name)
    sections: dict[str, dict] = {}
    if section is not None:
        evidence = {result.rule_id: result.evidence for result in aggregator.results}
        sections[section.key] = section.build(project_root, context, evidence)

    result_report = Report(
        timestamp=started_at,
        project_root=project_root,
        suite=suite_name,
        results={result.rule_id: result for result in aggregator.results},
        issues=aggregator.issues(),
        summary=summary,
        sections=sections,
        meta={"elapsed_ms": int((time.perf_counter() - started) * 1000)},
    )

    report_path: Path | None = None
    write_error: str | None = None
    if not no_report:
        target = _resolve_report_path(project_root, report, app_config, suite_name)
        try:
            report_path = write_report(result_report, target)
        except ReportWriteError as exc:
            write_error = str(exc)

    if human:
        summary_section = None
        if section is not None:
            summary_section = (section.title, section.lines(sections[section.key]))
        typer.echo(render_summary(summary, report_path, summary_section))
    else:
        typer.echo(json.dumps(result_report.to_dict(), indent=2))

    if write_error is not None:
        typer.echo(f"Error: {write_error}", err=True)
        raise typer.Exit(code=EXIT_REPORT_WRITE_ERROR)
    if summary.warned + summary.failed > 0:
        raise typer.Exit(code=EXIT_NEEDS_ATTENTION)


@config_app.callback()
def config_callback(
    version: Annotated[
        bool,
        typer.Option("--version", help="Show version and exit.", callback=version_callback),
    ] = False,
) -> None:
    """Root command callback."""
    _ = version


@config_app.command("rules")
def rules_command(
    repo: Annotated[Path, typer.Option(help="Project path.")] = Path("."),
    suite: Annotated[str | None, typer.Option(help="Rule suite to list.")] = None,
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """List the rules of a suite and whether the configuration enables them."""
    output_format = format.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    app_config = _load_config_or_raise(repo, config_file)
    suite_name = (suite or app_config.suite).lower()
    active_rules = _build_configured_rules_or_raise(
        app_config, suite=suite_name, measurements=app_config.measurements
    )
    active_ids = {rule.rule_id for rule in active_rules}
    rule_info = list_rule_info(suite=suite_name, measurements=app_config.measurements)

    if output_format == "json":
        payload = {
            "rules": [
                {
                    "rule_id": item.rule_id,
                    "description": item.description,
                    "classification": item.classification,
                    "recommendation": item.recommendation,
                    "default_enabled": item.default_enabled,
                    "enabled": item.rule_id in active_ids,
                }
                for item in rule_info
            ],
            "meta": {"suite": suite_name, "config_source": app_config.source},
        }
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = [f"Available rules ({suite_name}):"]
    for item in rule_info:
        status = "enabled" if item.rule_id in active_ids else "disabled"
        lines.append(
            f"- {item.rule_id} [{status}, {item.classification}] - {item.description}"
        )
    typer.echo("\n".join(lines))


@config_app.command("show")
def show_command(
    repo: Annotated[Path, typer.Option(help="Project path.")] = Path("."),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Show resolved configuration."""
    output_format = format.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    app_config = _load_config_or_raise(repo, config_file)
    active_rules = _build_configured_rules_or_raise(
        app_config, suite=app_config.suite, measurements=app_config.measurements
    )
    payload = app_config.to_dict()
    payload["active_rule_ids"] = [rule.rule_id for rule in active_rules]

    if output_format == "json":
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = [
        "Resolved configuration:",
        f"- source: {payload['source'] or 'defaults'}",
        f"- suite: {payload['suite']}",
        f"- format: {payload['format']}",
        f"- report: {payload['report'] or suite_report_name(app_config.suite)}",
        f"- jobs: {payload['jobs']}",
        f"- rules.enable: {payload['rules']['enable']}",
        f"- rules.disable: {payload['rules']['disable']}",
        f"- thresholds: {payload['thresholds']}",
        f"- measurements: {payload['measurements']}",
        f"- scan.exclude_dirs: {payload['scan']['exclude_dirs']}",
        f"- active_rule_ids: {payload['active_rule_ids']}",
    ]
    typer.echo("\n".join(lines))


@config_app.command("init")
def init_command(
    out: Annotated[Path, typer.Option(help="Output path for starter config TOML.")] = Path(
        ".practice-scan.toml"
    ),
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite if file already exists."),
    ] = False,
) -> None:
    """Create a starter project config file."""
    out_path = out.resolve()
    if out_path.exists() and not force:
        raise typer.BadParameter(
            f"Refusing to overwrite existing file: {out_path}. Use --force to overwrite."
        )
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(default_config_template(), encoding="utf-8")
    typer.echo(f"Wrote starter config: {out_path}")


@config_app.command("validate")
def validate_command(
    repo: Annotated[Path, typer.Option(help="Project path.")] = Path("."),
    config_file: Annotated[
        Path,
        typer.Option("--config", help="Path to config TOML file to validate."),
    ] = Path(".practice-scan.toml"),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
) -> None:
    """Validate a config file and report active rules."""
    output_format = format.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    app_config = _load_config_or_raise(repo, config_file)
    active_rules = _build_configured_rules_or_raise(
        app_config, suite=app_config.suite, measurements=app_config.measurements
    )
    payload = {
        "ok": True,
        "source": app_config.source,
        "suite": app_config.suite,
        "active_rule_ids": [rule.rule_id for rule in active_rules],
    }
    if output_format == "json":
        typer.echo(json.dumps(payload, sort_keys=True))
        return
    typer.echo(
        "\n".join(
            [
                "Config is valid.",
                f"- source: {payload['source']}",
                f"- suite: {payload['suite']}",
                f"- active_rule_ids: {payload['active_rule_ids']}",
            ]
        )
    )


def main() -> None:
    """Console script entrypoint for scanning."""
    app()


def config_main() -> None:
    """Console script entrypoint for rule listing and config management."""
    config_app()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _fail_configuration(message: str) -> NoReturn:
    typer.echo(f"Configuration error: {message}", err=True)
    raise typer.Exit(code=EXIT_CONFIGURATION_ERROR)


def _load_config_or_raise(repo: Path, config_file: Path | None = None) -> AppConfig:
    try:
        return load_app_config(repo, config_path=config_file)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc


def _build_configured_rules_or_raise(
    app_config: AppConfig,
    *,
    suite: str,
    measurements: dict[str, float],
) -> list[Rule]:
    try:
        return build_rules(
            suite=suite,
            enabled_rule_ids=app_config.rule_enable,
            disabled_rule_ids=app_config.rule_disable,
            thresholds=app_config.thresholds,
            measurements=measurements,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config.rules") from exc


def _resolve_report_path(
    project_root: Path,
    report: Path | None,
    app_config: AppConfig,
    suite: str,
) -> Path:
    if report is not None:
        chosen = report
    elif app_config.report is not None:
        chosen = Path(app_config.report)
    else:
        chosen = Path(suite_report_name(suite))
    return chosen if chosen.is_absolute() else project_root / chosen
