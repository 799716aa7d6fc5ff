"""Configuration loading for practice-scan."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from practice_scan.rules import DEFAULT_SUITE, SUITES
from practice_scan.rules.base import ScanContext

CONFIG_FILENAMES = (".practice-scan.toml", "practice-scan.toml")
PYPROJECT_FILENAME = "pyproject.toml"
PYPROJECT_TOOL_KEYS = ("practice_scan", "practice-scan")

DEFAULT_EXCLUDE_DIRS = ("node_modules", ".git")
DEFAULT_MAX_FILE_BYTES = 1_048_576


@dataclass(slots=True)
class ScanConfig:
    """Project walk limits."""

    exclude_dirs: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS))
    max_file_bytes: int = DEFAULT_MAX_FILE_BYTES

    def to_dict(self) -> dict[str, Any]:
        return {"exclude_dirs": list(self.exclude_dirs), "max_file_bytes": self.max_file_bytes}


@dataclass(slots=True)
class AppConfig:
    """Runtime configuration values resolved from project files."""

    suite: str = DEFAULT_SUITE
    format: str = "human"
    report: str | None = None
    jobs: int = 1
    rule_enable: list[str] | None = None
    rule_disable: list[str] = field(default_factory=list)
    thresholds: dict[str, int] = field(default_factory=dict)
    measurements: dict[str, float] = field(default_factory=dict)
    scan: ScanConfig = field(default_factory=ScanConfig)
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "suite": self.suite,
            "format": self.format,
            "report": self.report,
            "jobs": self.jobs,
            "rules": {
                "enable": list(self.rule_enable) if self.rule_enable is not None else None,
                "disable": list(self.rule_disable),
            },
            "thresholds": dict(self.thresholds),
            "measurements": dict(self.measurements),
            "scan": self.scan.to_dict(),
            "source": self.source,
        }

    def scan_context(self, measurements: dict[str, float] | None = None) -> ScanContext:
        merged = dict(self.measurements)
        merged.update(measurements or {})
        return ScanContext(
            exclude_dirs=frozenset(self.scan.exclude_dirs),
            max_file_bytes=self.scan.max_file_bytes,
            measurements=merged,
        )


def load_app_config(repo: Path, config_path: Path | None = None) -> AppConfig:
    """Load config from explicit path or project-local files with precedence."""
    repo = repo.resolve()
    if config_path is not None:
        resolved = config_path if config_path.is_absolute() else (repo / config_path)
        if not resolved.exists():
            raise ValueError(f"Config file does not exist: {resolved}")
        mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
        return _from_mapping(mapping, source=str(resolved))

    for filename in CONFIG_FILENAMES:
        resolved = repo / filename
        if resolved.is_file():
            mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
            return _from_mapping(mapping, source=str(resolved))

    pyproject_path = repo / PYPROJECT_FILENAME
    if pyproject_path.is_file():
        mapping = _extract_config_mapping(_load_toml(pyproject_path), source_path=pyproject_path)
        if mapping:
            return _from_mapping(mapping, source=str(pyproject_path))

    return AppConfig()


def parse_measurements(items: list[str]) -> dict[str, float]:
    """Parse repeated ``KEY=VALUE`` command-line measurements."""
    parsed: dict[str, float] = {}
    for item in items:
        key, sep, raw = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Measurement must look like KEY=VALUE, got '{item}'")
        try:
            parsed[key] = float(raw)
        except ValueError as exc:
            raise ValueError(f"Measurement '{key}' must be a number, got '{raw}'") from exc
    return parsed


def default_config_template() -> str:
    """Return a starter config template users can customize."""
    return "\n".join(
        [
            'suite = "vitals"',
            'format = "human"',
            "jobs = 4",
            '# report = ".vitals-validation.json"',
            "",
            "[rules]",
            "# enable = [",
            '#   "lcp_implementation",',
            '#   "web_vitals_library",',
            "# ]",
            'disable = ["monitoring_integration"]',
            "",
            "[thresholds]",
            "# Minimum number of matching files for a rule to pass.",
            "lcp_implementation = 2",
            "",
            "[measurements]",
            "# Values measured elsewhere (lab or field data).",
            "# lcp_ms = 2100",
            "# inp_ms = 180",
            "# cls = 0.05",
            "",
            "[scan]",
            'exclude_dirs = ["node_modules", ".git", "dist", "build"]',
            "max_file_bytes = 1048576",
            "",
        ]
    )


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as file_obj:
            loaded = tomllib.load(file_obj)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ValueError(f"Could not read config file {path}: {exc}") from exc
    if not isinstance(loaded, dict):
        return {}
    return loaded


def _extract_config_mapping(loaded: dict[str, Any], *, source_path: Path) -> dict[str, Any]:
    if source_path.name == PYPROJECT_FILENAME:
        section = _find_pyproject_tool_section(loaded)
        return section if section is not None else {}

    tool_section = _find_pyproject_tool_section(loaded)
    if tool_section is not None:
        return tool_section
    return loaded


def _find_pyproject_tool_section(loaded: dict[str, Any]) -> dict[str, Any] | None:
    tool = loaded.get("tool")
    if not isinstance(tool, dict):
        return None
    for key in PYPROJECT_TOOL_KEYS:
        section = tool.get(key)
        if isinstance(section, dict):
            return section
    return None


def _from_mapping(mapping: dict[str, Any], *, source: str) -> AppConfig:
    rules_mapping = _as_table(mapping.get("rules"), "rules")
    scan_mapping = _as_table(mapping.get("scan"), "scan")

    format_value = _as_choice(mapping.get("format", "human"), {"human", "json"}, "format")

    raw_report = mapping.get("report")
    report_value = None if raw_report is None else _as_str(raw_report, "report")

    jobs = _as_int(mapping.get("jobs", 1), "jobs")
    if jobs < 1:
        raise ValueError("jobs must be >= 1")

    return AppConfig(
        suite=_as_choice(mapping.get("suite", DEFAULT_SUITE), set(SUITES), "suite"),
        format=format_value,
        report=report_value,
        jobs=jobs,
        rule_enable=_as_str_list_or_none(rules_mapping.get("enable")),
        rule_disable=_as_str_list(rules_mapping.get("disable")),
        thresholds=_parse_thresholds(mapping.get("thresholds")),
        measurements=_as_float_mapping(mapping.get("measurements"), "measurements"),
        scan=_parse_scan_config(scan_mapping),
        source=source,
    )


def _parse_thresholds(value: Any) -> dict[str, int]:
    table = _as_table(value, "thresholds")
    parsed: dict[str, int] = {}
    for key, raw in table.items():
        threshold = _as_int(raw, f"thresholds.{key}")
        if threshold < 1:
            raise ValueError(f"thresholds.{key} must be >= 1")
        parsed[key] = threshold
    return parsed


def _parse_scan_config(value: dict[str, Any]) -> ScanConfig:
    max_bytes = _as_int(
        value.get("max_file_bytes", DEFAULT_MAX_FILE_BYTES), "scan.max_file_bytes"
    )
    if max_bytes <= 0:
        raise ValueError("scan.max_file_bytes must be > 0")
    raw_excludes = value.get("exclude_dirs")
    return ScanConfig(
        exclude_dirs=(
            list(DEFAULT_EXCLUDE_DIRS) if raw_excludes is None else _as_str_list(raw_excludes)
        ),
        max_file_bytes=max_bytes,
    )


def _as_table(value: Any, field_name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be a table/object")
    return value


def _as_str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError("Expected a list of strings")
    items: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError("Expected a list of strings")
        items.append(item)
    return items


def _as_str_list_or_none(value: Any) -> list[str] | None:
    if value is None:
        return None
    return _as_str_list(value)


def _as_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")
    return value


def _as_choice(raw: Any, allowed: set[str], field_name: str) -> str:
    value = str(raw).lower()
    if value not in allowed:
        choices = ", ".join(sorted(allowed))
        raise ValueError(f"{field_name} must be one of: {choices}")
    return value


def _as_int(raw: Any, field_name: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValueError(f"{field_name} must be an integer")
    return raw


def _as_float_mapping(value: Any, field_name: str) -> dict[str, float]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be a table/object")

    parsed: dict[str, float] = {}
    for key, raw in value.items():
        if not isinstance(key, str):
            raise ValueError(f"{field_name} keys must be strings")
        parsed[key] = _as_float(raw, f"{field_name}.{key}")
    return parsed


def _as_float(raw: Any, field_name: str) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ValueError(f"{field_name} must be a number")
    return float(raw)
