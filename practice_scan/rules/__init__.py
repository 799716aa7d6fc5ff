"""Rules package."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from practice_scan.rules.base import Evidence, GraduatedThreshold, Rule, ScanContext
from practice_scan.rules.images import image_rules, image_section, image_section_lines
from practice_scan.rules.testing_library import testing_library_rules
from practice_scan.rules.vitals import MEASUREMENT_TARGETS, measurement_rules, vitals_rules

DEFAULT_SUITE = "vitals"


@dataclass(frozen=True, slots=True)
class RuleInfo:
    """Rule metadata for listing and selection."""

    rule_id: str
    description: str
    classification: str
    recommendation: str
    default_enabled: bool


@dataclass(frozen=True, slots=True)
class ReportSection:
    """Suite-specific block added to the report and the closing summary."""

    key: str
    title: str
    build: Callable[[Path, ScanContext, dict[str, Evidence]], dict[str, Any]]
    lines: Callable[[dict[str, Any]], list[str]]


@dataclass(frozen=True, slots=True)
class _SuiteDefinition:
    title: str
    report_name: str
    factory: Callable[[], list[Rule]]
    measurement_keys: tuple[str, ...] = ()
    section: ReportSection | None = None


SUITES: dict[str, _SuiteDefinition] = {
    "vitals": _SuiteDefinition(
        title="Core Web Vitals Validation",
        report_name=".vitals-validation.json",
        factory=vitals_rules,
        measurement_keys=tuple(MEASUREMENT_TARGETS),
    ),
    "images": _SuiteDefinition(
        title="Image Optimization Validation",
        report_name=".image-validation.json",
        factory=image_rules,
        section=ReportSection(
            key="images",
            title="Image Inventory",
            build=image_section,
            lines=image_section_lines,
        ),
    ),
    "testing-library": _SuiteDefinition(
        title="React Testing Library Validation",
        report_name=".rtl-validation.json",
        factory=testing_library_rules,
    ),
}


def build_rules(
    *,
    suite: str = DEFAULT_SUITE,
    enabled_rule_ids: list[str] | None = None,
    disabled_rule_ids: list[str] | None = None,
    thresholds: dict[str, int] | None = None,
    measurements: dict[str, float] | None = None,
) -> list[Rule]:
    """Build the ordered rule list for a suite applying enable/disable and threshold overrides.

    Ids are validated against every suite so one config file can serve all of
    them; ids that belong to another suite are ignored here.
    """
    definition = resolve_suite(suite)
    registry = _suite_rules(definition, measurements or {})
    by_id = {rule.rule_id: rule for rule in registry}

    requested_ids = (
        set(enabled_rule_ids or []) | set(disabled_rule_ids or []) | set(thresholds or {})
    )
    known = known_rule_ids()
    unknown = [rule_id for rule_id in requested_ids if rule_id not in known]
    if unknown:
        joined = ", ".join(sorted(unknown))
        raise ValueError(f"Unknown rule ids: {joined}")

    disabled_set = set(disabled_rule_ids or [])
    if enabled_rule_ids is None:
        selected_ids = [rule.rule_id for rule in registry if rule.rule_id not in disabled_set]
    else:
        selected_ids = [
            rule_id
            for rule_id in _dedupe(enabled_rule_ids)
            if rule_id in by_id and rule_id not in disabled_set
        ]

    overrides = thresholds or {}
    built: list[Rule] = []
    for rule_id in selected_ids:
        rule = by_id[rule_id]
        if rule_id in overrides:
            rule = rule.with_classification(GraduatedThreshold(good=overrides[rule_id]))
        built.append(rule)
    return built


def known_rule_ids() -> frozenset[str]:
    """Every rule id any suite can produce, measurement rules included."""
    ids: set[str] = set()
    for definition in SUITES.values():
        ids.update(rule.rule_id for rule in definition.factory())
        ids.update(rule.rule_id for rule in measurement_rules(list(definition.measurement_keys)))
    return frozenset(ids)


def list_rule_info(
    *,
    suite: str = DEFAULT_SUITE,
    measurements: dict[str, float] | None = None,
) -> list[RuleInfo]:
    """Return metadata for every rule a suite knows about."""
    definition = resolve_suite(suite)
    return [
        RuleInfo(
            rule_id=rule.rule_id,
            description=rule.description,
            classification=rule.classification.describe(),
            recommendation=rule.recommendation,
            default_enabled=True,
        )
        for rule in _suite_rules(definition, measurements or {})
    ]


def resolve_suite(name: str) -> _SuiteDefinition:
    definition = SUITES.get(name.lower())
    if definition is None:
        choices = ", ".join(sorted(SUITES))
        raise ValueError(f"Unknown suite '{name}'. Expected one of: {choices}")
    return definition


def suite_report_name(name: str) -> str:
    return resolve_suite(name).report_name


def suite_title(name: str) -> str:
    return resolve_suite(name).title


def suite_section(name: str) -> ReportSection | None:
    return resolve_suite(name).section


def _suite_rules(definition: _SuiteDefinition, measurements: dict[str, float]) -> list[Rule]:
    known_keys = {key for suite in SUITES.values() for key in suite.measurement_keys}
    unknown = [key for key in measurements if key not in known_keys]
    if unknown:
        joined = ", ".join(sorted(unknown))
        raise ValueError(f"Unknown measurements: {joined}")
    supplied = [key for key in definition.measurement_keys if key in measurements]
    return definition.factory() + measurement_rules(supplied)


def _dedupe(items: list[str]) -> list[str]:
    seen: set[str] = set()
    output: list[str] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        output.append(item)
    return output
