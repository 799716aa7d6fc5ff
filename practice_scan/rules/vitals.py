"""Core Web Vitals rule suite."""

from __future__ import annotations

from practice_scan.rules.base import GraduatedThreshold, Rule
from practice_scan.rules.detectors import (
    AnyOf,
    DependencyDetector,
    FileExistsDetector,
    MeasurementDetector,
    PatternDetector,
)
from practice_scan.scanner import FixedPaths, WalkSelector

SCRIPT_SOURCES = WalkSelector((".ts", ".tsx", ".js", ".jsx"), base="src")
STYLE_SOURCES = WalkSelector((".css", ".scss"), base="src")
PROJECT_SCRIPTS_AND_JSON = WalkSelector((".ts", ".tsx", ".js", ".jsx", ".json"))
PROJECT_JSON = WalkSelector((".json",))

LIGHTHOUSE_CONFIGS = ("lighthouserc.json", ".lighthouserc.json", "lighthouserc.js")

# Web Vitals "good" and "poor" boundaries.
MEASUREMENT_TARGETS = {
    "lcp_ms": ("Largest Contentful Paint", 2500.0, 4000.0, "ms"),
    "inp_ms": ("Interaction to Next Paint", 200.0, 500.0, "ms"),
    "cls": ("Cumulative Layout Shift", 0.1, 0.25, ""),
}


def vitals_rules() -> list[Rule]:
    """Return the static Core Web Vitals checks in report order."""
    return [
        Rule(
            rule_id="lcp_implementation",
            description="Largest Contentful Paint (LCP) measurement",
            detector=PatternDetector(
                SCRIPT_SOURCES,
                (
                    r"largest-contentful-paint",
                    r"'LCP'",
                    r"PerformanceObserver.*largest",
                    r"reportWebVitals",
                    r"\b(get|on)(LCP|CLS|FID|FCP)\b",
                ),
            ),
            issue="LCP not implemented",
            recommendation="Measure LCP with PerformanceObserver or the web-vitals onLCP helper.",
        ),
        Rule(
            rule_id="fid_inp_implementation",
            description="First Input Delay (FID) / Interaction to Next Paint (INP)",
            detector=PatternDetector(
                SCRIPT_SOURCES,
                (
                    r"first-input",
                    r"'FID'",
                    r"'INP'",
                    r"interaction-to-next-paint",
                    r"\bonINP\b",
                    r"passive:\s*true",
                ),
            ),
            issue="Limited FID/INP optimization",
            recommendation="Implement passive event listeners and break up long tasks.",
        ),
        Rule(
            rule_id="cls_implementation",
            description="Cumulative Layout Shift (CLS) prevention",
            detector=AnyOf(
                (
                    PatternDetector(
                        SCRIPT_SOURCES,
                        (r"layout-shift", r"'CLS'", r"width.*height"),
                        require=(r"width|height|aspect-ratio",),
                    ),
                    PatternDetector(
                        STYLE_SOURCES,
                        (r"aspect-ratio", r"contain:\s*(layout|size)"),
                    ),
                )
            ),
            issue="CLS prevention not comprehensive",
            recommendation=(
                "Add aspect-ratio or contain properties and reserve space for dynamic content."
            ),
        ),
        Rule(
            rule_id="web_vitals_library",
            description="web-vitals library installation",
            detector=DependencyDetector(("web-vitals",)),
            issue="web-vitals library not installed",
            recommendation="Required: npm install web-vitals",
        ),
        Rule(
            rule_id="lighthouse_config",
            description="Lighthouse configuration",
            detector=FileExistsDetector(LIGHTHOUSE_CONFIGS),
            issue="Lighthouse config missing",
            recommendation="Create lighthouserc.json for automated performance audits.",
        ),
        Rule(
            rule_id="performance_budget",
            description="Performance budget definition",
            detector=AnyOf(
                (
                    PatternDetector(FixedPaths(LIGHTHOUSE_CONFIGS), (r"budgets",)),
                    FileExistsDetector(("budget.json", "performance-budget.json")),
                    PatternDetector(FixedPaths(("package.json",)), (r"\bbudget\b",)),
                )
            ),
            issue="Performance budget not defined",
            recommendation="Define budgets for LCP (<2.5s), INP (<200ms) and CLS (<0.1).",
        ),
        Rule(
            rule_id="measurement_endpoints",
            description="Metrics reporting endpoints",
            detector=PatternDetector(
                SCRIPT_SOURCES,
                (r"sendBeacon", r"sendMetrics", r"reportMetrics", r"\bfetch\("),
                require=(r"vital|metric|performance",),
                ignore_case=True,
            ),
            issue="Metrics reporting not configured",
            recommendation="Send vitals to an analytics service (Google Analytics, Datadog, ...).",
        ),
        Rule(
            rule_id="thresholds_defined",
            description="Performance thresholds",
            detector=AnyOf(
                (
                    PatternDetector(
                        SCRIPT_SOURCES,
                        (r"\b2500\b", r"goodLimit", r"needsImprovementLimit", r"threshold"),
                        require=(r"lcp|inp|fid|cls|vital",),
                        ignore_case=True,
                    ),
                    PatternDetector(
                        PROJECT_JSON,
                        (r"threshold", r"goodLimit"),
                        require=(r"lcp|fid|inp|cls|vital",),
                        ignore_case=True,
                    ),
                )
            ),
            issue="Performance thresholds not defined",
            recommendation="Define: LCP <2.5s, INP <200ms, CLS <0.1.",
        ),
        Rule(
            rule_id="reporting_setup",
            description="Metrics reporting setup",
            detector=PatternDetector(
                SCRIPT_SOURCES,
                (r"console\.log", r"logger", r"report", r"metrics"),
                require=(r"vital",),
                ignore_case=True,
            ),
            issue="Reporting not fully configured",
            recommendation="Log or report each vital from a single reporting hook.",
        ),
        Rule(
            rule_id="monitoring_integration",
            description="Monitoring integration",
            detector=PatternDetector(
                PROJECT_SCRIPTS_AND_JSON,
                (
                    r"datadog",
                    r"newrelic",
                    r"sentry",
                    r"mixpanel",
                    r"segment",
                    r"analytics\.google",
                ),
                ignore_case=True,
            ),
            issue="Monitoring not integrated",
            recommendation="Integrate with Google Analytics, Datadog or New Relic.",
        ),
    ]


def measurement_rules(keys: list[str]) -> list[Rule]:
    """Return graded checks for the supplied measurement keys, in key order."""
    rules: list[Rule] = []
    for key in keys:
        label, good, poor, unit = MEASUREMENT_TARGETS[key]
        rules.append(
            Rule(
                rule_id=f"{key}_measured",
                description=f"{label} measurement",
                detector=MeasurementDetector(key=key, good=good, poor=poor, unit=unit),
                classification=GraduatedThreshold(good=2),
                issue=f"{label} outside the good range",
                recommendation=f"Bring {key} to {good:g}{unit} or below.",
            )
        )
    return rules
