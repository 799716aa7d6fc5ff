"""Helpers for building synthetic project trees in tests."""

from __future__ import annotations

import json
from pathlib import Path

from practice_scan.rules.base import BooleanThreshold, GraduatedThreshold, Rule
from practice_scan.rules.detectors import DependencyDetector, PatternDetector
from practice_scan.scanner import WalkSelector

SOURCES = WalkSelector((".ts", ".tsx", ".js", ".jsx"), base="src")


def write_file(project: Path, rel_path: str, content: str) -> Path:
    target = project / rel_path
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    return target


def write_package_json(project: Path, dependencies: dict[str, str]) -> Path:
    payload = {"name": "fixture-app", "version": "1.0.0", "dependencies": dependencies}
    return write_file(project, "package.json", json.dumps(payload, indent=2) + "\n")


def init_project(tmp_path: Path, *, with_dependency: bool = True, pattern_files: int = 3) -> Path:
    project = tmp_path / "project"
    project.mkdir()
    dependencies = {"react": "^18.2.0"}
    if with_dependency:
        dependencies["tracker-lib"] = "^2.4.1"
    write_package_json(project, dependencies)
    for index in range(pattern_files):
        write_file(
            project,
            f"src/feature_{index}.ts",
            f"import {{ track }} from 'tracker-lib';\ntrack('feature-{index}');\n",
        )
    write_file(project, "src/plain.ts", "export const answer = 42;\n")
    return project


def fixture_rules(*, pattern_threshold: int = 2) -> list[Rule]:
    return [
        Rule(
            rule_id="lib_installed",
            description="tracker-lib dependency",
            detector=DependencyDetector(("tracker-lib",)),
            classification=BooleanThreshold(),
            issue="tracker-lib not installed",
            recommendation="Run: npm install tracker-lib",
        ),
        Rule(
            rule_id="pattern_used",
            description="track() calls",
            detector=PatternDetector(SOURCES, (r"\btrack\(",)),
            classification=GraduatedThreshold(good=pattern_threshold),
            issue="track() rarely used",
            recommendation="Call track() from every feature entrypoint.",
        ),
    ]
