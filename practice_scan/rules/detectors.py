"""Generic detectors turning project files into rule evidence."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path

from practice_scan.rules.base import Detector, Evidence, ScanContext
from practice_scan.scanner import FixedPaths, Selector, locate, read_text, relative_posix

_VERSION_RE = re.compile(r"\d+\.\d+\.\d+")


@dataclass(frozen=True, slots=True)
class PatternDetector:
    """Counts files matching any of ``patterns``.

    A file counts once however many matches it contains. When ``require`` is
    given, a matching file must also match one of those patterns.
    """

    selector: Selector
    patterns: tuple[str, ...]
    require: tuple[str, ...] = ()
    ignore_case: bool = False

    def detect(self, root: Path, context: ScanContext) -> Evidence:
        flags = re.IGNORECASE if self.ignore_case else 0
        compiled = [re.compile(pattern, flags) for pattern in self.patterns]
        required = [re.compile(pattern, flags) for pattern in self.require]

        matched: list[str] = []
        for path in locate(root, self.selector, exclude_dirs=context.exclude_dirs):
            text = read_text(path, max_bytes=context.max_file_bytes)
            if text is None:
                continue
            if not any(regex.search(text) for regex in compiled):
                continue
            if required and not any(regex.search(text) for regex in required):
                continue
            matched.append(relative_posix(root, path))
        return Evidence(count=len(matched), matched_paths=tuple(matched))


@dataclass(frozen=True, slots=True)
class FileExistsDetector:
    """Checks for the first existing file among well-known candidates."""

    paths: tuple[str, ...]

    def detect(self, root: Path, context: ScanContext) -> Evidence:
        found = locate(root, FixedPaths(self.paths))
        if not found:
            return Evidence(count=0)
        first = relative_posix(root, found[0])
        return Evidence(count=1, matched_paths=(first,), detail=first)


@dataclass(frozen=True, slots=True)
class FileCountDetector:
    """Counts located files regardless of content."""

    selector: Selector

    def detect(self, root: Path, context: ScanContext) -> Evidence:
        found = locate(root, self.selector, exclude_dirs=context.exclude_dirs)
        paths = tuple(relative_posix(root, path) for path in found)
        return Evidence(count=len(paths), matched_paths=paths, detail=f"{len(paths)} files")


@dataclass(frozen=True, slots=True)
class DependencyDetector:
    """Flat key search for declared packages in a dependency manifest."""

    packages: tuple[str, ...]
    manifest: str = "package.json"

    def detect(self, root: Path, context: ScanContext) -> Evidence:
        text = read_text(root / self.manifest, max_bytes=context.max_file_bytes)
        if text is None:
            return Evidence(count=0)
        if self.manifest.endswith(".json"):
            try:
                json.loads(text)
            except ValueError:
                return Evidence(count=0, detail=f"{self.manifest} is malformed")

        for line in text.splitlines():
            for package in self.packages:
                key = f'"{package}"'
                position = line.find(key)
                if position < 0:
                    continue
                version = _VERSION_RE.search(line, position + len(key))
                return Evidence(
                    count=1,
                    matched_paths=(self.manifest,),
                    detail=f"{package} {version.group(0) if version else 'latest'}",
                )
        return Evidence(count=0)


@dataclass(frozen=True, slots=True)
class MeasurementDetector:
    """Grades a caller-supplied measurement against good and poor limits.

    Evidence count is 2 within the good limit, 1 up to the poor limit and 0
    beyond it or when no measurement was supplied.
    """

    key: str
    good: float
    poor: float
    unit: str = ""

    def detect(self, root: Path, context: ScanContext) -> Evidence:
        value = context.measurements.get(self.key)
        targets = f"good <= {self.good:g}{self.unit}, poor > {self.poor:g}{self.unit}"
        if value is None:
            return Evidence(count=0, detail=f"{self.key} not measured ({targets})")
        if value <= self.good:
            count = 2
        elif value <= self.poor:
            count = 1
        else:
            count = 0
        return Evidence(count=count, detail=f"{self.key}={value:g}{self.unit} ({targets})")


@dataclass(frozen=True, slots=True)
class AnyOf:
    """Combines detectors, succeeding when any of them finds evidence."""

    detectors: tuple[Detector, ...]

    def detect(self, root: Path, context: ScanContext) -> Evidence:
        return _merge([detector.detect(root, context) for detector in self.detectors])


@dataclass(frozen=True, slots=True)
class AllOf:
    """Combines detectors, succeeding only when every one finds evidence."""

    detectors: tuple[Detector, ...]

    def detect(self, root: Path, context: ScanContext) -> Evidence:
        parts = [detector.detect(root, context) for detector in self.detectors]
        if any(part.count == 0 for part in parts):
            return Evidence(count=0, detail=_join_details(parts))
        return _merge(parts)


@dataclass(frozen=True, slots=True)
class Absent:
    """Grades the absence of a discouraged pattern.

    Evidence count is 2 when ``detector`` finds nothing and 1 when it does,
    so a graduated threshold of 2 warns on usage without failing the rule.
    The offending paths are kept as matched paths.
    """

    detector: Detector

    def detect(self, root: Path, context: ScanContext) -> Evidence:
        found = self.detector.detect(root, context)
        if found.count == 0:
            return Evidence(count=2)
        return Evidence(
            count=1,
            matched_paths=found.matched_paths,
            detail=f"found in {found.count} files",
        )


def _merge(parts: list[Evidence]) -> Evidence:
    paths: list[str] = []
    for part in parts:
        for path in part.matched_paths:
            if path not in paths:
                paths.append(path)
    if paths:
        count = len(paths)
    else:
        count = max((part.count for part in parts), default=0)
    return Evidence(count=count, matched_paths=tuple(sorted(paths)), detail=_join_details(parts))


def _join_details(parts: list[Evidence]) -> str | None:
    details = [part.detail for part in parts if part.detail]
    return "; ".join(details) if details else None
