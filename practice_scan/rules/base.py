"""Rule model, evidence and rating types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Protocol


class Rating(str, Enum):
    """Outcome of a single rule in a run."""

    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


@dataclass(frozen=True, slots=True)
class Evidence:
    """Raw measurement produced by a detector."""

    count: int
    matched_paths: tuple[str, ...] = ()
    detail: str | None = None

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError(f"Evidence count must be non-negative, got {self.count}.")


@dataclass(frozen=True, slots=True)
class ScanContext:
    """Run-wide inputs handed to every detector."""

    exclude_dirs: frozenset[str] = frozenset({"node_modules", ".git"})
    max_file_bytes: int = 1_048_576
    measurements: dict[str, float] = field(default_factory=dict)


class Detector(Protocol):
    """Evidence source for one rule."""

    def detect(self, root: Path, context: ScanContext) -> Evidence:
        """Inspect the project tree below ``root`` and return evidence."""


@dataclass(frozen=True, slots=True)
class BooleanThreshold:
    """Presence check: any evidence passes, none fails."""

    def describe(self) -> str:
        return "present"


@dataclass(frozen=True, slots=True)
class GraduatedThreshold:
    """Adoption check with fail, warn and pass bands."""

    good: int

    def __post_init__(self) -> None:
        if self.good < 1:
            raise ValueError(f"Graduated threshold must be >= 1, got {self.good}.")

    def describe(self) -> str:
        return f">= {self.good}"


@dataclass(frozen=True, slots=True)
class Informational:
    """Inventory check: always passes, evidence is reported as-is."""

    def describe(self) -> str:
        return "informational"


Classification = BooleanThreshold | GraduatedThreshold | Informational


@dataclass(frozen=True, slots=True)
class Rule:
    """Immutable definition of one compliance check."""

    rule_id: str
    description: str
    detector: Detector
    classification: Classification = BooleanThreshold()
    issue: str = ""
    recommendation: str = ""

    def with_classification(self, classification: Classification) -> Rule:
        return Rule(
            rule_id=self.rule_id,
            description=self.description,
            detector=self.detector,
            classification=classification,
            issue=self.issue,
            recommendation=self.recommendation,
        )
