"""Rating classification and run score aggregation."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from practice_scan.errors import ConfigurationError
from practice_scan.rules.base import (
    BooleanThreshold,
    Classification,
    Evidence,
    GraduatedThreshold,
    Informational,
    Rating,
    Rule,
)


@dataclass(frozen=True, slots=True)
class CheckResult:
    """Classified outcome of one rule."""

    rule_id: str
    rating: Rating
    evidence: Evidence
    message: str | None = None

    @property
    def passed(self) -> bool:
        return self.rating is Rating.PASS


@dataclass(frozen=True, slots=True)
class RunSummary:
    """Pass/warn/fail tally with a derived percentage score."""

    passed: int = 0
    warned: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.passed + self.warned + self.failed

    @property
    def score(self) -> int:
        if self.total == 0:
            raise ConfigurationError("Cannot score a run without rules.")
        return score_percent(self.passed, self.total)

    def to_dict(self) -> dict[str, int]:
        return {
            "passed": self.passed,
            "warned": self.warned,
            "failed": self.failed,
            "total": self.total,
            "score": self.score,
        }


def classify(classification: Classification, evidence: Evidence) -> Rating:
    """Map an evidence count onto a rating using the rule's thresholds."""
    if isinstance(classification, BooleanThreshold):
        return Rating.PASS if evidence.count >= 1 else Rating.FAIL
    if isinstance(classification, GraduatedThreshold):
        if evidence.count >= classification.good:
            return Rating.PASS
        if evidence.count > 0:
            return Rating.WARN
        return Rating.FAIL
    if isinstance(classification, Informational):
        return Rating.PASS
    raise TypeError(f"Unsupported classification: {classification!r}")


def check_rule(rule: Rule, evidence: Evidence) -> CheckResult:
    """Classify evidence for ``rule`` and attach a message for non-pass outcomes."""
    rating = classify(rule.classification, evidence)
    message = None
    if rating is not Rating.PASS:
        message = f"{rule.rule_id}: {rule.issue or rule.description}"
        if rule.recommendation:
            message += f" ({rule.recommendation})"
    return CheckResult(rule_id=rule.rule_id, rating=rating, evidence=evidence, message=message)


def score_percent(passed: int, total: int) -> int:
    """Round ``passed / total`` to a whole percentage, halves rounding up."""
    return (passed * 200 + total) // (2 * total)


@dataclass(slots=True)
class Aggregator:
    """Running tally of classified results, safe to feed from several threads."""

    results: list[CheckResult] = field(default_factory=list)
    _summary: RunSummary = field(default_factory=RunSummary)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def accumulate(self, result: CheckResult) -> RunSummary:
        with self._lock:
            self.results.append(result)
            current = self._summary
            if result.rating is Rating.PASS:
                current = RunSummary(current.passed + 1, current.warned, current.failed)
            elif result.rating is Rating.WARN:
                current = RunSummary(current.passed, current.warned + 1, current.failed)
            else:
                current = RunSummary(current.passed, current.warned, current.failed + 1)
            self._summary = current
            return current

    def summary(self) -> RunSummary:
        """Return the final tally; refuses to summarize an empty run."""
        with self._lock:
            if self._summary.total == 0:
                raise ConfigurationError("No rules were evaluated; the rule registry is empty.")
            return self._summary

    def issues(self) -> list[str]:
        with self._lock:
            return [result.message for result in self.results if result.message is not None]
