"""Tests for rating classification and score aggregation."""

from __future__ import annotations

import threading

import pytest

from practice_scan.errors import ConfigurationError
from practice_scan.rules.base import (
    BooleanThreshold,
    Evidence,
    GraduatedThreshold,
    Informational,
    Rating,
)
from practice_scan.scoring import Aggregator, CheckResult, RunSummary, check_rule, classify
from tests.helpers_project import fixture_rules


def test_boolean_threshold_passes_on_any_evidence() -> None:
    assert classify(BooleanThreshold(), Evidence(count=1)) is Rating.PASS
    assert classify(BooleanThreshold(), Evidence(count=7)) is Rating.PASS
    assert classify(BooleanThreshold(), Evidence(count=0)) is Rating.FAIL


def test_graduated_threshold_has_three_bands() -> None:
    threshold = GraduatedThreshold(good=3)
    assert classify(threshold, Evidence(count=0)) is Rating.FAIL
    assert classify(threshold, Evidence(count=1)) is Rating.WARN
    assert classify(threshold, Evidence(count=2)) is Rating.WARN
    assert classify(threshold, Evidence(count=3)) is Rating.PASS
    assert classify(threshold, Evidence(count=9)) is Rating.PASS


def test_informational_policy_always_passes() -> None:
    assert classify(Informational(), Evidence(count=0)) is Rating.PASS
    assert classify(Informational(), Evidence(count=12)) is Rating.PASS
    assert Informational().describe() == "informational"


def test_graduated_threshold_rejects_non_positive_target() -> None:
    with pytest.raises(ValueError):
        GraduatedThreshold(good=0)


def test_evidence_rejects_negative_count() -> None:
    with pytest.raises(ValueError):
        Evidence(count=-1)


def test_check_rule_attaches_message_only_when_not_passing() -> None:
    lib_rule, pattern_rule = fixture_rules(pattern_threshold=3)

    passed = check_rule(lib_rule, Evidence(count=1))
    assert passed.rating is Rating.PASS
    assert passed.message is None

    warned = check_rule(pattern_rule, Evidence(count=1))
    assert warned.rating is Rating.WARN
    assert warned.message is not None
    assert warned.message.startswith("pattern_used: track() rarely used")
    assert "Call track() from every feature entrypoint." in warned.message


@pytest.mark.parametrize(
    ("passed", "warned", "failed", "expected"),
    [
        (7, 0, 3, 70),
        (10, 0, 0, 100),
        (0, 2, 3, 0),
        (1, 4, 3, 13),
        (5, 2, 1, 63),
        (2, 1, 0, 67),
    ],
)
def test_summary_score_rounds_percentage(
    passed: int, warned: int, failed: int, expected: int
) -> None:
    summary = RunSummary(passed=passed, warned=warned, failed=failed)
    assert summary.total == passed + warned + failed
    assert summary.score == expected
    assert 0 <= summary.score <= 100


def test_summary_of_empty_run_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        _ = RunSummary().score
    with pytest.raises(ConfigurationError):
        Aggregator().summary()


def test_aggregator_tracks_warn_separately_from_fail() -> None:
    aggregator = Aggregator()
    aggregator.accumulate(_result("a", Rating.PASS))
    aggregator.accumulate(_result("b", Rating.WARN, "b: warned"))
    aggregator.accumulate(_result("c", Rating.FAIL, "c: failed"))

    summary = aggregator.summary()
    assert (summary.passed, summary.warned, summary.failed) == (1, 1, 1)
    assert summary.score == 33
    assert aggregator.issues() == ["b: warned", "c: failed"]
    assert len(aggregator.issues()) == summary.warned + summary.failed


def test_aggregator_tally_is_consistent_under_threads() -> None:
    aggregator = Aggregator()

    def feed(rating: Rating) -> None:
        for index in range(200):
            message = None if rating is Rating.PASS else f"{rating.value}-{index}"
            aggregator.accumulate(_result(f"{rating.value}-{index}", rating, message))

    threads = [threading.Thread(target=feed, args=(rating,)) for rating in Rating]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    summary = aggregator.summary()
    assert (summary.passed, summary.warned, summary.failed) == (200, 200, 200)
    assert len(aggregator.results) == 600
    assert len(aggregator.issues()) == 400


def _result(rule_id: str, rating: Rating, message: str | None = None) -> CheckResult:
    return CheckResult(
        rule_id=rule_id,
        rating=rating,
        evidence=Evidence(count=0 if rating is Rating.FAIL else 1),
        message=message,
    )
