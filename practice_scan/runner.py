"""Rule evaluation orchestration."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path

from practice_scan.errors import ConfigurationError
from practice_scan.rules.base import Evidence, Rule, ScanContext
from practice_scan.scoring import Aggregator, CheckResult, check_rule

logger = logging.getLogger(__name__)

ResultCallback = Callable[[int, Rule, CheckResult], None]


def evaluate(rule: Rule, root: Path, context: ScanContext) -> Evidence:
    """Run one rule's detector, degrading filesystem errors to empty evidence."""
    try:
        return rule.detector.detect(root, context)
    except OSError as exc:
        logger.debug("Rule %s could not read project files: %s", rule.rule_id, exc)
        return Evidence(count=0, detail=f"scan error: {exc.strerror or exc}")


def validate_root(root: Path) -> Path:
    """Resolve the project root, raising ConfigurationError when it cannot be scanned."""
    resolved = root.expanduser().resolve()
    if not resolved.exists():
        raise ConfigurationError(f"Project root does not exist: {resolved}")
    if not resolved.is_dir():
        raise ConfigurationError(f"Project root is not a directory: {resolved}")
    try:
        with os.scandir(resolved) as entries:
            next(entries, None)
    except OSError as exc:
        raise ConfigurationError(f"Project root is not readable: {resolved} ({exc})") from exc
    return resolved


def run_rules(
    root: Path,
    rules: list[Rule],
    *,
    context: ScanContext | None = None,
    jobs: int = 1,
    on_result: ResultCallback | None = None,
) -> Aggregator:
    """Evaluate ``rules`` against ``root`` and tally results in registration order.

    With ``jobs > 1`` detectors run on a thread pool. Results are buffered by
    registration position and released to ``on_result`` as soon as every
    earlier rule has completed, so callers always see rules 1..N in order.
    """
    if not rules:
        raise ConfigurationError("No rules to run; the rule registry is empty.")
    if jobs < 1:
        raise ConfigurationError(f"jobs must be >= 1, got {jobs}")

    scan_context = context or ScanContext()
    aggregator = Aggregator()
    pending: dict[int, Evidence] = {}
    next_index = 0

    def flush() -> None:
        nonlocal next_index
        while next_index in pending:
            rule = rules[next_index]
            result = check_rule(rule, pending.pop(next_index))
            aggregator.accumulate(result)
            logger.debug("Rule %s rated %s", rule.rule_id, result.rating.value)
            if on_result is not None:
                on_result(next_index, rule, result)
            next_index += 1

    if jobs == 1 or len(rules) == 1:
        for index, rule in enumerate(rules):
            pending[index] = evaluate(rule, root, scan_context)
            flush()
        return aggregator

    with ThreadPoolExecutor(max_workers=min(jobs, len(rules))) as executor:
        futures: dict[Future[Evidence], int] = {
            executor.submit(evaluate, rule, root, scan_context): index
            for index, rule in enumerate(rules)
        }
        for future in as_completed(futures):
            pending[futures[future]] = future.result()
            flush()
    return aggregator
