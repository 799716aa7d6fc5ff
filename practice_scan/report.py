"""Report assembly and atomic persistence."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from practice_scan import __version__
from practice_scan.errors import ReportWriteError
from practice_scan.scoring import CheckResult, RunSummary

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Report:
    """Everything one run produced, in rule registration order."""

    timestamp: datetime
    project_root: Path
    suite: str
    results: dict[str, CheckResult]
    issues: list[str]
    summary: RunSummary
    sections: dict[str, dict[str, Any]] = field(default_factory=dict)
    meta: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "timestamp": format_timestamp(self.timestamp),
            "project": str(self.project_root),
            "suite": self.suite,
            "checks": {rule_id: result.passed for rule_id, result in self.results.items()},
            "results": {
                rule_id: _serialize_result(result) for rule_id, result in self.results.items()
            },
        }
        payload.update(self.sections)
        payload["issues"] = list(self.issues)
        payload["summary"] = self.summary.to_dict()
        payload["meta"] = {"version": __version__, **self.meta}
        return payload


def format_timestamp(value: datetime) -> str:
    return value.astimezone(UTC).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def render_report_json(report: Report) -> str:
    """Serialize a report with stable key order and a trailing newline."""
    return json.dumps(report.to_dict(), indent=2) + "\n"


def write_report(report: Report, path: Path) -> Path:
    """Atomically replace ``path`` with the serialized report."""
    payload = render_report_json(report)
    path = path.resolve()
    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        os.chmod(tmp_name, _default_file_mode())
        os.replace(tmp_name, path)
    except OSError as exc:
        if tmp_name is not None:
            _discard(Path(tmp_name))
        raise ReportWriteError(f"Could not write report to {path}: {exc}") from exc
    logger.debug("Wrote report %s (%d bytes)", path, len(payload))
    return path


def _default_file_mode() -> int:
    # mkstemp creates 0600; reports get the mode a plain open() would give.
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("Could not remove temporary report %s: %s", path, exc)


def _serialize_result(result: CheckResult) -> dict[str, Any]:
    return {
        "rating": result.rating.value,
        "count": result.evidence.count,
        "matched_paths": list(result.evidence.matched_paths),
        "detail": result.evidence.detail,
        "message": result.message,
    }
