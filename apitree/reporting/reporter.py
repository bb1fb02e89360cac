"""Run report generation.

Collects finalized SuiteResults and writes a JSON or YAML report with a
run summary, per-suite and per-test details, and a rolling per-test history
carried over from the previous report at the same path.
"""

from __future__ import annotations

import datetime
import json
from pathlib import Path
from typing import Any

import yaml

from apitree.declaration.suite import TestOutcome
from apitree.execution.tracker import SuiteResult

# Maximum rolling history entries per test
MAX_HISTORY = 100


class Reporter:
    """Collects suite results and generates JSON or YAML reports."""

    def __init__(self) -> None:
        self.results: list[SuiteResult] = []

    def add_result(self, result: SuiteResult) -> None:
        """Add a finalized suite result to the report.

        Args:
            result: SuiteResult from the scheduler.
        """
        self.results.append(result)

    def generate_report(self) -> dict[str, Any]:
        """Generate the report data structure.

        Returns:
            Dictionary representing the full report, suitable for
            JSON or YAML serialization.
        """
        now = datetime.datetime.now(tz=datetime.timezone.utc).isoformat()
        suites = sorted(self.results, key=lambda r: r.name)
        return {
            "report": {
                "generated_at": now,
                "summary": self._compute_summary(),
                "suites": [self._format_suite(r) for r in suites],
            }
        }

    def generate_report_with_history(
        self, existing_report_path: Path | None = None,
    ) -> dict[str, Any]:
        """Generate report with rolling history appended.

        Reads an existing report, extracts per-test history, appends
        current outcomes, and trims to MAX_HISTORY entries.

        Args:
            existing_report_path: Path to an existing JSON or YAML report.

        Returns:
            Report dict with history included.
        """
        report = self.generate_report()

        existing_history: dict[str, list[dict[str, Any]]] = {}
        if existing_report_path is not None and existing_report_path.exists():
            existing = _read_report(existing_report_path)
            if isinstance(existing, dict) and isinstance(existing.get("report"), dict):
                existing_history = existing["report"].get("history") or {}

        history: dict[str, list[dict[str, Any]]] = dict(existing_history)
        timestamp = report["report"]["generated_at"]
        for result in self.results:
            for test_name, outcome in result.outcomes.items():
                key = f"{result.name}/{test_name}"
                entries = list(history.get(key, []))
                entries.append({
                    "status": outcome.status,
                    "duration_seconds": round(outcome.duration, 3),
                    "timestamp": timestamp,
                })
                history[key] = entries[-MAX_HISTORY:]

        report["report"]["history"] = history
        return report

    def write(self, path: Path, with_history: bool = True) -> None:
        """Write the report, as YAML for ``.yml``/``.yaml`` paths, else JSON.

        Args:
            path: File path to write.
            with_history: Carry over history from a report already at ``path``.
        """
        if with_history:
            report = self.generate_report_with_history(path)
        else:
            report = self.generate_report()

        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            if path.suffix in (".yml", ".yaml"):
                yaml.dump(
                    report,
                    f,
                    default_flow_style=False,
                    sort_keys=False,
                    allow_unicode=True,
                )
            else:
                json.dump(report, f, indent=2)
                f.write("\n")

    def _compute_summary(self) -> dict[str, int]:
        total = sum(r.total for r in self.results)
        failed = sum(r.failure_count for r in self.results)
        return {
            "suites": len(self.results),
            "total": total,
            "passed": total - failed,
            "failed": failed,
        }

    def _format_suite(self, result: SuiteResult) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": result.name,
            "base_url": result.base_url,
            "total": result.total,
            "passed": result.passed_count,
            "failed": result.failure_count,
        }
        if result.error:
            data["error"] = result.error
        data["tests"] = [
            _format_outcome(name, outcome)
            for name, outcome in result.outcomes.items()
        ]
        return data


def _format_outcome(name: str, outcome: TestOutcome) -> dict[str, Any]:
    data: dict[str, Any] = {
        "name": name,
        "status": outcome.status,
        "duration_seconds": round(outcome.duration, 3),
    }
    if outcome.status_code is not None:
        data["status_code"] = outcome.status_code
    if outcome.errors:
        data["errors"] = list(outcome.errors)
    return data


def _read_report(path: Path) -> Any:
    """Load a previous report, returning None if it is unreadable."""
    try:
        text = path.read_text()
        if path.suffix in (".yml", ".yaml"):
            return yaml.safe_load(text)
        return json.loads(text)
    except (OSError, ValueError, yaml.YAMLError):
        return None
