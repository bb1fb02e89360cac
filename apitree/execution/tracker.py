"""Per-suite completion tracking.

A SuiteTracker starts with one outstanding slot per test. Every node reports
exactly one completion; once nothing is outstanding the suite is finalized
into a read-only SuiteResult.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from apitree.declaration.suite import Suite, TestOutcome


@dataclass
class SuiteResult:
    """Finalized outcome of one suite."""

    name: str
    base_url: str
    total: int
    failure_count: int
    outcomes: dict[str, TestOutcome] = field(default_factory=dict)
    error: str | None = None

    @property
    def passed_count(self) -> int:
        return self.total - self.failure_count


class SuiteTracker:
    """Counts node completions for one suite."""

    def __init__(self, suite: Suite) -> None:
        self.suite = suite
        self.outstanding = len(suite.tests)
        self.failure_count = 0
        self.error: str | None = None
        self._completed: set[str] = set()
        self._lock = asyncio.Lock()

    @property
    def finalized(self) -> bool:
        return self.outstanding == 0

    async def complete(self, name: str, outcome: TestOutcome) -> bool:
        """Record the completion of one test.

        Args:
            name: Test name.
            outcome: The test's final outcome.

        Returns:
            True if this completion finalized the suite.

        Raises:
            ValueError: If the test is unknown or already completed.
        """
        async with self._lock:
            if name not in self.suite.tests:
                raise ValueError(f"suite '{self.suite.name}' has no test '{name}'")
            if name in self._completed:
                raise ValueError(
                    f"suite '{self.suite.name}': test '{name}' completed twice"
                )
            self._completed.add(name)
            self.suite.tests[name].outcome = outcome
            if not outcome.passed:
                self.failure_count += 1
            self.outstanding -= 1
            return self.outstanding == 0

    async def fail_all(self, error: str) -> None:
        """Finalize the suite without running it, e.g. on a configuration error."""
        self.error = error
        for name in self.suite.tests:
            if name not in self._completed:
                await self.complete(
                    name,
                    TestOutcome(
                        status="dependencies_failed",
                        errors=[f"not run: {error}"],
                    ),
                )

    def result(self) -> SuiteResult:
        """Build the read-only result view of the suite."""
        outcomes = {
            name: spec.outcome
            for name, spec in self.suite.tests.items()
            if spec.outcome is not None
        }
        return SuiteResult(
            name=self.suite.name,
            base_url=self.suite.base_url,
            total=len(self.suite.tests),
            failure_count=self.failure_count,
            outcomes=outcomes,
            error=self.error,
        )
