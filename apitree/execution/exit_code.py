"""Exit code computation.

The run's exit code is the number of failed tests summed over all suites,
so zero means every test passed. Process exit statuses are limited to
0-255 on POSIX hosts; ``clamp_exit_code`` keeps a large failure count from
wrapping around to a passing status.
"""

from __future__ import annotations

from dataclasses import dataclass

from apitree.execution.tracker import SuiteResult

# Largest exit status portable across POSIX hosts
MAX_EXIT_CODE = 255


@dataclass
class ExitCodeSummary:
    """Summary of failure counts across suites."""

    exit_code: int
    total_tests: int
    failed_tests: int
    failing_suites: list[str]


def compute_exit_code(results: list[SuiteResult]) -> ExitCodeSummary:
    """Sum suite failure counts into the run's exit code.

    Args:
        results: Finalized results of every suite in the run.

    Returns:
        ``ExitCodeSummary`` whose ``exit_code`` is the failure sum.
    """
    total = 0
    failed = 0
    failing_suites: list[str] = []
    for result in results:
        total += result.total
        failed += result.failure_count
        if result.failure_count:
            failing_suites.append(result.name)

    return ExitCodeSummary(
        exit_code=failed,
        total_tests=total,
        failed_tests=failed,
        failing_suites=failing_suites,
    )


def clamp_exit_code(code: int) -> int:
    """Limit an exit code to the portable 0-255 range."""
    return max(0, min(code, MAX_EXIT_CODE))
