"""Console output of finalized suite results."""

from __future__ import annotations

import sys
from typing import TextIO

from apitree.execution.tracker import SuiteResult

# ANSI colors
RESET = "\033[0m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
RED = "\033[31m"

STATUS_ICONS = {
    "passed": "PASS",
    "failed": "FAIL",
    "error": "ERROR",
    "dependencies_failed": "SKIP",
}


class ConsoleReporter:
    """Prints a summary block for each suite as soon as it is finalized.

    Failing tests are always listed with their errors; passing tests are
    listed only in verbose mode. A whole block is written at once so that
    output of concurrently finishing suites does not mix. Colors are used
    when the stream is a terminal unless ``color`` says otherwise.
    """

    def __init__(
        self,
        verbose: bool = False,
        stream: TextIO | None = None,
        color: bool | None = None,
    ) -> None:
        self.verbose = verbose
        self.stream = stream
        self.color = color

    def report(self, result: SuiteResult) -> None:
        stream = self.stream or sys.stdout
        color = self.color
        if color is None:
            color = stream.isatty()
        stream.write("\n".join(format_suite(result, self.verbose, color)) + "\n\n")
        stream.flush()


def summary_color(result: SuiteResult) -> str:
    """Green when every test passed, red when none did, yellow otherwise."""
    if result.failure_count == 0:
        return GREEN
    if result.passed_count == 0:
        return RED
    return YELLOW


def format_suite(result: SuiteResult, verbose: bool = False, color: bool = False) -> list[str]:
    """Render one suite result as console lines."""

    def paint(text: str, code: str) -> str:
        return f"{code}{text}{RESET}" if color else text

    lines = [
        f"== [{result.name}] Result Summary ==",
        paint(f"{result.passed_count}/{result.total} tests passed", summary_color(result)),
    ]
    if result.error:
        lines.append(f"  [{paint('ERROR', RED)}] {result.error}")
        return lines

    for name, outcome in result.outcomes.items():
        if outcome.passed and not verbose:
            continue
        icon = STATUS_ICONS.get(outcome.status, outcome.status.upper())
        icon = paint(icon, GREEN if outcome.passed else RED)
        lines.append(f"  [{icon}] {name} ({outcome.duration:.2f}s)")
        for error in outcome.errors:
            lines.append(f"         {error}")
    return lines
