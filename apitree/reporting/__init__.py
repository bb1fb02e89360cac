"""Result reporting: console summaries and JSON/YAML run reports."""

from apitree.reporting.console import ConsoleReporter, format_suite
from apitree.reporting.reporter import Reporter

__all__ = [
    "ConsoleReporter",
    "Reporter",
    "format_suite",
]
