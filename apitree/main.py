"""Entry point for the API test runner.

Discovers suite declarations below a directory, runs every suite's tests in
dependency order against their HTTP endpoints, prints a summary per suite,
and exits with the number of failed tests.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import requests

from apitree.config import DEFAULT_CONFIG_FILENAME, RunnerConfig
from apitree.discovery.loader import discover_suites
from apitree.execution.executor import HttpExecutor
from apitree.execution.exit_code import clamp_exit_code, compute_exit_code
from apitree.execution.scheduler import Scheduler
from apitree.execution.tracker import SuiteResult
from apitree.reporting.console import ConsoleReporter
from apitree.reporting.reporter import Reporter

__version__ = "1.1.0"


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {value}")
    return number


def _non_negative_float(value: str) -> float:
    number = float(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {value}")
    return number


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="apitree",
        description="Declarative API test runner - executes HTTP test suites "
                    "in dependency order",
    )
    parser.add_argument(
        "root",
        nargs="?",
        type=Path,
        default=Path("."),
        help="Directory searched recursively for declarations (default: .)",
    )
    parser.add_argument(
        "-V", "--verbose",
        action="store_true",
        default=None,
        help="Also list passing tests",
    )
    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"apitree v{__version__}",
        help="Print the version and exit",
    )
    parser.add_argument(
        "--config-file",
        type=Path,
        default=None,
        help=f"Path to the runner config JSON file "
             f"(default: <root>/{DEFAULT_CONFIG_FILENAME} when present)",
    )
    parser.add_argument(
        "--max-parallel",
        type=_positive_int,
        default=None,
        help="Maximum number of tests executing at once",
    )
    parser.add_argument(
        "--child-delay",
        type=_non_negative_float,
        default=None,
        help="Seconds to wait after a test before starting its dependents "
             "(default: 0.1)",
    )
    parser.add_argument(
        "--timeout",
        type=_non_negative_float,
        default=None,
        help="Per-request timeout in seconds (default: no timeout)",
    )
    parser.add_argument(
        "--filename",
        type=str,
        default=None,
        help="Declaration filename to search for (default: apitree.yml)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Path to write a run report (.json, or .yml/.yaml for YAML)",
    )
    return parser.parse_args(argv)


def _load_config(args: argparse.Namespace) -> RunnerConfig:
    """Load the config file and apply command-line overrides.

    Raises:
        ValueError: If a resulting setting is invalid.
    """
    config_path = args.config_file
    if config_path is None:
        candidate = args.root / DEFAULT_CONFIG_FILENAME
        config_path = candidate if candidate.exists() else None
    elif not config_path.exists():
        print(f"Warning: config file not found: {config_path}", file=sys.stderr)

    config = RunnerConfig(config_path)
    config.set_config(
        max_parallel=args.max_parallel,
        child_delay=args.child_delay,
        request_timeout=args.timeout,
        declaration_filename=args.filename,
        verbose=args.verbose,
    )
    config.validate()
    return config


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if not args.root.is_dir():
        print(f"Error: not a directory: {args.root}", file=sys.stderr)
        return 1

    try:
        config = _load_config(args)
    except ValueError as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return 1

    suites = discover_suites(args.root, config.declaration_filename)
    if not suites:
        print(f"No {config.declaration_filename} declarations found under {args.root}")
        return 0

    console = ConsoleReporter(verbose=config.verbose)
    reporter = Reporter()

    def on_suite_complete(result: SuiteResult) -> None:
        console.report(result)
        reporter.add_result(result)

    with requests.Session() as session:
        executor = HttpExecutor(session=session, timeout=config.request_timeout)
        scheduler = Scheduler(
            executor,
            max_parallel=config.max_parallel,
            child_delay=config.child_delay,
            on_suite_complete=on_suite_complete,
        )
        results = scheduler.execute(suites)

    summary = compute_exit_code(results)
    print(
        f"Results: {summary.total_tests - summary.failed_tests} passed, "
        f"{summary.failed_tests} failed in {len(results)} suite(s)"
    )
    if summary.failing_suites:
        print(f"Failing suites: {', '.join(summary.failing_suites)}")

    if args.output:
        try:
            reporter.write(args.output)
        except OSError as e:
            print(f"Error: cannot write report {args.output}: {e}", file=sys.stderr)
            return max(1, clamp_exit_code(summary.exit_code))
        print(f"Report written to: {args.output}")

    return clamp_exit_code(summary.exit_code)


if __name__ == "__main__":
    sys.exit(main())
