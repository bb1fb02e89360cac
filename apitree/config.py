"""Runner configuration file management.

Reads the ``.apitree_config`` JSON file that stores execution
tuning parameters. Command-line flags take precedence over file values.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_FILENAME = ".apitree_config"

# Default configuration values
DEFAULT_CONFIG: dict[str, Any] = {
    "max_parallel": None,
    "child_delay": 0.1,
    "request_timeout": None,
    "declaration_filename": "apitree.yml",
    "verbose": False,
}


class RunnerConfig:
    """Reads the .apitree_config JSON configuration file."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self._data: dict[str, Any] = dict(DEFAULT_CONFIG)
        if path is not None and path.exists():
            self._load()

    def _load(self) -> None:
        """Load config from the file."""
        assert self.path is not None
        try:
            text = self.path.read_text(encoding="utf-8")
            data = json.loads(text)
            if isinstance(data, dict):
                self._data = {**DEFAULT_CONFIG, **data}
        except (ValueError, OSError):
            self._data = dict(DEFAULT_CONFIG)

    @property
    def max_parallel(self) -> int | None:
        """Get the max parallel test executions (None = pool default)."""
        val = self._data.get("max_parallel", DEFAULT_CONFIG["max_parallel"])
        return int(val) if val is not None else None

    @property
    def child_delay(self) -> float:
        """Get the delay in seconds before a test's dependents are dispatched."""
        return float(
            self._data.get("child_delay", DEFAULT_CONFIG["child_delay"])
        )

    @property
    def request_timeout(self) -> float | None:
        """Get the per-request timeout in seconds (None = wait forever)."""
        val = self._data.get("request_timeout", DEFAULT_CONFIG["request_timeout"])
        return float(val) if val is not None else None

    @property
    def declaration_filename(self) -> str:
        """Get the filename searched for during suite discovery."""
        return str(
            self._data.get(
                "declaration_filename", DEFAULT_CONFIG["declaration_filename"]
            )
        )

    @property
    def verbose(self) -> bool:
        """Get whether passing tests are listed in the console output."""
        return bool(self._data.get("verbose", DEFAULT_CONFIG["verbose"]))

    def validate(self) -> None:
        """Check the numeric settings.

        Raises:
            ValueError: Naming the first setting that is not a number or is
                out of range.
        """
        for key, convert, minimum in (
            ("max_parallel", int, 1),
            ("child_delay", float, 0),
            ("request_timeout", float, 0),
        ):
            value = self._data.get(key)
            if value is None and DEFAULT_CONFIG[key] is None:
                continue
            try:
                number = convert(value)
            except (TypeError, ValueError):
                raise ValueError(f"{key} must be a number, got {value!r}") from None
            if number < minimum:
                raise ValueError(f"{key} must be at least {minimum}, got {value!r}")
        if not self.declaration_filename:
            raise ValueError("declaration_filename must not be empty")

    def set_config(self, **values: Any) -> None:
        """Update configuration values, ignoring ``None`` and unknown keys."""
        for key, value in values.items():
            if key in DEFAULT_CONFIG and value is not None:
                self._data[key] = value
