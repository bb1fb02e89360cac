"""Data structures for suite declarations and test outcomes.

A declaration is one parsed YAML mapping describing a suite: a base URL and
a mapping of test name to request/validation descriptors. ``Suite.from_declaration``
turns such a mapping into the in-memory model consumed by the graph builder.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


class DeclarationError(ValueError):
    """Raised when a declaration mapping does not describe a valid suite."""


@dataclass
class RequestSpec:
    """HTTP request descriptor of a single test."""

    method: str = "GET"
    path: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    query_params: dict[str, Any] = field(default_factory=dict)
    body: Any = None


@dataclass
class ValidationSpec:
    """Expectations checked against the response of a single test."""

    status_code: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    body: list[str] = field(default_factory=list)


@dataclass
class TestOutcome:
    """Result of a single test execution."""

    status: str  # passed, failed, error, dependencies_failed
    errors: list[str] = field(default_factory=list)
    duration: float = 0.0
    status_code: int | None = None

    @property
    def passed(self) -> bool:
        return self.status == "passed"


@dataclass
class TestSpec:
    """One test declaration within a suite."""

    name: str
    after: list[str] = field(default_factory=list)
    request: RequestSpec = field(default_factory=RequestSpec)
    validation: ValidationSpec = field(default_factory=ValidationSpec)
    outcome: TestOutcome | None = None

    @classmethod
    def from_declaration(cls, name: str, data: dict[str, Any] | None) -> TestSpec:
        """Build a TestSpec from its declaration mapping.

        Args:
            name: Key of the test in the suite's ``tests`` mapping.
            data: The test's mapping (``request``, ``validation``, ``after``).

        Returns:
            The parsed TestSpec.

        Raises:
            DeclarationError: If a field has the wrong shape.
        """
        data = data or {}
        if not isinstance(data, dict):
            raise DeclarationError(f"test '{name}' must be a mapping")

        request_data = _mapping(data.get("request"), f"test '{name}' request")
        validation_data = _mapping(
            data.get("validation"), f"test '{name}' validation"
        )

        request = RequestSpec(
            method=str(request_data.get("method") or "GET").upper(),
            path=str(request_data.get("path") or ""),
            headers=_string_map(
                request_data.get("headers"), f"test '{name}' request headers"
            ),
            query_params=_mapping(
                _first(request_data, "query_params", "queryParams", "queryparams"),
                f"test '{name}' query params",
            ),
            body=request_data.get("body"),
        )

        status_code = _first(
            validation_data, "status_code", "statusCode", "statuscode"
        )
        body_assertions = validation_data.get("body") or []
        if isinstance(body_assertions, str):
            body_assertions = [body_assertions]
        if not isinstance(body_assertions, list):
            raise DeclarationError(
                f"test '{name}' validation body must be a list of expressions"
            )

        validation = ValidationSpec(
            status_code=str(status_code) if status_code not in (None, "") else None,
            headers=_string_map(
                validation_data.get("headers"), f"test '{name}' validation headers"
            ),
            body=[str(expr) for expr in body_assertions],
        )

        return cls(
            name=name,
            after=_after_list(data.get("after"), name),
            request=request,
            validation=validation,
        )


@dataclass
class Suite:
    """A collection of tests sharing a base URL and a completion lifecycle."""

    name: str
    base_url: str
    tests: dict[str, TestSpec] = field(default_factory=dict)
    source: Path | None = None

    @classmethod
    def from_declaration(
        cls,
        data: dict[str, Any],
        name: str,
        source: Path | None = None,
    ) -> Suite:
        """Construct a Suite from a parsed declaration mapping.

        Args:
            data: Mapping with ``base`` (or ``base_url``) and ``tests`` keys.
                An optional ``name`` key overrides ``name``.
            name: Default suite name, usually derived from the file location.
            source: Path of the declaration file, if any.

        Returns:
            A Suite whose tests carry their mapping keys as names.

        Raises:
            DeclarationError: If the mapping is not a valid suite declaration.
        """
        if not isinstance(data, dict):
            raise DeclarationError("declaration must be a mapping")

        tests_data = data.get("tests") or {}
        if not isinstance(tests_data, dict):
            raise DeclarationError("'tests' must be a mapping of test name to test")

        tests: dict[str, TestSpec] = {}
        for key, test_data in tests_data.items():
            test_name = str(key)
            if test_name in tests:
                raise DeclarationError(f"duplicate test name '{test_name}'")
            tests[test_name] = TestSpec.from_declaration(test_name, test_data)

        base_url = _first(data, "base", "base_url", "baseUrl") or ""
        return cls(
            name=str(data.get("name") or name),
            base_url=str(base_url),
            tests=tests,
            source=source,
        )


def _first(data: dict[str, Any], *keys: str) -> Any:
    """Return the value of the first key present in ``data``."""
    for key in keys:
        if key in data:
            return data[key]
    return None


def _mapping(value: Any, what: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DeclarationError(f"{what} must be a mapping")
    return value


def _string_map(value: Any, what: str) -> dict[str, str]:
    return {str(k): "" if v is None else str(v) for k, v in _mapping(value, what).items()}


def _after_list(value: Any, name: str) -> list[str]:
    """Normalize an ``after`` value to a deduplicated list of test names."""
    if value is None or value == "":
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        names: list[str] = []
        for item in value:
            item_name = str(item)
            if item_name and item_name not in names:
                names.append(item_name)
        return names
    raise DeclarationError(
        f"test '{name}' after must be a test name or a list of test names"
    )
