"""Response validation against a test's expectations.

Checks run in a fixed order and every mismatch is recorded: status code,
then expected headers (declaration order), then body assertions
(declaration order). Body-assertion failures never abort the remaining
assertions.
"""

from __future__ import annotations

from typing import Any

import requests

from apitree.declaration.suite import ValidationSpec
from apitree.evaluation.predicate import PredicateError, PredicateEvaluator


def parse_body(response: requests.Response) -> Any:
    """Parse the response body as JSON, degrading to ``None`` on failure."""
    try:
        return response.json()
    except ValueError:
        return None


def validate_response(
    validation: ValidationSpec,
    response: requests.Response,
    evaluator: PredicateEvaluator,
) -> list[str]:
    """Validate a response and return the errors found.

    Args:
        validation: Expected status code, headers, and body assertions.
        response: The captured HTTP response.
        evaluator: Evaluator for body-assertion expressions.

    Returns:
        Error messages in the order discovered. Empty means the test passed.
    """
    errors: list[str] = []

    if validation.status_code is not None:
        actual = str(response.status_code)
        if actual != validation.status_code:
            errors.append(
                f"expected status code: {validation.status_code}, actual: {actual}"
            )

    for header, expected in validation.headers.items():
        actual = response.headers.get(header, "")
        if actual != expected:
            errors.append(f"expected header {header}: {expected}, actual: {actual}")

    if validation.body:
        document = parse_body(response)
        for expression in validation.body:
            try:
                result = evaluator.evaluate(document, expression)
            except PredicateError as e:
                errors.append(f"({expression}) evaluated with error: {e}")
                continue
            if not result:
                errors.append(f"({expression}) evaluated to false")

    return errors
