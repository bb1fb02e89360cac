"""HTTP execution of a single test node.

HttpExecutor builds the request described by a node's TestSpec, issues it
through a ``requests`` session, and validates the response. The work is
synchronous; the scheduler runs it on a worker thread.
"""

from __future__ import annotations

import json
import time
from typing import Any

import requests
from requests.structures import CaseInsensitiveDict

from apitree.declaration.suite import RequestSpec, Suite, TestOutcome
from apitree.evaluation.predicate import PredicateEvaluator, SimpleEvalEvaluator
from apitree.execution.graph import DependencyNode
from apitree.execution.validator import validate_response


class TransportError(Exception):
    """Raised when a request cannot be built or sent."""


class HttpExecutor:
    """Runs the request/response/validation cycle for one node.

    A request-construction or transport failure yields an ``error`` outcome
    with a single recorded error; validation mismatches yield ``failed``.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        evaluator: PredicateEvaluator | None = None,
        timeout: float | None = None,
    ) -> None:
        self.session = session or requests.Session()
        self.evaluator = evaluator or SimpleEvalEvaluator()
        self.timeout = timeout

    def run(self, node: DependencyNode) -> TestOutcome:
        """Execute and validate a node's test.

        Args:
            node: The dependency node to run.

        Returns:
            TestOutcome with status ``passed``, ``failed``, or ``error``.
        """
        start_time = time.monotonic()
        try:
            response = self.send(node.suite, node.spec.request)
        except TransportError as e:
            return TestOutcome(
                status="error",
                errors=[str(e)],
                duration=time.monotonic() - start_time,
            )

        errors = validate_response(node.spec.validation, response, self.evaluator)
        return TestOutcome(
            status="passed" if not errors else "failed",
            errors=errors,
            duration=time.monotonic() - start_time,
            status_code=response.status_code,
        )

    def send(self, suite: Suite, request: RequestSpec) -> requests.Response:
        """Build and send the HTTP request for a test.

        Raises:
            TransportError: If the body cannot be serialized, the request is
                malformed, or the transport fails.
        """
        headers = CaseInsensitiveDict(request.headers)

        data: bytes | None = None
        if request.body is not None:
            try:
                data = json.dumps(request.body).encode("utf-8")
            except (TypeError, ValueError) as e:
                raise TransportError(f"cannot serialize request body: {e}") from e
            headers.setdefault("Content-Type", "application/json")

        method = request.method or "GET"
        url = suite.base_url + request.path
        try:
            return self.session.request(
                method,
                url,
                headers=dict(headers),
                params=_query_params(request.query_params),
                data=data,
                timeout=self.timeout,
            )
        except (requests.RequestException, ValueError) as e:
            raise TransportError(f"request {method} {url} failed: {e}") from e


def _query_params(params: dict[str, Any]) -> dict[str, Any] | None:
    """Render declared query parameters the way ``requests`` expects them."""
    if not params:
        return None
    rendered: dict[str, Any] = {}
    for key, value in params.items():
        if isinstance(value, list):
            rendered[key] = [_scalar(v) for v in value]
        else:
            rendered[key] = _scalar(value)
    return rendered


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)
