"""Unit tests for the HTTP executor."""

from __future__ import annotations

import datetime
import json

import requests

from apitree.declaration.suite import RequestSpec, Suite, TestSpec, ValidationSpec
from apitree.execution.executor import HttpExecutor
from apitree.execution.graph import SuiteGraph

BASE = "http://api.local"


def _make_node(request: RequestSpec, validation: ValidationSpec | None = None, base: str = BASE):
    """Build a one-test suite and return its node."""
    spec = TestSpec(
        name="t",
        request=request,
        validation=validation or ValidationSpec(),
    )
    suite = Suite(name="suite", base_url=base, tests={"t": spec})
    return SuiteGraph.build(suite).nodes["t"]


class TestRequestBuilding:
    def test_default_get(self, stub_session, stub_adapter):
        stub_adapter.add("GET", BASE + "/ping")
        node = _make_node(RequestSpec(method="", path="/ping"))
        outcome = HttpExecutor(session=stub_session).run(node)

        assert outcome.status == "passed"
        assert stub_adapter.sent[0].method == "GET"
        assert stub_adapter.sent[0].url == BASE + "/ping"

    def test_json_body_and_headers(self, stub_session, stub_adapter):
        stub_adapter.add("POST", BASE + "/users", status=201)
        node = _make_node(
            RequestSpec(
                method="POST",
                path="/users",
                headers={"Authorization": "Bearer t0k3n"},
                body={"name": "ada", "tags": [1, 2]},
            ),
            ValidationSpec(status_code="201"),
        )
        outcome = HttpExecutor(session=stub_session).run(node)

        sent = stub_adapter.sent[0]
        assert outcome.status == "passed"
        assert outcome.status_code == 201
        assert json.loads(sent.body) == {"name": "ada", "tags": [1, 2]}
        assert sent.headers["authorization"] == "Bearer t0k3n"
        assert sent.headers["Content-Type"] == "application/json"

    def test_declared_content_type_kept(self, stub_session, stub_adapter):
        stub_adapter.add("PUT", BASE + "/doc")
        node = _make_node(
            RequestSpec(
                method="PUT",
                path="/doc",
                headers={"content-type": "application/merge-patch+json"},
                body={"a": 1},
            )
        )
        HttpExecutor(session=stub_session).run(node)
        assert stub_adapter.sent[0].headers["Content-Type"] == "application/merge-patch+json"

    def test_no_body_sends_nothing(self, stub_session, stub_adapter):
        stub_adapter.add("DELETE", BASE + "/users/1", status=204)
        node = _make_node(RequestSpec(method="DELETE", path="/users/1"))
        HttpExecutor(session=stub_session).run(node)
        assert stub_adapter.sent[0].body is None

    def test_query_params_applied(self, stub_session, stub_adapter):
        stub_adapter.add("GET", BASE + "/search")
        node = _make_node(
            RequestSpec(path="/search", query_params={"q": "x y", "page": 2, "all": True})
        )
        HttpExecutor(session=stub_session).run(node)
        assert stub_adapter.sent[0].url == BASE + "/search?q=x+y&page=2&all=true"


class TestOutcomes:
    def test_validation_failure(self, stub_session, stub_adapter):
        stub_adapter.add("GET", BASE + "/missing", status=404)
        node = _make_node(RequestSpec(path="/missing"), ValidationSpec(status_code="200"))
        outcome = HttpExecutor(session=stub_session).run(node)

        assert outcome.status == "failed"
        assert outcome.errors == ["expected status code: 200, actual: 404"]
        assert outcome.status_code == 404

    def test_transport_error(self, stub_session, stub_adapter):
        node = _make_node(RequestSpec(path="/unrouted"), ValidationSpec(status_code="200"))
        outcome = HttpExecutor(session=stub_session).run(node)

        assert outcome.status == "error"
        assert len(outcome.errors) == 1
        assert "connection refused" in outcome.errors[0]
        assert outcome.status_code is None

    def test_timeout_is_transport_error(self, stub_session, stub_adapter):
        stub_adapter.add("GET", BASE + "/slow", error=requests.Timeout("read timed out"))
        node = _make_node(RequestSpec(path="/slow"))
        outcome = HttpExecutor(session=stub_session, timeout=0.5).run(node)

        assert outcome.status == "error"
        assert "read timed out" in outcome.errors[0]

    def test_unserializable_body(self, stub_session, stub_adapter):
        """A YAML date is not a JSON value; the request is never sent."""
        node = _make_node(RequestSpec(method="POST", body={"when": datetime.date(2024, 1, 1)}))
        outcome = HttpExecutor(session=stub_session).run(node)

        assert outcome.status == "error"
        assert outcome.errors[0].startswith("cannot serialize request body")
        assert stub_adapter.sent == []

    def test_malformed_url(self, stub_session):
        node = _make_node(RequestSpec(path="/x"), base="not a url")
        outcome = HttpExecutor(session=stub_session).run(node)

        assert outcome.status == "error"
        assert len(outcome.errors) == 1

    def test_duration_recorded(self, stub_session, stub_adapter):
        stub_adapter.add("GET", BASE + "/ping")
        outcome = HttpExecutor(session=stub_session).run(_make_node(RequestSpec(path="/ping")))
        assert outcome.duration >= 0.0
