"""Shared pytest fixtures: an in-process HTTP transport for ``requests``."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from typing import Any

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict


@dataclass
class StubRoute:
    """Canned response for one method + URL (query string excluded)."""

    status: int = 200
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    raw_body: bytes | None = None
    error: Exception | None = None


class StubAdapter(BaseAdapter):
    """Transport adapter answering requests from a route table.

    Unknown routes raise ``requests.ConnectionError``. Every request sent is
    appended to ``sent`` in arrival order.
    """

    def __init__(self) -> None:
        super().__init__()
        self.routes: dict[tuple[str, str], StubRoute] = {}
        self.sent: list[requests.PreparedRequest] = []
        self._lock = threading.Lock()

    def add(self, method: str, url: str, **kwargs: Any) -> StubRoute:
        route = StubRoute(**kwargs)
        self.routes[(method.upper(), url)] = route
        return route

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        with self._lock:
            self.sent.append(request)
        url = request.url.split("?", 1)[0]
        route = self.routes.get((request.method, url))
        if route is None:
            raise requests.ConnectionError(f"connection refused: {url}", request=request)
        if route.error is not None:
            raise route.error

        response = requests.Response()
        response.status_code = route.status
        response.headers = CaseInsensitiveDict(route.headers)
        if route.raw_body is not None:
            response._content = route.raw_body
        elif route.body is not None:
            response._content = json.dumps(route.body).encode("utf-8")
        else:
            response._content = b""
        response.encoding = "utf-8"
        response.url = request.url
        response.request = request
        return response

    def close(self) -> None:
        pass

    def sent_paths(self) -> list[str]:
        return [r.path_url.split("?", 1)[0] for r in self.sent]


@pytest.fixture
def stub_adapter() -> StubAdapter:
    return StubAdapter()


@pytest.fixture
def stub_session(stub_adapter: StubAdapter) -> requests.Session:
    session = requests.Session()
    session.trust_env = False
    session.mount("http://", stub_adapter)
    session.mount("https://", stub_adapter)
    return session
