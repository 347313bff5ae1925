"""Test configuration: repo importable, plus an in-memory ALEX server."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from alex_cli.common import http
from alex_cli.common.errors import NetworkError
from alex_cli.common.logging import EventLog

BASE = "http://alex.test/rest"


@dataclass
class Call:
    method: str
    path: str
    payload: object
    headers: dict


def sequence(*responses):
    """Handler returning *responses* in order, repeating the last one."""
    queue = list(responses)

    def handler(_payload):
        return queue.pop(0) if len(queue) > 1 else queue[0]

    return handler


class FakeAlex:
    """Stands in for ``alex_cli.common.http._request``.

    Routes map ``(method, path)`` to a value or to a callable receiving the
    decoded request payload.  Unknown routes answer HTTP 404.
    """

    def __init__(self) -> None:
        self.calls: list[Call] = []
        self.routes: dict[tuple[str, str], object] = {}

    def on(self, method: str, path: str, response) -> None:
        self.routes[(method, path)] = response

    def paths(self, method: str | None = None) -> list[str]:
        return [c.path for c in self.calls if method is None or c.method == method]

    def payload(self, method: str, path: str):
        return next(c.payload for c in self.calls if (c.method, c.path) == (method, path))

    def __call__(self, url, *, method="GET", data=None, headers=None, timeout=30, raw=False):
        path = url.split("/rest", 1)[1]
        payload = data
        if data:
            try:
                payload = json.loads(data)
            except ValueError:
                payload = data
        self.calls.append(Call(method, path, payload, dict(headers or {})))

        handler = self.routes.get((method, path))
        if handler is None:
            raise NetworkError(f"{method} {url} failed with HTTP 404", url=url, status=404)
        if isinstance(handler, Exception):
            raise handler
        return handler(payload) if callable(handler) else handler


def _created_project(payload: dict) -> dict:
    urls = [{"id": 100 + i, **u} for i, u in enumerate(payload["urls"])]
    return {"id": 42, "name": payload["name"], "urls": urls}


def _created_tests(payload: list) -> list:
    return [{**t, "id": 500 + i} for i, t in enumerate(payload)]


@pytest.fixture
def alex(monkeypatch) -> FakeAlex:
    """Fake ALEX with a happy-path test run for a single "click" symbol."""
    fake = FakeAlex()
    fake.on("POST", "/users/login", {"token": "jwt-token"})
    fake.on("POST", "/projects", _created_project)
    fake.on("DELETE", "/projects/42", {})
    fake.on("POST", "/projects/42/files/upload", {})
    fake.on("POST", "/projects/42/symbols/batch", [
        {"id": 7, "name": "click", "inputs": [{"id": 70, "name": "selector"}]},
    ])
    fake.on("POST", "/projects/42/tests/batch", _created_tests)
    fake.on("POST", "/projects/42/tests/execute", {})
    fake.on("GET", "/projects/42/tests/status", sequence({"active": True}, {"active": False}))
    fake.on("GET", "/projects/42/tests/reports/latest", {
        "id": 9,
        "passed": True,
        "numTests": 1,
        "numTestsPassed": 1,
        "numTestsFailed": 0,
        "testResults": [{"passed": True, "test": {"name": "login works"}}],
    })
    fake.on("GET", "/projects/42/tests/reports/9?format=junit%2Bxml", "<testsuites/>")
    monkeypatch.setattr(http, "_request", fake)
    return fake


@pytest.fixture
def log() -> EventLog:
    return EventLog("alex_cli.tests")


def write_json(path: Path, data) -> str:
    path.write_text(json.dumps(data))
    return str(path)


CLICK_CASE = {
    "type": "case",
    "name": "login works",
    "preSteps": [],
    "steps": [{"pSymbol": {"symbol": {"name": "click"}, "parameterValues": []}}],
    "postSteps": [],
}


@pytest.fixture
def input_files(tmp_path: Path) -> dict[str, str]:
    """Symbol, test, driver config and learner config files on disk."""
    return {
        "symbols": write_json(tmp_path / "symbols.json", {
            "type": "symbols",
            "symbols": [{"name": "click", "inputs": [{"name": "selector"}]}],
        }),
        "tests": write_json(tmp_path / "tests.json", {"tests": [CLICK_CASE]}),
        "config": write_json(tmp_path / "config.json", {"driverConfig": {"name": "chrome"}}),
        "learner": write_json(tmp_path / "learner.json", {
            "algorithm": {"name": "TTT"},
            "symbols": [{
                "symbol": {"name": "click"},
                "parameterValues": [{"parameter": {"name": "selector"}, "value": "#ok"}],
            }],
            "resetSymbol": {"symbol": {"name": "click"}, "parameterValues": []},
        }),
    }
