"""Session holder and thin wrappers around the ALEX REST endpoints."""

from __future__ import annotations

import json
from pathlib import Path
from urllib.parse import quote

from alex_cli.common.constants import JUNIT_FORMAT
from alex_cli.common.errors import AuthenticationError, NetworkError
from alex_cli.common.http import (
    http_delete,
    http_get,
    http_post,
    http_post_file,
)
from alex_cli.runner.context import Credentials

_REJECTED_LOGIN = (400, 401, 403)


class AlexClient:
    """Bearer-token session against one ALEX server.

    ``base_url`` is the REST root (``<uri>/rest``).  All methods raise
    :class:`NetworkError` when the request fails.
    """

    def __init__(self, base_url: str) -> None:
        self.base_url = base_url.rstrip("/")
        self.token: str | None = None

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token is not None:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _get(self, path: str, raw: bool = False):
        return http_get(self._url(path), headers=self._headers(), raw=raw)

    def _post(self, path: str, payload: object = None):
        body = json.dumps(payload).encode() if payload is not None else None
        return http_post(self._url(path), headers=self._headers(), body=body)

    # ── Session ──────────────────────────────────────────────────────────

    def login(self, credentials: Credentials) -> str:
        """Log in and keep the returned JWT for every following call."""
        try:
            data = self._post("/users/login", credentials.as_payload())
        except NetworkError as exc:
            if exc.status in _REJECTED_LOGIN:
                raise AuthenticationError(
                    f'User "{credentials.email}" could not be logged in (HTTP {exc.status}).'
                ) from exc
            raise
        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise AuthenticationError(f"No token in login response for {credentials.email}.")
        self.token = token
        return token

    # ── Projects & files ─────────────────────────────────────────────────

    def create_project(self, name: str, urls: list[dict]) -> dict:
        return self._post("/projects", {"name": name, "urls": urls})

    def delete_project(self, project_id: int) -> None:
        http_delete(self._url(f"/projects/{project_id}"), headers=self._headers())

    def upload_file(self, project_id: int, path: Path) -> dict:
        headers = self._headers()
        headers.pop("Content-Type")
        return http_post_file(
            self._url(f"/projects/{project_id}/files/upload"), path, headers=headers,
        )

    # ── Symbols & tests ──────────────────────────────────────────────────

    def create_symbols(self, project_id: int, symbols: list[dict]) -> list[dict]:
        return self._post(f"/projects/{project_id}/symbols/batch", symbols)

    def create_symbol_groups(self, project_id: int, groups: list[dict]) -> list[dict]:
        return self._post(f"/projects/{project_id}/groups/batch", groups)

    def create_tests(self, project_id: int, tests: list[dict]) -> list[dict]:
        return self._post(f"/projects/{project_id}/tests/batch", tests)

    def execute_tests(self, project_id: int, config: dict) -> dict:
        return self._post(f"/projects/{project_id}/tests/execute", config)

    def test_status(self, project_id: int) -> dict:
        return self._get(f"/projects/{project_id}/tests/status")

    def latest_test_report(self, project_id: int) -> dict:
        return self._get(f"/projects/{project_id}/tests/reports/latest")

    def junit_report(self, project_id: int, report_id: int) -> str:
        fmt = quote(JUNIT_FORMAT, safe="")
        return self._get(f"/projects/{project_id}/tests/reports/{report_id}?format={fmt}", raw=True)

    # ── Learner ──────────────────────────────────────────────────────────

    def start_learning(self, project_id: int, config: dict) -> dict:
        return self._post(f"/learner/{project_id}/start", config)

    def learner_status(self, project_id: int) -> dict:
        return self._get(f"/learner/{project_id}/status")

    def learner_active(self, project_id: int) -> dict:
        return self._get(f"/learner/{project_id}/active")

    def latest_learner_result(self, project_id: int) -> dict:
        return self._get(f"/projects/{project_id}/results/latest")
