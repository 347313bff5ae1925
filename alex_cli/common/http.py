"""Lightweight HTTP helpers (stdlib urllib, urllib3 for multipart bodies)."""

from __future__ import annotations

import json
import mimetypes
from pathlib import Path
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from urllib3 import encode_multipart_formdata

from alex_cli.common.constants import HTTP_TIMEOUT, USER_AGENT
from alex_cli.common.errors import NetworkError


def _request(
    url: str,
    *,
    method: str = "GET",
    data: bytes | None = None,
    headers: dict | None = None,
    timeout: int = HTTP_TIMEOUT,
    raw: bool = False,
) -> dict | list | str:
    """Core request with User-Agent.  Any failure becomes a NetworkError."""
    hdr = {"Accept": "application/json", "User-Agent": USER_AGENT, **(headers or {})}
    req = Request(url, method=method, data=data, headers=hdr)
    try:
        with urlopen(req, timeout=timeout) as resp:
            body = resp.read().decode()
    except HTTPError as exc:
        raise NetworkError(
            f"{method} {url} failed with HTTP {exc.code}", url=url, status=exc.code,
        ) from exc
    except (URLError, TimeoutError, OSError) as exc:
        raise NetworkError(f"{method} {url} failed: {exc}", url=url) from exc

    if raw:
        return body
    if not body:
        return {}
    try:
        return json.loads(body)
    except json.JSONDecodeError as exc:
        raise NetworkError(f"{method} {url} returned a non-JSON body", url=url) from exc


def http_get(
    url: str, headers: dict | None = None, timeout: int = HTTP_TIMEOUT, raw: bool = False,
) -> dict | list | str:
    """Perform a GET request and return the parsed JSON body (or text if *raw*)."""
    return _request(url, method="GET", headers=headers, timeout=timeout, raw=raw)


def http_post(
    url: str,
    headers: dict | None = None,
    body: bytes | None = None,
    timeout: int = HTTP_TIMEOUT,
) -> dict | list:
    """Perform a POST request and return the parsed JSON body."""
    return _request(
        url, method="POST", data=body if body is not None else b"",
        headers=headers, timeout=timeout,
    )


def http_delete(url: str, headers: dict | None = None, timeout: int = HTTP_TIMEOUT) -> dict | list:
    """Perform a DELETE request and return the parsed JSON body."""
    return _request(url, method="DELETE", headers=headers, timeout=timeout)


def http_post_file(
    url: str,
    path: Path,
    headers: dict | None = None,
    field: str = "file",
    timeout: int = HTTP_TIMEOUT,
) -> dict | list:
    """Upload *path* as a single ``multipart/form-data`` part."""
    ctype = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    body, content_type = encode_multipart_formdata({field: (path.name, path.read_bytes(), ctype)})
    hdr = {**(headers or {}), "Content-Type": content_type}
    return _request(url, method="POST", data=body, headers=hdr, timeout=timeout)
