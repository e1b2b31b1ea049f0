from __future__ import annotations

import json
from http.client import HTTPConnection, HTTPException, HTTPSConnection
from typing import Any
from urllib.parse import urlparse

from .sync_status import StatusEnvelope, parse_envelope

SYNC_STATUS_SUFFIX = "/sync_status"


class SyncStatusFetchError(Exception):
    """Transport, HTTP or decode failure of one status request."""


def build_base_url(address: str) -> str:
    trimmed = address.strip().rstrip("/")
    if not trimmed:
        return ""
    parsed = urlparse(trimmed)
    if parsed.scheme:
        return trimmed
    return f"http://{trimmed}"


def sync_status_url(base_url: str, endpoint_path: str) -> str:
    path = "/" + endpoint_path.strip().strip("/")
    if path == "/":
        path = ""
    return f"{build_base_url(base_url)}{path}{SYNC_STATUS_SUFFIX}"


def _open_connection(url: str, timeout_s: float | None) -> tuple[HTTPConnection, str]:
    parsed = urlparse(url)
    if not parsed.hostname:
        raise ValueError("missing hostname")
    timeout = timeout_s if timeout_s else None
    if parsed.scheme == "https":
        conn: HTTPConnection = HTTPSConnection(
            parsed.hostname, parsed.port or 443, timeout=timeout
        )
    else:
        conn = HTTPConnection(parsed.hostname, parsed.port or 80, timeout=timeout)
    path = parsed.path or "/"
    if parsed.query:
        path = f"{path}?{parsed.query}"
    return conn, path


def request_bytes(
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    timeout_s: float | None = 30.0,
) -> tuple[int, bytes]:
    conn, path = _open_connection(url, timeout_s)
    request_headers = {"Accept": "application/json, text/html"}
    if headers:
        request_headers.update(headers)
    try:
        conn.request(method, path, headers=request_headers)
        resp = conn.getresponse()
        status = int(resp.status)
        raw = resp.read()
    finally:
        conn.close()
    return status, raw


def request_json(
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    timeout_s: float | None = 30.0,
) -> tuple[int, Any]:
    request_headers = {"Accept": "application/json"}
    if headers:
        request_headers.update(headers)
    status, raw = request_bytes(method, url, headers=request_headers, timeout_s=timeout_s)
    if not raw:
        return status, None
    try:
        return status, json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        snippet = raw[:240].decode("utf-8", errors="replace").strip()
        raise SyncStatusFetchError(
            f"non_json_response: {snippet}" if snippet else "non_json_response"
        ) from exc


class SyncStatusClient:
    """Issues single /sync_status requests. Retry policy belongs to the caller."""

    def __init__(self, base_url: str, *, timeout_s: float | None = 30.0) -> None:
        self.base_url = build_base_url(base_url)
        self.timeout_s = timeout_s

    def fetch(self, endpoint_path: str) -> StatusEnvelope:
        url = sync_status_url(self.base_url, endpoint_path)
        try:
            status, payload = request_json("GET", url, timeout_s=self.timeout_s)
        except SyncStatusFetchError:
            raise
        except (OSError, HTTPException, ValueError) as exc:
            raise SyncStatusFetchError(f"{url}: {exc}") from exc
        if status >= 400:
            raise SyncStatusFetchError(f"{url}: http {status}")
        try:
            return parse_envelope(payload)
        except ValueError as exc:
            raise SyncStatusFetchError(f"{url}: {exc}") from exc


def fetch_page(url: str, *, timeout_s: float | None = 30.0) -> str:
    try:
        status, raw = request_bytes("GET", url, timeout_s=timeout_s)
    except (OSError, HTTPException, ValueError) as exc:
        raise SyncStatusFetchError(f"{url}: {exc}") from exc
    if status >= 400:
        raise SyncStatusFetchError(f"{url}: http {status}")
    return raw.decode("utf-8", errors="replace")
