"""Minimal JSON-over-HTTP client for outbound integrations."""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from typing import Any, Optional


def http_request_json(
    method: str,
    url: str,
    payload: dict[str, Any],
    headers: Optional[dict[str, str]] = None,
    timeout: float = 10,
) -> tuple[int, bytes]:
    """Send ``payload`` as JSON; HTTP error statuses are returned, network errors raise."""
    data = json.dumps(payload).encode("utf-8")
    req_headers = {"Content-Type": "application/json"}
    if headers:
        req_headers.update(headers)
    req = urllib.request.Request(url, data=data, headers=req_headers, method=method)
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            return resp.status, resp.read()
    except urllib.error.HTTPError as exc:
        return exc.code, exc.read()
