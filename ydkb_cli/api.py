"""Small HTTP client for the game's JSON API.

Functions raise APIError on failure. Network calls go through `requests`
so they are easy to mock in tests.
"""
from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

import requests

DEFAULT_BASE_URL = "http://localhost:5000"
DEFAULT_TIMEOUT = 10.0


class APIError(Exception):
    """Raised when an API request fails or returns an invalid response."""


def base_url() -> str:
    return os.getenv("YDKB_API_URL", DEFAULT_BASE_URL).rstrip("/")


def _headers() -> Dict[str, str]:
    token = os.getenv("YDKB_ADMIN_TOKEN")
    return {"X-Admin-Token": token} if token else {}


def _request_json(
    method: str,
    path: str,
    params: Optional[Dict[str, Any]] = None,
    json: Optional[Dict[str, Any]] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> Any:
    """Perform a request and return parsed JSON.

    Args:
        method: HTTP verb.
        path: API path starting with '/'.
        params: Optional query parameters (None values are dropped).
        json: Optional JSON body.
        timeout: Request timeout in seconds.

    Raises:
        APIError: On transport errors, non-2xx status codes or invalid JSON.
    """
    url = f"{base_url()}{path}"
    params = {k: v for k, v in (params or {}).items() if v is not None}
    try:
        resp = requests.request(method, url, params=params, json=json, headers=_headers(), timeout=timeout)
    except requests.RequestException as e:
        raise APIError(f"Request failed for {url}: {e}") from e

    try:
        data = resp.json()
    except ValueError as e:
        if not (200 <= resp.status_code < 300):
            raise APIError(f"HTTP {resp.status_code} for {url}") from e
        raise APIError(f"Invalid JSON from {url}: {e}") from e

    if not (200 <= resp.status_code < 300):
        detail = data.get("error") if isinstance(data, dict) else None
        raise APIError(f"HTTP {resp.status_code} for {url}" + (f": {detail}" if detail else ""))
    return data


def create_challenge(date: Optional[str] = None) -> Dict[str, Any]:
    """Create (or fetch the existing) challenge for a date."""
    return _request_json("GET", "/api/create-challenge", params={"date": date})


def create_week(days: int = 7) -> Dict[str, Any]:
    """Create challenges for the next `days` dates."""
    return _request_json("POST", "/api/admin/create-week", params={"days": days})


def get_challenge(date: Optional[str] = None) -> Dict[str, Any]:
    return _request_json("GET", "/api/daily-challenge", params={"date": date})


def search_colleges(term: str) -> List[Dict[str, Any]]:
    data = _request_json("GET", "/api/colleges", params={"search": term})
    if isinstance(data, list):
        return data
    raise APIError("Unexpected colleges payload")


def get_hint(guess: str, answer: str) -> str:
    data = _request_json("POST", "/api/daily-challenge/hint", json={"guess": guess, "answer": answer})
    return str(data.get("hint", ""))


def check_connection() -> Dict[str, Any]:
    return _request_json("GET", "/api/test-connection")
