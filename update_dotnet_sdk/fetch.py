"""HTTP helpers for fetching release metadata.

Requests are made one at a time with a fixed User-Agent. There are no
retries: a failed fetch fails the run and the next scheduled run tries
again.
"""

from __future__ import annotations

from typing import Any

import requests

from .errors import HttpError, ResolutionError

USER_AGENT = "update-dotnet-sdk"

JSON_CONTENT_TYPES = ("json", "octet-stream")
TEXT_CONTENT_TYPES = ("text/", "octet-stream")


def _get(url: str, accept: str, content_types: tuple[str, ...]) -> requests.Response:
    try:
        response = requests.get(
            url, headers={"User-Agent": USER_AGENT, "Accept": accept}
        )
    except requests.RequestException as exc:
        raise ResolutionError(f"Failed to get {url}: {exc}") from exc

    if not 200 <= response.status_code < 300:
        raise HttpError(url, response.status_code)

    content_type = response.headers.get("Content-Type", "").lower()
    if not any(kind in content_type for kind in content_types):
        raise ResolutionError(
            f"Failed to get {url}: unexpected content type '{content_type}'"
        )

    return response


def get_json(url: str) -> Any:
    """GET a JSON document.

    Raises:
        HttpError: For a non-2xx response.
        ResolutionError: If the response is not JSON.
    """
    response = _get(url, "application/json", JSON_CONTENT_TYPES)
    try:
        return response.json()
    except ValueError as exc:
        raise ResolutionError(f"Failed to parse JSON from {url}: {exc}") from exc


def get_text(url: str) -> str:
    """GET a plain-text document.

    Raises:
        HttpError: For a non-2xx response.
        ResolutionError: If the response is not text.
    """
    return _get(url, "text/plain", TEXT_CONTENT_TYPES).text
