"""GitHub REST API client for pull request operations.

Only the handful of endpoints the publisher needs are implemented. Every
non-2xx response raises GitHubError; there are no retries.
"""

from __future__ import annotations

from typing import Any

import requests

from .errors import GitHubError
from .models import PullRequest

USER_AGENT = "update-dotnet-sdk"


class GitHubClient:
    """Client for one repository's pull requests.

    Args:
        token: GitHub token with contents and pull-requests write access.
        repo: Repository in "owner/name" form.
        api_url: REST API root, e.g. a GitHub Enterprise Server API URL.
    """

    def __init__(self, token: str, repo: str, api_url: str = "https://api.github.com"):
        if "/" not in repo:
            raise GitHubError(f"Invalid repository '{repo}'; expected owner/name")
        self.owner, self.repo = repo.split("/", 1)
        self.base_url = f"{api_url.rstrip('/')}/repos/{self.owner}/{self.repo}"
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"token {token}",
                "Accept": "application/vnd.github+json",
                "User-Agent": USER_AGENT,
            }
        )

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}/{path}"
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as exc:
            raise GitHubError(f"{method} {url} failed: {exc}") from exc

        if response.status_code >= 400:
            raise GitHubError(
                f"{method} {url} failed: HTTP {response.status_code} {response.text}",
                status_code=response.status_code,
            )
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise GitHubError(
                f"{method} {url} returned invalid JSON: {exc}",
                status_code=response.status_code,
            ) from exc

    @staticmethod
    def _to_pull_request(data: dict[str, Any]) -> PullRequest:
        return PullRequest(
            number=data["number"],
            url=data["html_url"],
            title=data.get("title", ""),
            head_ref=(data.get("head") or {}).get("ref", ""),
            user_login=(data.get("user") or {}).get("login", ""),
        )

    def create_pull_request(self, title: str, head: str, base: str, body: str) -> PullRequest:
        data = self._request(
            "POST",
            "pulls",
            json={
                "title": title,
                "head": head,
                "base": base,
                "body": body,
                "draft": False,
                "maintainer_can_modify": True,
            },
        )
        return self._to_pull_request(data)

    def add_labels(self, number: int, labels: list[str]) -> None:
        self._request("POST", f"issues/{number}/labels", json={"labels": labels})

    def list_open_pull_requests(self, base: str) -> list[PullRequest]:
        data = self._request(
            "GET",
            "pulls",
            params={"base": base, "state": "open", "direction": "desc", "per_page": 100},
        )
        return [self._to_pull_request(item) for item in data or []]

    def create_comment(self, number: int, body: str) -> None:
        self._request("POST", f"issues/{number}/comments", json={"body": body})

    def close_pull_request(self, number: int) -> None:
        self._request("PATCH", f"pulls/{number}", json={"state": "closed"})

    def delete_branch(self, branch: str) -> None:
        self._request("DELETE", f"git/refs/heads/{branch}")
