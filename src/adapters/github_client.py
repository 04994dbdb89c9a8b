"""GitHub REST API adapter.

Implements the core GitHubClientPort using the issues endpoint.
"""

from __future__ import annotations

from typing import Optional

import httpx

GITHUB_API_BASE_URL = "https://api.github.com/"


class GitHubApiError(RuntimeError):
    """Raised when GitHub does not create the requested issue."""


class GitHubClient:
    """Async GitHub client that satisfies the GitHubClientPort contract."""

    def __init__(
        self,
        token: str,
        timeout: float = 5.0,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url or GITHUB_API_BASE_URL,
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"token {token}",
                "User-Agent": "slack-github-issues",
            },
            timeout=timeout,
            transport=transport,
        )

    async def create_issue(self, repository: str, title: str, body: str) -> str:
        """Create an issue in ``owner/repo`` and return its HTML URL."""

        response = await self._client.post(
            f"repos/{repository}/issues", json={"title": title, "body": body}
        )
        if response.status_code != 201:
            raise GitHubApiError(
                f"received {response.status_code} response from GitHub API: "
                f"{_error_message(response)}"
            )
        return response.json()["html_url"]

    async def aclose(self) -> None:
        await self._client.aclose()


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return response.text
