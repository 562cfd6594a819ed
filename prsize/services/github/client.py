"""Async GitHub API client using httpx."""

from logging import getLogger
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import SecretStr

from prsize.exceptions import APIError

logger = getLogger(__name__)


class GitHubAPIClient:
    """Async GitHub API client for the issue label and comment endpoints."""

    def __init__(self, token: SecretStr, base_url: str = "https://api.github.com") -> None:
        """Initialize GitHub API client.

        Args:
            token: GitHub token (the Actions GITHUB_TOKEN or a PAT)
            base_url: Base URL for GitHub API (default: https://api.github.com)
        """
        self.token = token.get_secret_value()
        self.base_url = base_url.rstrip("/")
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "GitHubAPIClient":
        """Enter async context manager."""
        self._client = httpx.AsyncClient(
            headers={
                "Authorization": f"Bearer {self.token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=httpx.Timeout(30.0, connect=10.0),
        )
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager."""
        if self._client:
            await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Make a single HTTP request.

        There is no retry: a failed call fails the run and the workflow is
        expected to be re-run.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: URL to request
            **kwargs: Additional arguments to pass to httpx request

        Returns:
            httpx.Response object

        Raises:
            APIError: If the request fails or returns an error status
        """
        if not self._client:
            raise RuntimeError("Client not initialized - use async with context manager")

        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(f"{method} {url} failed with status {status_code}")
            raise APIError(f"{method} {url} failed with status {status_code}", status_code=status_code) from e
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise APIError(f"{method} {url} failed: {e}") from e

    def _issue_url(self, repository: str, number: int) -> str:
        return f"{self.base_url}/repos/{repository}/issues/{number}"

    async def list_issue_labels(self, repository: str, number: int) -> list[dict[str, Any]]:
        """Get the labels currently applied to an issue or pull request.

        Args:
            repository: Repository in ``owner/name`` form
            number: Issue or pull request number

        Returns:
            List of label dictionaries with at least a ``name`` key

        Raises:
            APIError: If the request fails
        """
        per_page = 100
        page = 1
        all_labels: list[dict[str, Any]] = []

        while True:
            response = await self._request(
                "GET",
                f"{self._issue_url(repository, number)}/labels",
                params={"per_page": per_page, "page": page},
            )
            labels: list[dict[str, Any]] = response.json()
            all_labels.extend(labels)

            if len(labels) < per_page:
                break

            page += 1

        return all_labels

    async def remove_issue_label(self, repository: str, number: int, name: str) -> None:
        """Remove a single label from an issue or pull request.

        Raises:
            APIError: If the request fails
        """
        await self._request("DELETE", f"{self._issue_url(repository, number)}/labels/{quote(name, safe='')}")

    async def add_issue_labels(self, repository: str, number: int, labels: list[str]) -> list[dict[str, Any]]:
        """Add labels to an issue or pull request.

        Args:
            repository: Repository in ``owner/name`` form
            number: Issue or pull request number
            labels: Label names to add (created on the fly by GitHub if missing)

        Returns:
            The full label list of the issue after the addition

        Raises:
            APIError: If the request fails
        """
        response = await self._request(
            "POST",
            f"{self._issue_url(repository, number)}/labels",
            json={"labels": labels},
        )
        result: list[dict[str, Any]] = response.json()
        return result

    async def create_issue_comment(self, repository: str, number: int, body: str) -> dict[str, Any]:
        """Post a comment on the conversation of an issue or pull request.

        Raises:
            APIError: If the request fails
        """
        response = await self._request(
            "POST",
            f"{self._issue_url(repository, number)}/comments",
            json={"body": body},
        )
        result: dict[str, Any] = response.json()
        return result
