"""
GitHub API client for reporting deploy outcomes on issues, comments and releases.
"""
import os
from urllib.parse import quote
from typing import Dict, Any, Optional
import httpx

from .errors import NotificationError

DEFAULT_API_URL = "https://api.github.com"


class GitHubClient:
    """Client for interacting with GitHub API."""

    def __init__(self, token: Optional[str] = None, base_url: Optional[str] = None):
        """
        Initialize GitHub client.

        Args:
            token: GitHub token (usually the workflow's GITHUB_TOKEN).
                  If None, reads from GITHUB_TOKEN environment variable.
            base_url: REST API root. Defaults to GITHUB_API_URL, which the
                  runner sets for GitHub Enterprise Server.
        """
        self.token = token or os.getenv("GITHUB_TOKEN")
        if not self.token:
            raise ValueError("GitHub token is required (GITHUB_TOKEN env var or token parameter)")

        self.base_url = base_url or os.getenv("GITHUB_API_URL") or DEFAULT_API_URL
        self.headers = {
            "Authorization": f"token {self.token}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "Coswarm-Deploy-Action/1.0"
        }
        self.client = httpx.AsyncClient(base_url=self.base_url, headers=self.headers)

    async def close(self):
        """Close the underlying httpx client."""
        await self.client.aclose()

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        try:
            response = await self.client.request(method, path, **kwargs)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise NotificationError(f"{method} {path} failed: {e}") from e

    async def create_issue(
        self,
        owner: str,
        repo: str,
        title: str,
        body: str
    ) -> Dict[str, Any]:
        """
        Open a new issue.

        Args:
            owner: Repository owner
            repo: Repository name
            title: Issue title
            body: Issue body (markdown)

        Returns:
            Created issue data
        """
        return await self._request(
            "POST",
            f"/repos/{owner}/{repo}/issues",
            json={"title": title, "body": body}
        )

    async def create_issue_comment(
        self,
        owner: str,
        repo: str,
        issue_number: int,
        body: str
    ) -> Dict[str, Any]:
        """
        Comment on an issue or pull request conversation.

        Args:
            owner: Repository owner
            repo: Repository name
            issue_number: Issue or PR number
            body: Comment body (markdown)

        Returns:
            Created comment data
        """
        return await self._request(
            "POST",
            f"/repos/{owner}/{repo}/issues/{issue_number}/comments",
            json={"body": body}
        )

    async def create_commit_comment(
        self,
        owner: str,
        repo: str,
        commit_sha: str,
        body: str
    ) -> Dict[str, Any]:
        """
        Comment on a commit.

        Args:
            owner: Repository owner
            repo: Repository name
            commit_sha: SHA of the commit to comment on
            body: Comment body (markdown)

        Returns:
            Created comment data
        """
        return await self._request(
            "POST",
            f"/repos/{owner}/{repo}/commits/{commit_sha}/comments",
            json={"body": body}
        )

    async def get_release_by_tag(
        self,
        owner: str,
        repo: str,
        tag: str
    ) -> Dict[str, Any]:
        """
        Get a release by its tag name.

        Args:
            owner: Repository owner
            repo: Repository name
            tag: Release tag (e.g., "v1.2.0")

        Returns:
            Release data
        """
        return await self._request(
            "GET",
            f"/repos/{owner}/{repo}/releases/tags/{quote(tag, safe='')}"
        )

    async def update_release(
        self,
        owner: str,
        repo: str,
        release_id: int,
        body: str
    ) -> Dict[str, Any]:
        """
        Replace a release's body.

        Args:
            owner: Repository owner
            repo: Repository name
            release_id: Numeric release id (from get_release_by_tag)
            body: New release body (markdown)

        Returns:
            Updated release data
        """
        return await self._request(
            "PATCH",
            f"/repos/{owner}/{repo}/releases/{release_id}",
            json={"body": body}
        )
