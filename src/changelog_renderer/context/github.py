"""GitHub API client for fetching issue and user data.

This module fetches the issue/PR metadata that gets linked to commits and
the user profiles credited as contributors:
- GET /repos/{repo}/issues/{number} - issue or PR (title, author, body)
- GET /users/{login} - profile with display name

Design notes:
- Uses httpx for async HTTP requests, one client per call
- Retries transient failures with tenacity
- Issue bodies go through the body parser so parsed_body is ready for the
  security target extraction
- Uses a Protocol so callers can swap in the mock provider in tests

GitHub API docs: https://docs.github.com/en/rest
"""

from __future__ import annotations

import os
from typing import Protocol

import httpx
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from changelog_renderer.body_parser import parse_body
from changelog_renderer.logging_config import get_logger
from changelog_renderer.schemas import GitHubUser, Issue

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# Protocol (Interface)
# ---------------------------------------------------------------------------


class IssueProviderProtocol(Protocol):
    """Interface for anything that can supply issues and users."""

    async def get_issue_data(self, repo: str, number: int) -> Issue:
        """Fetch an issue or PR.

        Args:
            repo: Repository in "owner/name" format
            number: Issue or PR number

        Returns:
            The issue, with parsed_body populated
        """
        ...

    async def get_user_data(self, login: str) -> GitHubUser:
        """Fetch a user profile by login."""
        ...


# ---------------------------------------------------------------------------
# Concrete Implementation
# ---------------------------------------------------------------------------


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return False


class GitHubIssueClient:
    """Real GitHub API client using httpx.

    Usage:
        client = GitHubIssueClient(token="ghp_...")
        issue = await client.get_issue_data("myorg/api", 123)
    """

    BASE_URL = "https://api.github.com"

    def __init__(
        self,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            token: GitHub personal access token. Falls back to
                   GITHUB_TOKEN environment variable if not provided.
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self._token = token or os.environ.get("GITHUB_TOKEN", "")
        self._transport = transport
        self._headers: dict[str, str] = {
            "Accept": "application/vnd.github.v3+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self._token:
            self._headers["Authorization"] = f"Bearer {self._token}"

    async def get_issue_data(self, repo: str, number: int) -> Issue:
        """Fetch an issue or PR and parse its body.

        Raises:
            httpx.HTTPStatusError: If the GitHub API call fails
        """
        data = await self._get_json(f"/repos/{repo}/issues/{number}")
        issue = Issue.model_validate(data)
        issue = issue.model_copy(update={"parsed_body": parse_body(issue.body)})

        logger.info(
            "issue_fetched",
            repo=repo,
            number=number,
            is_pull_request=issue.pull_request is not None,
            blocks_count=len(issue.parsed_body or []),
        )
        return issue

    async def get_user_data(self, login: str) -> GitHubUser:
        """Fetch a user profile.

        Raises:
            httpx.HTTPStatusError: If the GitHub API call fails
        """
        data = await self._get_json(f"/users/{login}")
        return GitHubUser.model_validate(data)

    @retry(
        retry=retry_if_exception(_is_transient),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        reraise=True,
    )
    async def _get_json(self, url: str) -> dict:
        async with httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers=self._headers,
            timeout=30.0,
            transport=self._transport,
        ) as client:
            resp = await client.get(url)
            resp.raise_for_status()
            return resp.json()


# ---------------------------------------------------------------------------
# Mock Implementation (for testing)
# ---------------------------------------------------------------------------


class MockIssueProvider:
    """Mock provider that returns predefined data.

    Use this in tests and local development when you don't want to hit
    the real GitHub API.

    Usage:
        provider = MockIssueProvider(issues={"myorg/api": {123: some_data}})
        issue = await provider.get_issue_data("myorg/api", 123)
    """

    def __init__(
        self,
        issues: dict | None = None,
        users: dict | None = None,
    ) -> None:
        """Initialize with optional predefined data.

        Args:
            issues: Nested dict of repo -> number -> Issue data
            users: Dict of login -> GitHubUser data
        """
        self._issues = issues or {}
        self._users = users or {}

    async def get_issue_data(self, repo: str, number: int) -> Issue:
        if repo in self._issues and number in self._issues[repo]:
            issue = Issue.model_validate(self._issues[repo][number])
            if issue.parsed_body is None:
                issue = issue.model_copy(update={"parsed_body": parse_body(issue.body)})
            return issue

        return Issue(
            number=number,
            title=f"Mock issue #{number}",
            user=GitHubUser(login="mock-user", html_url="https://github.com/mock-user"),
            parsed_body=[],
        )

    async def get_user_data(self, login: str) -> GitHubUser:
        if login in self._users:
            return GitHubUser.model_validate(self._users[login])

        return GitHubUser(login=login, html_url=f"https://github.com/{login}")
