"""IssueRepository - GitHub issues through the REST API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from issue_creator.repository.exceptions import RepositoryError, TicketNotFoundError
from issue_creator.repository.models import Ticket, TicketKind
from issue_creator.repository.urls import parse_ticket_url

logger = logging.getLogger("issue_creator.repository.issues")

# Candidates inspected when looking for the previous issue
LAST_ISSUE_PAGE_SIZE = 30


class IssueRepository:
    """Reads, creates and closes GitHub issues."""

    def __init__(self, token: str, base_url: str = "https://api.github.com") -> None:
        """Initialize the issue repository.

        Args:
            token: GitHub personal access token
            base_url: GitHub API base URL (for testing/enterprise)
        """
        self.token = token
        self.base_url = base_url.rstrip("/")
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client for GitHub API."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                headers={
                    "Authorization": f"Bearer {self.token}",
                    "Accept": "application/vnd.github+json",
                    "X-GitHub-Api-Version": "2022-11-28",
                },
                timeout=30.0,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send a request, turning transport failures into RepositoryError."""
        try:
            response: httpx.Response = getattr(self.client, method)(path, **kwargs)
        except httpx.HTTPError as e:
            raise RepositoryError(f"{method.upper()} {path} failed: {e}") from e
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise RepositoryError(f"Invalid JSON in GitHub response: {e}") from e

    def _issue_path(self, url: str) -> tuple[str, str, str]:
        ref = parse_ticket_url(url)
        if ref.kind is not TicketKind.ISSUE:
            raise RepositoryError(f"{url} is not an issue URL")
        return ref.owner, ref.repository, f"/repos/{ref.owner}/{ref.repository}/issues/{ref.number}"

    @staticmethod
    def _to_ticket(owner: str, repository: str, data: dict[str, Any]) -> Ticket:
        return Ticket(
            owner=owner,
            repository=repository,
            title=data.get("title") or "",
            body=data.get("body") or "",
            labels=[label["name"] for label in data.get("labels", [])],
            url=data.get("html_url"),
        )

    def find_by_url(self, url: str) -> Ticket:
        """Fetch an issue by its HTML URL.

        Raises:
            TicketNotFoundError: If the issue doesn't exist
            RepositoryError: If the URL is invalid or the request fails
        """
        owner, repository, path = self._issue_path(url)
        logger.debug("Fetching issue %s", url)
        response = self._request("get", path)

        if response.status_code == 404:
            raise TicketNotFoundError(f"Issue not found: {url}")
        if response.status_code != 200:
            raise RepositoryError(
                f"Failed to fetch issue {url}: {response.status_code} - {response.text}"
            )

        return self._to_ticket(owner, repository, self._json(response))

    def find_last_issue_by_label(self, template: Ticket) -> Ticket:
        """Fetch the most recently created issue carrying all template labels.

        Pull requests and the template issue itself are skipped.

        Raises:
            TicketNotFoundError: If no such issue exists
            RepositoryError: If the request fails
        """
        logger.debug(
            "Looking up last issue in %s/%s with labels %s",
            template.owner,
            template.repository,
            template.labels,
        )
        response = self._request(
            "get",
            f"/repos/{template.owner}/{template.repository}/issues",
            params={
                "labels": ",".join(template.labels),
                "state": "all",
                "sort": "created",
                "direction": "desc",
                "per_page": LAST_ISSUE_PAGE_SIZE,
            },
        )
        if response.status_code != 200:
            raise RepositoryError(
                f"Failed to list issues: {response.status_code} - {response.text}"
            )

        for data in self._json(response):
            if "pull_request" in data:
                continue
            if template.url is not None and data.get("html_url") == template.url:
                continue
            issue = self._to_ticket(template.owner, template.repository, data)
            logger.info("Found last issue %s", issue.url)
            return issue

        raise TicketNotFoundError(
            f"No issue labelled {template.labels} found in {template.owner}/{template.repository}"
        )

    def create(self, ticket: Ticket) -> Ticket:
        """Create an issue.

        Raises:
            RepositoryError: If creation fails
        """
        logger.info("Creating issue in %s/%s: %s", ticket.owner, ticket.repository, ticket.title)
        response = self._request(
            "post",
            f"/repos/{ticket.owner}/{ticket.repository}/issues",
            json={
                "title": ticket.title,
                "body": ticket.body,
                "labels": ticket.labels,
            },
        )

        if response.status_code != 201:
            logger.error("Failed to create issue: %s", response.text)
            raise RepositoryError(
                f"Failed to create issue: {response.status_code} - {response.text}"
            )

        created = self._to_ticket(ticket.owner, ticket.repository, self._json(response))
        created.last_issue_url = ticket.last_issue_url
        logger.info("Created issue %s", created.url)
        return created

    def close_by_url(self, url: str) -> Ticket:
        """Close an issue by its HTML URL.

        Raises:
            RepositoryError: If the URL is invalid or closing fails
        """
        owner, repository, path = self._issue_path(url)
        logger.info("Closing issue %s", url)
        response = self._request("patch", path, json={"state": "closed"})

        if response.status_code != 200:
            logger.error("Failed to close issue %s: %s", url, response.text)
            raise RepositoryError(
                f"Failed to close issue {url}: {response.status_code} - {response.text}"
            )

        logger.info("Closed issue %s", url)
        return self._to_ticket(owner, repository, self._json(response))
