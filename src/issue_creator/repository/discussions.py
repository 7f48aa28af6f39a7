"""DiscussionRepository - GitHub discussions through the GraphQL API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from issue_creator.repository.exceptions import (
    LastDiscussionNotFoundError,
    RepositoryError,
    TicketNotFoundError,
)
from issue_creator.repository.models import Ticket, TicketKind
from issue_creator.repository.urls import TicketRef, parse_ticket_url

logger = logging.getLogger("issue_creator.repository.discussions")

# Discussions fetched per page when looking for the previous discussion
LAST_DISCUSSION_PAGE_SIZE = 50

_DISCUSSION_FIELDS = """
    id
    url
    title
    body
    category {
        id
    }
    labels(first: 100) {
        nodes {
            name
        }
    }
"""


class DiscussionRepository:
    """Reads, creates and closes GitHub discussions.

    Uses the GitHub GraphQL API; discussions are not exposed over REST.
    """

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com/graphql",
    ) -> None:
        """Initialize the discussion repository.

        Args:
            token: GitHub personal access token with discussion write access
            base_url: GitHub GraphQL API URL (for testing/enterprise)
        """
        self.token = token
        self.base_url = base_url
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client for GraphQL API."""
        if self._client is None:
            self._client = httpx.Client(
                headers={
                    "Authorization": f"Bearer {self.token}",
                    "Content-Type": "application/json",
                },
                timeout=30.0,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def _graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Execute a GraphQL query.

        Args:
            query: GraphQL query string
            variables: Query variables

        Returns:
            Response data

        Raises:
            RepositoryError: If query fails
        """
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        try:
            response = self.client.post(self.base_url, json=payload)
        except httpx.HTTPError as e:
            raise RepositoryError(f"GraphQL request failed: {e}") from e

        if response.status_code != 200:
            raise RepositoryError(
                f"GraphQL request failed: {response.status_code} - {response.text}"
            )

        try:
            data: dict[str, Any] = response.json()
        except ValueError as e:
            raise RepositoryError(f"Invalid JSON in GraphQL response: {e}") from e
        if data.get("errors"):
            raise RepositoryError(f"GraphQL errors: {data['errors']}")

        return dict(data["data"])

    @staticmethod
    def _discussion_ref(url: str) -> TicketRef:
        ref = parse_ticket_url(url)
        if ref.kind is not TicketKind.DISCUSSION:
            raise RepositoryError(f"{url} is not a discussion URL")
        return ref

    @staticmethod
    def _to_ticket(owner: str, repository: str, node: dict[str, Any]) -> Ticket:
        label_nodes = (node.get("labels") or {}).get("nodes", [])
        category = node.get("category") or {}
        return Ticket(
            owner=owner,
            repository=repository,
            title=node.get("title") or "",
            body=node.get("body") or "",
            labels=[label["name"] for label in label_nodes],
            url=node.get("url"),
            category_id=category.get("id"),
        )

    def _fetch_discussion(self, ref: TicketRef) -> dict[str, Any]:
        query = f"""
        query($owner: String!, $repo: String!, $number: Int!) {{
            repository(owner: $owner, name: $repo) {{
                discussion(number: $number) {{
                    {_DISCUSSION_FIELDS}
                }}
            }}
        }}
        """
        data = self._graphql(
            query,
            {"owner": ref.owner, "repo": ref.repository, "number": ref.number},
        )
        discussion: dict[str, Any] | None = (data.get("repository") or {}).get("discussion")
        if not discussion:
            raise TicketNotFoundError(
                f"Discussion #{ref.number} not found in {ref.owner}/{ref.repository}"
            )
        return discussion

    def find_by_url(self, url: str) -> Ticket:
        """Fetch a discussion by its HTML URL.

        Raises:
            TicketNotFoundError: If the discussion doesn't exist
            RepositoryError: If the URL is invalid or the query fails
        """
        ref = self._discussion_ref(url)
        logger.debug("Fetching discussion %s", url)
        node = self._fetch_discussion(ref)
        return self._to_ticket(ref.owner, ref.repository, node)

    def find_last_issue_by_label(self, template: Ticket) -> Ticket:
        """Fetch the newest discussion in the template's category carrying its labels.

        The template discussion itself is skipped.

        Raises:
            LastDiscussionNotFoundError: If no such discussion exists
            RepositoryError: If the query fails
        """
        logger.debug(
            "Looking up last discussion in %s/%s with labels %s",
            template.owner,
            template.repository,
            template.labels,
        )
        query = f"""
        query($owner: String!, $repo: String!, $categoryId: ID, $first: Int!, $after: String) {{
            repository(owner: $owner, name: $repo) {{
                discussions(
                    first: $first
                    after: $after
                    categoryId: $categoryId
                    orderBy: {{ field: CREATED_AT, direction: DESC }}
                ) {{
                    nodes {{
                        {_DISCUSSION_FIELDS}
                    }}
                    pageInfo {{
                        hasNextPage
                        endCursor
                    }}
                }}
            }}
        }}
        """
        wanted = set(template.labels)
        cursor: str | None = None
        while True:
            data = self._graphql(
                query,
                {
                    "owner": template.owner,
                    "repo": template.repository,
                    "categoryId": template.category_id,
                    "first": LAST_DISCUSSION_PAGE_SIZE,
                    "after": cursor,
                },
            )

            discussions = (data.get("repository") or {}).get("discussions") or {}
            for node in discussions.get("nodes", []):
                if not node:
                    continue
                if template.url is not None and node.get("url") == template.url:
                    continue
                discussion = self._to_ticket(template.owner, template.repository, node)
                if wanted.issubset(discussion.labels):
                    logger.info("Found last discussion %s", discussion.url)
                    return discussion

            page_info = discussions.get("pageInfo") or {}
            if not page_info.get("hasNextPage"):
                break
            cursor = page_info.get("endCursor")
            logger.debug("No match yet, fetching discussions after %s", cursor)

        raise LastDiscussionNotFoundError(
            f"No discussion labelled {template.labels} found in "
            f"{template.owner}/{template.repository}"
        )

    def _repository_ids(self, owner: str, repository: str) -> tuple[str, dict[str, str]]:
        """Get the repository node ID and its label name -> ID mapping."""
        query = """
        query($owner: String!, $repo: String!) {
            repository(owner: $owner, name: $repo) {
                id
                labels(first: 100) {
                    nodes {
                        id
                        name
                    }
                }
            }
        }
        """
        data = self._graphql(query, {"owner": owner, "repo": repository})
        repo = data.get("repository")
        if not repo:
            raise RepositoryError(f"Repository {owner}/{repository} not found")

        label_nodes = (repo.get("labels") or {}).get("nodes", [])
        return repo["id"], {label["name"]: label["id"] for label in label_nodes}

    def create(self, ticket: Ticket) -> Ticket:
        """Create a discussion in the ticket's category and attach its labels.

        Raises:
            RepositoryError: If the category is missing, a label doesn't exist,
                or a mutation fails
        """
        if not ticket.category_id:
            raise RepositoryError("Cannot create a discussion without a category")

        logger.info(
            "Creating discussion in %s/%s: %s", ticket.owner, ticket.repository, ticket.title
        )
        repository_id, label_ids = self._repository_ids(ticket.owner, ticket.repository)

        missing = [name for name in ticket.labels if name not in label_ids]
        if missing:
            raise RepositoryError(
                f"Labels not found in {ticket.owner}/{ticket.repository}: {missing}"
            )

        mutation = f"""
        mutation($repositoryId: ID!, $categoryId: ID!, $title: String!, $body: String!) {{
            createDiscussion(
                input: {{
                    repositoryId: $repositoryId
                    categoryId: $categoryId
                    title: $title
                    body: $body
                }}
            ) {{
                discussion {{
                    {_DISCUSSION_FIELDS}
                }}
            }}
        }}
        """
        data = self._graphql(
            mutation,
            {
                "repositoryId": repository_id,
                "categoryId": ticket.category_id,
                "title": ticket.title,
                "body": ticket.body,
            },
        )
        node = (data.get("createDiscussion") or {}).get("discussion")
        if not node:
            raise RepositoryError("createDiscussion returned no discussion")

        if ticket.labels:
            self._add_labels(node["id"], [label_ids[name] for name in ticket.labels])

        created = self._to_ticket(ticket.owner, ticket.repository, node)
        created.labels = list(ticket.labels)
        created.last_issue_url = ticket.last_issue_url
        logger.info("Created discussion %s", created.url)
        return created

    def _add_labels(self, labelable_id: str, label_ids: list[str]) -> None:
        mutation = """
        mutation($labelableId: ID!, $labelIds: [ID!]!) {
            addLabelsToLabelable(input: { labelableId: $labelableId, labelIds: $labelIds }) {
                clientMutationId
            }
        }
        """
        self._graphql(mutation, {"labelableId": labelable_id, "labelIds": label_ids})

    def close_by_url(self, url: str) -> Ticket:
        """Close a discussion by its HTML URL.

        Raises:
            TicketNotFoundError: If the discussion doesn't exist
            RepositoryError: If the URL is invalid or the mutation fails
        """
        ref = self._discussion_ref(url)
        logger.info("Closing discussion %s", url)
        node = self._fetch_discussion(ref)

        mutation = """
        mutation($discussionId: ID!) {
            closeDiscussion(input: { discussionId: $discussionId }) {
                discussion {
                    id
                }
            }
        }
        """
        self._graphql(mutation, {"discussionId": node["id"]})
        logger.info("Closed discussion %s", url)
        return self._to_ticket(ref.owner, ref.repository, node)
