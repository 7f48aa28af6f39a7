"""Data models for ticket repositories."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TicketKind(str, Enum):
    """Kind of ticket, named after its URL path segment."""

    ISSUE = "issues"
    DISCUSSION = "discussions"

    @property
    def noun(self) -> str:
        return "discussion" if self is TicketKind.DISCUSSION else "issue"


@dataclass
class Ticket:
    """An issue or a discussion on GitHub.

    Attributes:
        owner: Repository owner.
        repository: Repository name.
        title: Title; holds template directives on a template ticket.
        body: Body; holds template directives on a template ticket.
        labels: Label names, order irrelevant.
        url: HTML URL, None until the ticket is created.
        last_issue_url: URL of the prior ticket a rendered ticket was built from.
        category_id: Discussion category node ID (discussions only).
    """

    owner: str
    repository: str
    title: str = ""
    body: str = ""
    labels: list[str] = field(default_factory=list)
    url: str | None = None
    last_issue_url: str = ""
    category_id: str | None = None

    def template_fields(self) -> dict[str, Any]:
        """Fields as seen from template directives (e.g. ``LastIssue.URL``)."""
        return {
            "Owner": self.owner,
            "Repository": self.repository,
            "Title": self.title,
            "Body": self.body,
            "URL": self.url,
            "Labels": list(self.labels),
        }
