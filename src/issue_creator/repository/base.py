"""Interface shared by the issue and discussion repositories."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from issue_creator.repository.models import Ticket


class TicketRepository(Protocol):
    """Storage for one kind of ticket."""

    def find_by_url(self, url: str) -> Ticket:
        """Fetch the ticket at a URL."""
        ...

    def find_last_issue_by_label(self, template: Ticket) -> Ticket:
        """Fetch the newest ticket, other than the template, carrying its labels."""
        ...

    def create(self, ticket: Ticket) -> Ticket:
        """Create a ticket and return it as stored."""
        ...

    def close_by_url(self, url: str) -> Ticket:
        """Close the ticket at a URL."""
        ...
