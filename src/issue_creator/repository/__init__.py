"""Ticket repositories - GitHub issues and discussions."""

from issue_creator.repository.base import TicketRepository
from issue_creator.repository.discussions import DiscussionRepository
from issue_creator.repository.exceptions import (
    InvalidTicketURLError,
    LastDiscussionNotFoundError,
    RepositoryError,
    TicketNotFoundError,
)
from issue_creator.repository.issues import IssueRepository
from issue_creator.repository.models import Ticket, TicketKind
from issue_creator.repository.urls import TicketRef, parse_ticket_url

__all__ = [
    "DiscussionRepository",
    "InvalidTicketURLError",
    "IssueRepository",
    "LastDiscussionNotFoundError",
    "RepositoryError",
    "Ticket",
    "TicketKind",
    "TicketNotFoundError",
    "TicketRef",
    "TicketRepository",
    "parse_ticket_url",
]
