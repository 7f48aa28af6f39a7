"""Custom exceptions for the ticket repositories."""


class RepositoryError(Exception):
    """Base exception for ticket repository errors."""


class InvalidTicketURLError(RepositoryError):
    """URL does not address an issue or discussion."""


class TicketNotFoundError(RepositoryError):
    """Ticket with given URL or labels does not exist."""


class LastDiscussionNotFoundError(TicketNotFoundError):
    """No earlier discussion shares the template's labels."""
