"""Exceptions for the issue service.

Each exception names the stage of ticket creation that failed and wraps the
underlying cause.
"""


class IssueServiceError(Exception):
    """Base exception for issue service errors."""


class FetchError(IssueServiceError):
    """Template or prior ticket could not be fetched."""


class TemplateParseError(IssueServiceError):
    """Template title or body is not a valid template."""


class ValidationError(IssueServiceError):
    """Template or prior ticket violates a creation requirement."""


class RenderError(IssueServiceError):
    """Template failed while being rendered."""


class GuardError(IssueServiceError):
    """Pre-creation check script failed or could not be started."""


class CreationError(IssueServiceError):
    """Repository refused to create the rendered ticket."""


class CloseError(IssueServiceError):
    """Repository failed to close the prior ticket."""
