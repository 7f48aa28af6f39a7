"""Issue service - renders and creates recurring tickets."""

from issue_creator.service.classifier import classify, is_discussion
from issue_creator.service.exceptions import (
    CloseError,
    CreationError,
    FetchError,
    GuardError,
    IssueServiceError,
    RenderError,
    TemplateParseError,
    ValidationError,
)
from issue_creator.service.guard import BashScriptRunner, ScriptResult, ScriptRunner
from issue_creator.service.renderer import (
    TicketRenderer,
    add_date_and_format,
    add_days,
    format_time,
)
from issue_creator.service.service import LAST_ISSUE_NOT_FOUND, IssueService

__all__ = [
    "LAST_ISSUE_NOT_FOUND",
    "BashScriptRunner",
    "CloseError",
    "CreationError",
    "FetchError",
    "GuardError",
    "IssueService",
    "IssueServiceError",
    "RenderError",
    "ScriptResult",
    "ScriptRunner",
    "TemplateParseError",
    "TicketRenderer",
    "ValidationError",
    "add_date_and_format",
    "add_days",
    "classify",
    "format_time",
    "is_discussion",
]
