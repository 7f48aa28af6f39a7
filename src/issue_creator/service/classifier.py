"""Decides whether a template URL addresses an issue or a discussion."""

from __future__ import annotations

import logging
from urllib.parse import urlsplit

from issue_creator.repository.models import TicketKind

logger = logging.getLogger("issue_creator.service.classifier")


def is_discussion(template_url: str) -> bool:
    """Return True if the URL path is ``/<owner>/<repository>/discussions/<number>``.

    Anything unparsable or of another shape is treated as an issue.
    """
    try:
        path = urlsplit(template_url).path
    except ValueError as e:
        logger.debug("Failed to parse URL %r: %s", template_url, e)
        return False

    segments = path.split("/")
    logger.debug("URL path: %s", path)
    # Expect: /:owner/:repository/[discussions|issues]/:number
    if len(segments) != 5:
        logger.debug("Unexpected path length %d for %s", len(segments), template_url)
        return False
    return segments[3] == "discussions"


def classify(template_url: str) -> TicketKind:
    """Map a template URL to the kind of ticket it addresses."""
    return TicketKind.DISCUSSION if is_discussion(template_url) else TicketKind.ISSUE
