"""IssueService - renders recurring tickets from a template and creates them."""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import asdict
from typing import TYPE_CHECKING

from issue_creator.logging import redact_tokens, tail_output
from issue_creator.repository.exceptions import LastDiscussionNotFoundError, RepositoryError
from issue_creator.repository.models import Ticket, TicketKind
from issue_creator.service.classifier import classify
from issue_creator.service.exceptions import (
    CloseError,
    CreationError,
    FetchError,
    GuardError,
    ValidationError,
)
from issue_creator.service.guard import BashScriptRunner
from issue_creator.service.renderer import TicketRenderer

if TYPE_CHECKING:
    from datetime import datetime

    from issue_creator.repository.base import TicketRepository
    from issue_creator.service.guard import ScriptRunner

logger = logging.getLogger("issue_creator.service")

# URL given to the prior ticket when a discussion series has none yet
LAST_ISSUE_NOT_FOUND = "Last Issue is not found"

ATTRIBUTION_FOOTER = " \n\n _Created from {template_url} by issue-creator_"


class IssueService:
    """Creates the next ticket of a recurring series.

    A run goes through these stages, stopping at the first failure:

    1. Classify the template URL as issue or discussion and pick a repository.
    2. Fetch the template and compile its title and body.
    3. Check that issue templates carry at least one label.
    4. Find the previous ticket with the template's labels.
    5. Render title and body.
    6. Run the guard script, if any.
    7. Create the ticket and optionally close the previous one.
    """

    def __init__(
        self,
        issue_repository: TicketRepository,
        discussion_repository: TicketRepository,
        current_time: datetime,
        close_last_issue: bool = False,
        check_before_create_issue: str | None = None,
        script_runner: ScriptRunner | None = None,
    ) -> None:
        """Initialize the IssueService.

        Args:
            issue_repository: Repository used for issue URLs.
            discussion_repository: Repository used for discussion URLs.
            current_time: Reference time templates are rendered against.
            close_last_issue: Close the previous ticket after creating the new one.
            check_before_create_issue: Guard script body; None or empty disables it.
            script_runner: Runner for the guard script. Defaults to bash.
        """
        self.issue_repository = issue_repository
        self.discussion_repository = discussion_repository
        self.current_time = current_time
        self.close_last_issue = close_last_issue
        self.check_before_create_issue = check_before_create_issue
        self.script_runner = script_runner if script_runner is not None else BashScriptRunner()

    def repository_for(self, kind: TicketKind) -> TicketRepository:
        """Get the repository serving a kind of ticket."""
        if kind is TicketKind.DISCUSSION:
            return self.discussion_repository
        return self.issue_repository

    def render(self, template_url: str) -> Ticket:
        """Render the next ticket without saving it.

        Args:
            template_url: URL of the template issue or discussion.

        Returns:
            The rendered, not yet created ticket.
        """
        kind = classify(template_url)
        return self._render(template_url, kind, self.repository_for(kind))

    def create(self, template_url: str) -> Ticket:
        """Render and create the next ticket.

        Args:
            template_url: URL of the template issue or discussion.

        Returns:
            The ticket as created by the repository.
        """
        kind = classify(template_url)
        repository = self.repository_for(kind)

        ticket = self._render(template_url, kind, repository)

        if self.check_before_create_issue:
            self._run_guard(self.check_before_create_issue)

        try:
            created = repository.create(ticket)
        except RepositoryError as e:
            raise CreationError(f"Failed to create {kind.noun}: {e}") from e
        logger.info("Created %s", created.url)

        if not self.close_last_issue:
            return created

        if ticket.last_issue_url == LAST_ISSUE_NOT_FOUND:
            logger.warning("No previous %s to close", kind.noun)
            return created

        try:
            repository.close_by_url(ticket.last_issue_url)
        except RepositoryError as e:
            raise CloseError(f"Failed to close {ticket.last_issue_url}: {e}") from e
        logger.info("Closed %s", ticket.last_issue_url)

        return created

    def _render(self, template_url: str, kind: TicketKind, repository: TicketRepository) -> Ticket:
        logger.debug("Template URL: %s (%s)", template_url, kind.value)
        try:
            template = repository.find_by_url(template_url)
        except RepositoryError as e:
            raise FetchError(f"Failed to fetch template {template_url}: {e}") from e

        logger.debug("Template title: %s", template.title)
        logger.debug("Template body: %s", template.body)

        renderer = TicketRenderer(self.current_time)
        title_template = renderer.compile("title", template.title)
        body_template = renderer.compile("body", template.body)

        if kind is TicketKind.ISSUE and not template.labels:
            raise ValidationError("Requires at least one label")

        last_issue = self._find_last_issue(kind, repository, template)

        title = renderer.render("title", title_template, last_issue)
        body = renderer.render("body", body_template, last_issue)

        if last_issue.url is None:
            raise ValidationError("Invalid last issue passed (empty URL)")

        result = Ticket(
            owner=template.owner,
            repository=template.repository,
            title=title,
            body=body + ATTRIBUTION_FOOTER.format(template_url=template_url),
            labels=list(template.labels),
            last_issue_url=last_issue.url,
            category_id=template.category_id,
        )
        logger.debug("Rendered ticket: %s", json.dumps(asdict(result), ensure_ascii=False))
        return result

    def _find_last_issue(
        self, kind: TicketKind, repository: TicketRepository, template: Ticket
    ) -> Ticket:
        try:
            return repository.find_last_issue_by_label(template)
        except LastDiscussionNotFoundError as e:
            if kind is not TicketKind.DISCUSSION:
                raise FetchError(f"Failed to get last issue: {e}") from e
            logger.info("No previous discussion found, using placeholder")
            return Ticket(
                owner=template.owner,
                repository=template.repository,
                url=LAST_ISSUE_NOT_FOUND,
            )
        except RepositoryError as e:
            raise FetchError(f"Failed to get last issue: {e}") from e

    def _run_guard(self, script: str) -> None:
        logger.info("Running check before creating ticket")
        try:
            result = self.script_runner.run(script)
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.error("Failed to exec check before create issue: %s", e)
            raise GuardError(f"Failed to run check script: {e}") from e

        if not result.success:
            logger.error(
                "Check before create issue failed (exit %d): %s",
                result.returncode,
                tail_output(redact_tokens(result.output)),
            )
            raise GuardError(f"Check script exited with code {result.returncode}")
        logger.debug("Check passed: %s", tail_output(redact_tokens(result.output)))
