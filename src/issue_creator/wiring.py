"""Assembles the issue service from configuration."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from issue_creator.repository import DiscussionRepository, IssueRepository
from issue_creator.service import IssueService
from issue_creator.service.renderer import local_now

if TYPE_CHECKING:
    from datetime import datetime

    from issue_creator.config import Config
    from issue_creator.service import ScriptRunner


def build_service(
    config: Config,
    current_time: datetime | None = None,
    script_runner: ScriptRunner | None = None,
) -> IssueService:
    """Create the repositories and the IssueService for one run.

    Args:
        config: Run configuration.
        current_time: Reference time for rendering. Defaults to now.
        script_runner: Guard script runner. Defaults to bash.
    """
    issue_repository = IssueRepository(
        token=config.github_access_token,
        base_url=config.github_api_url,
    )
    discussion_repository = DiscussionRepository(
        token=config.github_access_token,
        base_url=config.github_graphql_url,
    )
    return IssueService(
        issue_repository=issue_repository,
        discussion_repository=discussion_repository,
        current_time=current_time if current_time is not None else local_now(),
        close_last_issue=config.close_last_issue,
        check_before_create_issue=config.check_before_create_issue,
        script_runner=script_runner,
    )


@contextmanager
def open_service(config: Config, current_time: datetime | None = None) -> Iterator[IssueService]:
    """Yield an IssueService and close its HTTP clients afterwards."""
    service = build_service(config, current_time=current_time)
    try:
        yield service
    finally:
        for repository in (service.issue_repository, service.discussion_repository):
            close = getattr(repository, "close", None)
            if close is not None:
                close()
