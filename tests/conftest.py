"""Shared pytest fixtures and configuration."""

from datetime import datetime, timedelta, timezone

import pytest

from issue_creator.repository import Ticket


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


# Shared fixtures


@pytest.fixture
def reference_time() -> datetime:
    """Reference time used for rendering (2024-01-20 09:30 JST)."""
    return datetime(2024, 1, 20, 9, 30, tzinfo=timezone(timedelta(hours=9)))


@pytest.fixture
def issue_template() -> Ticket:
    """Template issue for a weekly checklist."""
    return Ticket(
        owner="owner",
        repository="repo",
        title='Weekly {{ AddDateAndFormat("2006-01-02", 0) }}',
        body="Previous: {{ LastIssue.URL }}",
        labels=["weekly", "checklist"],
        url="https://github.com/owner/repo/issues/1",
    )


@pytest.fixture
def last_issue() -> Ticket:
    """Most recent issue of the weekly series."""
    return Ticket(
        owner="owner",
        repository="repo",
        title="Weekly 2024-01-13",
        body="Last week",
        labels=["weekly", "checklist"],
        url="https://github.com/owner/repo/issues/41",
    )
