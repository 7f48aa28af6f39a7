"""Integration tests for guard scripts run through a real shell.

These tests require bash on PATH.
"""

import shutil
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from issue_creator.repository import Ticket
from issue_creator.service import BashScriptRunner, GuardError, IssueService

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(shutil.which("bash") is None, reason="bash required"),
]

TEMPLATE_URL = "https://github.com/owner/repo/issues/1"


@pytest.fixture
def issue_repository(issue_template: Ticket, last_issue: Ticket) -> MagicMock:
    repository = MagicMock()
    repository.find_by_url.return_value = issue_template
    repository.find_last_issue_by_label.return_value = last_issue
    repository.create.return_value = Ticket(
        owner="owner", repository="repo", url="https://github.com/owner/repo/issues/42"
    )
    return repository


def make_service(
    issue_repository: MagicMock, reference_time: datetime, script: str
) -> IssueService:
    return IssueService(
        issue_repository=issue_repository,
        discussion_repository=MagicMock(),
        current_time=reference_time,
        check_before_create_issue=script,
        script_runner=BashScriptRunner(),
    )


class TestBashScriptRunner:
    """Runs scripts with bash."""

    def test_success_output(self) -> None:
        result = BashScriptRunner().run("echo working day")

        assert result.success is True
        assert result.output == "working day\n"

    def test_failure_exit_code(self) -> None:
        result = BashScriptRunner().run("echo holiday >&2\nexit 3")

        assert result.returncode == 3
        assert "holiday" in result.output

    def test_bash_features(self) -> None:
        result = BashScriptRunner().run('days=(Sat Sun)\n[[ " ${days[*]} " == *" Sun "* ]]')

        assert result.success is True

    def test_missing_interpreter(self) -> None:
        with pytest.raises(FileNotFoundError):
            BashScriptRunner(interpreter="definitely-not-a-shell").run("true")


class TestIssueServiceWithGuard:
    """IssueService gated by real scripts."""

    def test_passing_script_creates(
        self, issue_repository: MagicMock, reference_time: datetime
    ) -> None:
        service = make_service(issue_repository, reference_time, "exit 0")

        created = service.create(TEMPLATE_URL)

        assert created.url == "https://github.com/owner/repo/issues/42"
        issue_repository.create.assert_called_once()

    def test_failing_script_blocks_creation(
        self, issue_repository: MagicMock, reference_time: datetime
    ) -> None:
        service = make_service(issue_repository, reference_time, "echo closed today\nexit 1")

        with pytest.raises(GuardError):
            service.create(TEMPLATE_URL)

        issue_repository.create.assert_not_called()
