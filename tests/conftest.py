"""Shared test fixtures."""

import pytest

from copilot_work.errors import AssignmentError, CreationError
from copilot_work.providers.base import IssueTrackerClient
from copilot_work.reporter import ProgressReporter


class RecordingReporter(ProgressReporter):
    def __init__(self) -> None:
        self.messages: list[str] = []
        self.warnings: list[str] = []

    def progress(self, message: str) -> None:
        self.messages.append(message)

    def warning(self, message: str) -> None:
        self.warnings.append(message)


class FakeTracker(IssueTrackerClient):
    """In-memory tracker that records every call in order."""

    def __init__(
        self,
        existing: set[str] | None = None,
        current: str | None = None,
        fail_create_on: int | None = None,
        fail_assign_on: int | None = None,
        url_template: str = "https://github.com/{repo}/issues/{number}",
    ) -> None:
        self.existing = existing if existing is not None else set()
        self.current = current
        self.fail_create_on = fail_create_on  # 1-based create attempt that fails
        self.fail_assign_on = fail_assign_on
        self.url_template = url_template
        self.calls: list[tuple] = []
        self.created: list[tuple[str, str, str]] = []
        self.assigned: list[tuple[str, str, str]] = []
        self.graphql_data: dict = {}
        self.login = "octocat"
        self._create_attempts = 0
        self._assign_attempts = 0

    def repository_exists(self, repo: str) -> bool:
        self.calls.append(("exists", repo))
        return repo in self.existing

    def create_issue(self, repo: str, title: str, body: str) -> str:
        self.calls.append(("create", repo, body))
        self._create_attempts += 1
        if self._create_attempts == self.fail_create_on:
            raise CreationError("gh issue create failed: boom")
        self.created.append((repo, title, body))
        return self.url_template.format(repo=repo, number=len(self.created))

    def set_assignee(self, repo: str, issue_number: str, assignee: str) -> None:
        self.calls.append(("assign", repo, issue_number))
        self._assign_attempts += 1
        if self._assign_attempts == self.fail_assign_on:
            raise AssignmentError("gh issue edit failed: nope")
        self.assigned.append((repo, issue_number, assignee))

    def current_repository(self) -> str | None:
        self.calls.append(("current",))
        return self.current

    def graphql(self, query: str, variables: dict | None = None) -> dict:
        self.calls.append(("graphql", variables))
        return self.graphql_data

    def viewer_login(self) -> str:
        self.calls.append(("viewer",))
        return self.login


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def tracker() -> FakeTracker:
    return FakeTracker(existing={"a/b", "c/d", "jdoss/quickvm"})
