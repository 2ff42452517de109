"""Abstract base class for issue tracker clients."""

from abc import ABC, abstractmethod


class IssueTrackerClient(ABC):
    @abstractmethod
    def repository_exists(self, repo: str) -> bool: ...

    @abstractmethod
    def create_issue(self, repo: str, title: str, body: str) -> str:
        """Create an issue and return its URL (…/issues/<number>)."""

    @abstractmethod
    def set_assignee(self, repo: str, issue_number: str, assignee: str) -> None: ...

    @abstractmethod
    def current_repository(self) -> str | None:
        """Return owner/name for the working directory, or None outside a GitHub checkout."""

    @abstractmethod
    def graphql(self, query: str, variables: dict | None = None) -> dict:
        """Run a GraphQL query and return its `data` object."""

    @abstractmethod
    def viewer_login(self) -> str: ...
