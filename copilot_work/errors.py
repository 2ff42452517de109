"""Exception hierarchy. Every failure here becomes `Error: ...` and exit 1 in the CLI."""


class CopilotWorkError(RuntimeError):
    """Base class for all expected copilot-work failures."""


# ---------------------------------------------------------------------------
# Input / validation (raised before any issue is created)
# ---------------------------------------------------------------------------


class FormatError(CopilotWorkError):
    def __init__(self, repo: str) -> None:
        super().__init__(f"Repository '{repo}' is not in the format owner/repo.")
        self.repo = repo


class NotFoundError(CopilotWorkError):
    def __init__(self, repo: str) -> None:
        super().__init__(f"Repository '{repo}' does not exist.")
        self.repo = repo


class NoRepositoryError(CopilotWorkError):
    def __init__(self, detail: str | None = None) -> None:
        message = (
            "Not in a GitHub repository directory. Please specify repositories "
            "(owner/repo format) or run in a git repo directory."
        )
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class MissingInputError(CopilotWorkError):
    pass


class DocumentNotFoundError(CopilotWorkError, FileNotFoundError):
    def __init__(self, path: object) -> None:
        super().__init__(f"File '{path}' does not exist.")
        self.path = path


class DocumentReadError(CopilotWorkError):
    pass


# ---------------------------------------------------------------------------
# External tracker (gh CLI / GitHub API)
# ---------------------------------------------------------------------------


class TrackerError(CopilotWorkError):
    """Failure reported by an IssueTrackerClient implementation."""


class ToolUnavailableError(TrackerError):
    pass


class CreationError(TrackerError):
    pass


class AssignmentError(TrackerError):
    pass


class QueryError(TrackerError):
    pass


# ---------------------------------------------------------------------------
# Fan-out failures carry the URLs created before the abort
# ---------------------------------------------------------------------------


class DispatchError(CopilotWorkError):
    def __init__(self, message: str, created: list[str]) -> None:
        super().__init__(message)
        self.created = list(created)


class IssueCreationError(DispatchError):
    def __init__(self, repo: str, body: str, cause: Exception, created: list[str]) -> None:
        super().__init__(f"Failed to create issue in {repo} for '{body}': {cause}", created)
        self.repo = repo
        self.body = body
        self.cause = cause


class IssueAssignmentError(DispatchError):
    def __init__(self, repo: str, issue_number: str, cause: Exception, created: list[str]) -> None:
        super().__init__(f"Failed to assign issue #{issue_number} in {repo}: {cause}", created)
        self.repo = repo
        self.issue_number = issue_number
        self.cause = cause
