"""Repository validation and issue fan-out."""

import re
from collections.abc import Callable
from pathlib import Path

import typer

from copilot_work.classify import classify_inputs, is_repo_format
from copilot_work.errors import (
    DocumentNotFoundError,
    DocumentReadError,
    FormatError,
    IssueAssignmentError,
    IssueCreationError,
    MissingInputError,
    NoRepositoryError,
    NotFoundError,
    TrackerError,
)
from copilot_work.models import WorkRequest
from copilot_work.providers.base import IssueTrackerClient
from copilot_work.reporter import NullReporter, ProgressReporter

DEFAULT_TITLE = "Copilot Request"
DEFAULT_ASSIGNEE = "@copilot"

SECTION_SEPARATOR = re.compile(r"^---[ \t\r]*$", re.MULTILINE)
ISSUE_NUMBER_PATTERN = re.compile(r"/issues/(\d+)$")


# ---------------------------------------------------------------------------
# Document / URL helpers
# ---------------------------------------------------------------------------


def split_sections(text: str) -> list[str]:
    """Split on lines that are exactly `---` (trailing whitespace allowed); drop blank sections."""
    sections = (section.strip() for section in SECTION_SEPARATOR.split(text))
    return [section for section in sections if section]


def load_sections(path: Path) -> list[str]:
    if not path.is_file():
        raise DocumentNotFoundError(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentReadError(f"Could not read '{path}': {exc}") from exc
    return split_sections(text)


def extract_issue_number(url: str) -> str | None:
    """Return the trailing issue number of an issue URL as a string, or None."""
    match = ISSUE_NUMBER_PATTERN.search(url)
    return match.group(1) if match else None


def truncate(text: str, limit: int = 60) -> str:
    flat = " ".join(text.split())
    if len(flat) <= limit:
        return flat
    return flat[: limit - 3].rstrip() + "..."


# ---------------------------------------------------------------------------
# Repository resolution
# ---------------------------------------------------------------------------


def resolve_repositories(
    repositories: list[str],
    client: IssueTrackerClient,
    reporter: ProgressReporter | None = None,
) -> list[str]:
    """Return a non-empty list of repositories that are well-formed and exist.

    An empty list falls back to the repository of the working directory. The
    format of every repository is checked before any existence lookup is made.
    """
    reporter = reporter or NullReporter()
    repos = list(repositories)

    if not repos:
        reporter.progress("No repository specified, attempting to detect from current directory")
        try:
            detected = client.current_repository()
        except TrackerError as exc:
            raise NoRepositoryError(str(exc)) from exc
        if not detected:
            raise NoRepositoryError()
        reporter.progress(f"Repository detected: {detected}")
        repos = [detected]

    reporter.progress(f"Validating {len(repos)} repository(ies)")
    for repo in repos:
        if not is_repo_format(repo):
            raise FormatError(repo)

    for repo in repos:
        reporter.progress(f"Checking if repository {repo} exists")
        if not client.repository_exists(repo):
            raise NotFoundError(repo)
        reporter.progress(f"Repository {repo} located successfully")

    reporter.progress("All repositories validated successfully")
    return repos


# ---------------------------------------------------------------------------
# Fan-out
# ---------------------------------------------------------------------------


class IssueDispatcher:
    """Create one issue per (repository, item) pair, sequentially.

    Results are append-only. A failed creation or assignment aborts the
    remaining pairs; the URLs created so far travel on the raised
    DispatchError instead of being lost.
    """

    def __init__(
        self,
        client: IssueTrackerClient,
        reporter: ProgressReporter | None = None,
        title: str = DEFAULT_TITLE,
        assignee: str = DEFAULT_ASSIGNEE,
        open_url: Callable[[str], object] | None = None,
    ) -> None:
        self._client = client
        self._reporter = reporter or NullReporter()
        self._title = title
        self._assignee = assignee
        self._open_url = open_url or typer.launch

    def run(self, request: WorkRequest) -> list[str]:
        batch = classify_inputs(request.repos, request.work, request.items)

        if not batch.repositories and not batch.work_items and request.file_path is None:
            raise MissingInputError("You must provide either work items, repositories, or a file path.")

        if request.file_path is not None:
            self._reporter.progress(f"Reading content from file: {request.file_path}")
            items = load_sections(request.file_path)
            self._reporter.progress(f"Found {len(items)} section(s) in the file")
            label = "section"
        else:
            if not batch.work_items:
                raise MissingInputError("You must provide either work items or a file path with content.")
            items = batch.work_items
            label = "work item"

        repos = resolve_repositories(batch.repositories, self._client, self._reporter)

        self._reporter.progress(f"Processing {len(items)} {label}(s) across {len(repos)} repository(ies)")
        results = self.fan_out(repos, items, assign=request.assign_copilot)

        if request.show and results:
            self.open_all(results)

        self._reporter.progress(f"Completed processing all {label}s. Total issues created: {len(results)}")
        return results

    def fan_out(self, repos: list[str], items: list[str], assign: bool = False) -> list[str]:
        results: list[str] = []
        for repo in repos:
            for item in items:
                self._reporter.progress(f"Creating issue in {repo} with title: '{self._title}'")
                try:
                    url = self._client.create_issue(repo, self._title, item)
                except TrackerError as exc:
                    raise IssueCreationError(repo, truncate(item), exc, results) from exc
                self._reporter.progress(f"Issue created successfully: {url}")
                results.append(url)

                if assign:
                    self._assign(repo, url, results)
        return results

    def _assign(self, repo: str, url: str, results: list[str]) -> None:
        issue_number = extract_issue_number(url)
        if issue_number is None:
            self._reporter.warning(f"Could not read an issue number from {url}; skipping assignment")
            return
        self._reporter.progress(f"Assigning {self._assignee} to issue #{issue_number} in {repo}")
        try:
            self._client.set_assignee(repo, issue_number, self._assignee)
        except TrackerError as exc:
            raise IssueAssignmentError(repo, issue_number, exc, results) from exc
        self._reporter.progress(f"Code agent assigned to issue #{issue_number}")

    def open_all(self, urls: list[str]) -> None:
        self._reporter.progress(f"Opening {len(urls)} issue(s) in browser")
        for url in urls:
            try:
                self._open_url(url)
            except OSError as exc:
                self._reporter.warning(f"Failed to open browser: {exc}")
