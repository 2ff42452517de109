"""GitHub client that shells out to the gh CLI and reuses its login session."""

import json
import re
import shutil
import subprocess

from copilot_work.errors import AssignmentError, CreationError, QueryError, ToolUnavailableError
from copilot_work.providers.base import IssueTrackerClient

ISSUE_URL_PATTERN = re.compile(r"https?://\S+/issues/\d+")

# gh prints these when the repository is missing or hidden from the session
REPO_NOT_FOUND_PATTERN = re.compile(r"Could not resolve to a Repository|HTTP 404")

_GH_MISSING = "The GitHub CLI '{gh}' is not installed or not in PATH. Please install it."


def gh_available(executable: str = "gh") -> bool:
    return shutil.which(executable) is not None


class GhCliClient(IssueTrackerClient):
    def __init__(self, executable: str = "gh") -> None:
        self._gh = executable

    def _run(self, *args: str) -> subprocess.CompletedProcess:
        if not gh_available(self._gh):
            raise ToolUnavailableError(_GH_MISSING.format(gh=self._gh))
        try:
            return subprocess.run([self._gh, *args], capture_output=True, text=True)
        except OSError as exc:
            raise ToolUnavailableError(f"Could not run '{self._gh}': {exc}") from exc

    def repository_exists(self, repo: str) -> bool:
        result = self._run("repo", "view", repo, "--json", "name")
        if result.returncode == 0:
            return True
        if REPO_NOT_FOUND_PATTERN.search(result.stderr):
            return False
        # Anything else (expired login, network) is not an answer about the repository
        raise ToolUnavailableError(f"gh repo view failed for {repo}: {result.stderr.strip()}")

    def create_issue(self, repo: str, title: str, body: str) -> str:
        result = self._run("issue", "create", "--repo", repo, "--title", title, "--body", body)
        if result.returncode != 0:
            raise CreationError(f"gh issue create failed: {result.stderr.strip() or result.stdout.strip()}")
        match = ISSUE_URL_PATTERN.search(result.stdout)
        if not match:
            raise CreationError(f"Issue created but URL not found in output. Raw output: {result.stdout.strip()}")
        return match.group(0)

    def set_assignee(self, repo: str, issue_number: str, assignee: str) -> None:
        result = self._run("issue", "edit", str(issue_number), "--repo", repo, "--add-assignee", assignee)
        if result.returncode != 0:
            raise AssignmentError(f"gh issue edit failed: {result.stderr.strip()}")

    def current_repository(self) -> str | None:
        if not gh_available(self._gh):
            return None
        try:
            result = subprocess.run([self._gh, "repo", "view", "--json", "owner,name"], capture_output=True, text=True)
        except OSError:
            return None
        if result.returncode != 0:
            return None
        try:
            info = json.loads(result.stdout)
            return f"{info['owner']['login']}/{info['name']}"
        except (ValueError, KeyError, TypeError):
            return None

    def graphql(self, query: str, variables: dict | None = None) -> dict:
        args = ["api", "graphql", "-f", f"query={query}"]
        for key, value in (variables or {}).items():
            if isinstance(value, (list, tuple)):
                for element in value:
                    args += ["-f", f"{key}[]={element}"]
                continue
            # -F converts ints/booleans to GraphQL types; -f always sends a string
            flag = "-F" if isinstance(value, (bool, int)) else "-f"
            if isinstance(value, bool):
                value = str(value).lower()
            args += [flag, f"{key}={value}"]
        result = self._run(*args)
        try:
            payload = json.loads(result.stdout) if result.stdout.strip() else {}
        except ValueError as exc:
            raise QueryError(f"gh api graphql returned invalid JSON: {exc}") from exc
        if payload.get("errors"):
            raise QueryError(f"GitHub GraphQL error: {payload['errors']}")
        if result.returncode != 0 or "data" not in payload:
            raise QueryError(f"gh api graphql failed: {result.stderr.strip()}")
        return payload["data"]

    def viewer_login(self) -> str:
        data = self.graphql("query { viewer { login } }")
        return data["viewer"]["login"]
