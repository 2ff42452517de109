"""GitHub REST v3 + GraphQL client authenticated with a personal access token."""

import subprocess

import httpx

from copilot_work.errors import AssignmentError, CreationError, QueryError, ToolUnavailableError
from copilot_work.providers.base import IssueTrackerClient
from copilot_work.settings import CopilotWorkSettings

BASE_URL = "https://api.github.com"

_ASSIGNABLE = """
query Assignable($owner: String!, $name: String!, $number: Int!) {
  repository(owner: $owner, name: $name) {
    issue(number: $number) { id }
    suggestedActors(capabilities: [CAN_BE_ASSIGNED], first: 100) {
      nodes { login ... on Bot { id } ... on User { id } }
    }
  }
}
"""

_ADD_ASSIGNEES = """
mutation AddAssignees($assignableId: ID!, $assigneeIds: [ID!]!) {
  addAssigneesToAssignable(input: { assignableId: $assignableId, assigneeIds: $assigneeIds }) {
    assignable { ... on Issue { number } }
  }
}
"""


def _repo_from_git_remote() -> str | None:
    """Return owner/repo parsed from the origin remote, or None if it is not on github.com."""
    try:
        result = subprocess.run(["git", "remote", "get-url", "origin"], capture_output=True, text=True)
    except OSError:
        return None
    if result.returncode != 0 or not isinstance(result.stdout, str):
        return None
    cleaned = result.stdout.strip().removesuffix(".git")
    for prefix in ("git@github.com:", "https://github.com/", "http://github.com/", "ssh://git@github.com/"):
        if cleaned.startswith(prefix):
            path = cleaned[len(prefix) :]
            parts = path.split("/")
            if len(parts) == 2 and all(parts):
                return path
    return None


def _split_repo(repo: str) -> tuple[str, str]:
    owner, name = repo.split("/", 1)
    return owner, name


class GitHubApiClient(IssueTrackerClient):
    def __init__(self, settings: CopilotWorkSettings) -> None:
        if not settings.github_token:
            raise ToolUnavailableError("No GitHub token configured. Set COPILOT_WORK_GITHUB_TOKEN.")
        self._base_url = settings.github_api_url.rstrip("/") or BASE_URL
        self._headers = {
            "Authorization": f"Bearer {settings.github_token.get_secret_value()}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _request(self, method: str, path: str, body: dict | None = None) -> httpx.Response:
        try:
            response = httpx.request(
                method,
                f"{self._base_url}{path}",
                headers=self._headers,
                json=body,
                timeout=30,
            )
        except httpx.HTTPError as exc:
            raise ToolUnavailableError(f"Could not reach GitHub API: {exc}") from exc
        if response.status_code == 401:
            raise ToolUnavailableError("GitHub API returned 401. Update the token for the active profile.")
        return response

    def repository_exists(self, repo: str) -> bool:
        owner, name = _split_repo(repo)
        response = self._request("GET", f"/repos/{owner}/{name}")
        if response.status_code == 404:
            return False
        if response.is_error:
            raise QueryError(f"GitHub API returned {response.status_code} for {repo}")
        return True

    def create_issue(self, repo: str, title: str, body: str) -> str:
        owner, name = _split_repo(repo)
        response = self._request("POST", f"/repos/{owner}/{name}/issues", {"title": title, "body": body})
        if response.is_error:
            raise CreationError(f"GitHub API returned {response.status_code}. Raw output: {response.text}")
        node = response.json()
        url = node.get("html_url")
        if not url:
            raise CreationError(f"Issue created but URL not found in response. Raw output: {response.text}")
        return url

    def set_assignee(self, repo: str, issue_number: str, assignee: str) -> None:
        owner, name = _split_repo(repo)
        login = assignee.lstrip("@").lower()
        try:
            data = self.graphql(_ASSIGNABLE, {"owner": owner, "name": name, "number": int(issue_number)})
        except QueryError as exc:
            raise AssignmentError(str(exc)) from exc

        repository = data.get("repository") or {}
        issue = repository.get("issue")
        if not issue:
            raise AssignmentError(f"Issue #{issue_number} not found in {repo}")
        actors = repository.get("suggestedActors", {}).get("nodes", [])
        # Copilot shows up as a bot actor (login "Copilot"), not as a regular user
        actor_id = next((a["id"] for a in actors if a.get("id") and a["login"].lower() == login), None)
        if actor_id is None:
            raise AssignmentError(f"'{assignee}' cannot be assigned to issues in {repo}")

        try:
            self.graphql(_ADD_ASSIGNEES, {"assignableId": issue["id"], "assigneeIds": [actor_id]})
        except QueryError as exc:
            raise AssignmentError(str(exc)) from exc

    def current_repository(self) -> str | None:
        return _repo_from_git_remote()

    def graphql(self, query: str, variables: dict | None = None) -> dict:
        response = self._request("POST", "/graphql", {"query": query, "variables": variables or {}})
        if response.is_error:
            raise QueryError(f"GitHub GraphQL API returned {response.status_code}")
        data = response.json()
        if "errors" in data:
            raise QueryError(f"GitHub GraphQL error: {data['errors']}")
        return data["data"]

    def viewer_login(self) -> str:
        response = self._request("GET", "/user")
        if response.is_error:
            raise QueryError(f"GitHub API returned {response.status_code} for /user")
        return response.json()["login"]
