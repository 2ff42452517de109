"""Report pull requests assigned to a user across an owner's recently updated repositories."""

from copilot_work.errors import QueryError
from copilot_work.models import PullRequest
from copilot_work.providers.base import IssueTrackerClient
from copilot_work.reporter import NullReporter, ProgressReporter

PR_STATES = {
    "open": ["OPEN"],
    "closed": ["CLOSED"],
    "merged": ["MERGED"],
    "all": ["OPEN", "CLOSED", "MERGED"],
}

_ASSIGNED_PRS = """
query AssignedPRs($owner: String!, $repoCount: Int!, $prCount: Int!, $states: [PullRequestState!]) {
  repositoryOwner(login: $owner) {
    repositories(first: $repoCount, orderBy: { field: UPDATED_AT, direction: DESC }) {
      nodes {
        nameWithOwner
        pullRequests(first: $prCount, states: $states, orderBy: { field: UPDATED_AT, direction: DESC }) {
          nodes {
            number
            title
            url
            state
            isDraft
            updatedAt
            author { login }
            assignees(first: 10) { nodes { login } }
          }
        }
      }
    }
  }
}
"""

# Per-repository page size; older PRs are not paged in.
PR_PAGE_SIZE = 50


def _normalize_login(login: str) -> str:
    return login.lstrip("@").lower()


def _pr_from_node(node: dict, repository: str) -> PullRequest:
    author = node.get("author") or {}
    return PullRequest(
        repository=repository,
        number=node["number"],
        title=node["title"],
        url=node["url"],
        state=node["state"],
        author=author.get("login"),
        assignees=[a["login"] for a in node.get("assignees", {}).get("nodes", [])],
        is_draft=node.get("isDraft", False),
        updated_at=node["updatedAt"],
    )


def find_assigned_prs(
    client: IssueTrackerClient,
    owner: str | None = None,
    assignee: str | None = None,
    repo_count: int = 10,
    state: str = "open",
    reporter: ProgressReporter | None = None,
) -> list[PullRequest]:
    """Return PRs assigned to `assignee` in the `repo_count` most recently updated repos of `owner`.

    `owner` and `assignee` default to the authenticated user. Results are
    sorted by last update, newest first.
    """
    reporter = reporter or NullReporter()
    if repo_count < 1:
        raise ValueError("repo_count must be at least 1")
    if state not in PR_STATES:
        raise ValueError(f"Unknown state '{state}'. Valid: {', '.join(PR_STATES)}")

    if owner is None or assignee is None:
        viewer = client.viewer_login()
        owner = owner or viewer
        assignee = assignee or viewer

    reporter.progress(f"Searching {repo_count} most recently updated repositories of {owner}")
    data = client.graphql(
        _ASSIGNED_PRS,
        {"owner": owner, "repoCount": repo_count, "prCount": PR_PAGE_SIZE, "states": PR_STATES[state]},
    )
    repository_owner = data.get("repositoryOwner")
    if not repository_owner:
        raise QueryError(f"GitHub user or organization '{owner}' not found")

    wanted = _normalize_login(assignee)
    result: list[PullRequest] = []
    for repo in repository_owner["repositories"]["nodes"]:
        for node in repo["pullRequests"]["nodes"]:
            logins = [_normalize_login(a["login"]) for a in node.get("assignees", {}).get("nodes", [])]
            if wanted in logins:
                result.append(_pr_from_node(node, repo["nameWithOwner"]))

    result.sort(key=lambda pr: pr.updated_at, reverse=True)
    reporter.progress(f"Found {len(result)} pull request(s) assigned to {assignee}")
    return result
