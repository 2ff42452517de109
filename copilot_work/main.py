"""copilot-work CLI: all commands."""

from pathlib import Path
from typing import Annotated, NoReturn

import tomlkit
import typer
from rich import print as rprint
from rich.markup import escape
from rich.table import Table

from copilot_work.dispatch import IssueDispatcher
from copilot_work.errors import CopilotWorkError, DispatchError
from copilot_work.models import WorkRequest
from copilot_work.prs import PR_STATES, find_assigned_prs
from copilot_work.providers.base import IssueTrackerClient
from copilot_work.providers.gh_cli import GhCliClient
from copilot_work.providers.github import GitHubApiClient
from copilot_work.reporter import RichReporter
from copilot_work.settings import CONFIG_PATH, CopilotWorkSettings, _list_profiles, get_settings

app = typer.Typer(help="copilot-work: batch-create GitHub issues for the Copilot coding agent", no_args_is_help=True)

# Single-command entry point: start-copilot-work "Fix the bug" owner/repo
start_app = typer.Typer(help="Create GitHub issues and assign them to Copilot", no_args_is_help=True)

ProfileOpt = Annotated[
    str | None,
    typer.Option("--profile", "-p", help="Profile name from ~/.config/copilot-work/config.toml"),
]


# ---------------------------------------------------------------------------
# Client factory
# ---------------------------------------------------------------------------


def get_client(settings: CopilotWorkSettings) -> IssueTrackerClient:
    match settings.github_auth:
        case "token":
            return GitHubApiClient(settings)
        case _:
            return GhCliClient()


def _fail(exc: CopilotWorkError) -> NoReturn:
    if isinstance(exc, DispatchError) and exc.created:
        rprint("\n[yellow]Issues created before the failure:[/yellow]")
        for index, url in enumerate(exc.created, start=1):
            typer.echo(f"{index}. {url}")
    # Tool output embedded in the message may span lines; the error stays on one
    message = " ".join(str(exc).split())
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(1)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command("start")
def start(
    items: Annotated[
        list[str] | None,
        typer.Argument(help="Repositories (owner/repo) and work descriptions, in any order"),
    ] = None,
    repo: Annotated[
        list[str] | None,
        typer.Option("--repo", "-r", help="GitHub repository in owner/repo format (repeatable)"),
    ] = None,
    work: Annotated[
        list[str] | None,
        typer.Option("--work", "-w", help="Work description / issue body (repeatable)"),
    ] = None,
    file: Annotated[
        Path | None,
        typer.Option("--file", "-f", help="Markdown file with issue bodies separated by --- lines"),
    ] = None,
    assign_copilot: Annotated[
        bool, typer.Option("--assign-copilot", "-a", help="Assign @copilot to created issues")
    ] = False,
    show: Annotated[bool, typer.Option("--show", "-s", help="Open created issues in browser")] = False,
    profile: ProfileOpt = None,
) -> None:
    """Create issues in every repository for every work item (or file section).

    Positional arguments are sorted automatically: owner/repo strings become
    repositories, everything else becomes issue bodies.
    """
    settings = get_settings(profile=profile)
    request = WorkRequest(
        repos=repo or [],
        work=work or [],
        items=items or [],
        file_path=file,
        assign_copilot=assign_copilot,
        show=show,
    )

    try:
        dispatcher = IssueDispatcher(
            get_client(settings),
            RichReporter(),
            title=settings.issue_title,
            assignee=settings.assignee,
        )
        results = dispatcher.run(request)
    except CopilotWorkError as exc:
        _fail(exc)

    if results:
        rprint("\n[bold]Created issues:[/bold]")
        for index, url in enumerate(results, start=1):
            typer.echo(f"{index}. {url}")


start_app.command()(start)


@app.command("find-prs")
def find_prs(
    owner: Annotated[
        str | None, typer.Argument(help="User or organization to search (default: you)")
    ] = None,
    assignee: Annotated[
        str | None, typer.Option("--assignee", "-u", help="Assignee login (default: you)")
    ] = None,
    count: Annotated[
        int | None,
        typer.Option("--count", "-n", min=1, help="Number of most recently updated repositories to search"),
    ] = None,
    state: Annotated[str, typer.Option("--state", help=f"PR state: {', '.join(PR_STATES)}")] = "open",
    profile: ProfileOpt = None,
) -> None:
    """List pull requests assigned to a user across an owner's recent repositories."""
    settings = get_settings(profile=profile)
    if state not in PR_STATES:
        typer.echo(f"Error: Unknown state '{state}'. Valid: {', '.join(PR_STATES)}", err=True)
        raise typer.Exit(1)

    try:
        prs = find_assigned_prs(
            get_client(settings),
            owner=owner,
            assignee=assignee,
            repo_count=count or settings.pr_repo_count,
            state=state,
            reporter=RichReporter(),
        )
    except CopilotWorkError as exc:
        _fail(exc)

    if not prs:
        rprint("[dim]No assigned pull requests found.[/dim]")
        return

    table = Table(title="Assigned Pull Requests")
    table.add_column("Repository", style="cyan")
    table.add_column("#", justify="right")
    table.add_column("State")
    table.add_column("Title")
    table.add_column("Updated", style="dim")
    table.add_column("URL", style="dim")

    for pr in prs:
        pr_state = f"{pr.state} (draft)" if pr.is_draft else pr.state
        table.add_row(pr.repository, str(pr.number), pr_state, escape(pr.title), pr.updated_at, pr.url)

    rprint(table)


@app.command("set-default")
def set_default(
    profile: Annotated[str, typer.Argument(help="Profile name to set as default")],
) -> None:
    """Set the default profile in ~/.config/copilot-work/config.toml."""
    if not CONFIG_PATH.exists():
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        doc = tomlkit.document()
        doc.add("default_profile", profile)
        CONFIG_PATH.write_text(tomlkit.dumps(doc))
        rprint(f'[green]✓[/green] Default profile set to "{profile}" in {CONFIG_PATH}')
        return

    doc = tomlkit.load(CONFIG_PATH.open())
    profiles = _list_profiles(doc)
    if profile not in profiles:
        typer.echo(f"Error: Profile '{profile}' not found in {CONFIG_PATH}. Available: {profiles or '(none)'}", err=True)
        raise typer.Exit(1)

    doc["default_profile"] = profile
    CONFIG_PATH.write_text(tomlkit.dumps(doc))
    rprint(f'[green]✓[/green] Default profile set to "{profile}" in {CONFIG_PATH}')


@app.command("config-show")
def config_show(profile: ProfileOpt = None) -> None:
    """Show resolved configuration (masks credentials)."""
    settings = get_settings(profile=profile)

    def mask(val: str | None, prefix: str = "") -> str:
        if val is None:
            return "[dim](not set)[/dim]"
        if len(val) <= 5:
            return "***"
        return f"{prefix}...{val[-5:]}"

    table = Table(title="copilot-work Configuration")
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("default_profile", settings.default_profile or "[dim](not set)[/dim]")
    table.add_row("github_auth", settings.github_auth)
    table.add_row(
        "github_token",
        mask(
            settings.github_token.get_secret_value() if settings.github_token else None,
            prefix="ghp_",
        ),
    )
    table.add_row("github_api_url", settings.github_api_url)
    table.add_row("issue_title", escape(settings.issue_title))
    table.add_row("assignee", settings.assignee)
    table.add_row("pr_repo_count", str(settings.pr_repo_count))

    rprint(table)
