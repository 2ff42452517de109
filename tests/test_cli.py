"""Smoke tests for all CLI commands using typer CliRunner."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import tomlkit
from typer.testing import CliRunner

import copilot_work.settings as settings_module
from copilot_work.errors import CreationError
from copilot_work.main import app, get_client, start_app
from copilot_work.providers.gh_cli import GhCliClient
from copilot_work.providers.github import GitHubApiClient
from copilot_work.settings import CopilotWorkSettings
from tests.conftest import FakeTracker

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    config_path = tmp_path / "config.toml"
    monkeypatch.setattr(settings_module, "CONFIG_PATH", config_path)
    for var in ("COPILOT_WORK_DEFAULT_PROFILE", "COPILOT_WORK_GITHUB_AUTH", "COPILOT_WORK_GITHUB_TOKEN"):
        monkeypatch.delenv(var, raising=False)
    settings_module._load_toml.cache_clear()
    yield config_path
    settings_module._load_toml.cache_clear()


@pytest.fixture
def tracker() -> FakeTracker:
    return FakeTracker(existing={"a/b", "c/d"})


@pytest.fixture
def no_browser():
    with patch("copilot_work.dispatch.typer.launch") as launch:
        yield launch


class TestGetClient:
    def test_gh_cli_is_default(self) -> None:
        assert isinstance(get_client(CopilotWorkSettings()), GhCliClient)

    def test_token_uses_api_client(self) -> None:
        settings = CopilotWorkSettings(github_auth="token", github_token="ghp_x")  # type: ignore[arg-type]
        assert isinstance(get_client(settings), GitHubApiClient)


class TestStart:
    def test_prints_numbered_urls(self, tracker: FakeTracker) -> None:
        with patch("copilot_work.main.get_client", return_value=tracker):
            result = runner.invoke(app, ["start", "Fix the bug", "a/b", "c/d"])
        assert result.exit_code == 0, result.output
        assert "Created issues:" in result.output
        assert "1. https://github.com/a/b/issues/1" in result.output
        assert "2. https://github.com/c/d/issues/2" in result.output

    def test_repeatable_flags(self, tracker: FakeTracker) -> None:
        with patch("copilot_work.main.get_client", return_value=tracker):
            result = runner.invoke(app, ["start", "-r", "a/b", "-r", "c/d", "-w", "x", "--work", "y"])
        assert result.exit_code == 0, result.output
        assert len(tracker.created) == 4

    def test_assign_flag(self, tracker: FakeTracker) -> None:
        with patch("copilot_work.main.get_client", return_value=tracker):
            result = runner.invoke(app, ["start", "Fix", "a/b", "--assign-copilot"])
        assert result.exit_code == 0, result.output
        assert tracker.assigned == [("a/b", "1", "@copilot")]

    def test_show_opens_browser(self, tracker: FakeTracker, no_browser: MagicMock) -> None:
        with patch("copilot_work.main.get_client", return_value=tracker):
            result = runner.invoke(app, ["start", "Fix", "a/b", "-s"])
        assert result.exit_code == 0, result.output
        no_browser.assert_called_once_with("https://github.com/a/b/issues/1")

    def test_file_option(self, tracker: FakeTracker, tmp_path: Path) -> None:
        doc = tmp_path / "issues.md"
        doc.write_text("one\n---\ntwo\n")
        with patch("copilot_work.main.get_client", return_value=tracker):
            result = runner.invoke(app, ["start", "-f", str(doc), "-r", "a/b"])
        assert result.exit_code == 0, result.output
        assert [body for _, _, body in tracker.created] == ["one", "two"]

    def test_format_error_exits_1(self, tracker: FakeTracker) -> None:
        with patch("copilot_work.main.get_client", return_value=tracker):
            result = runner.invoke(app, ["start", "not-a-repo"])
        assert result.exit_code == 1
        assert "Error: Repository 'not-a-repo' is not in the format owner/repo." in result.output
        assert tracker.created == []

    def test_no_input_exits_1(self, tracker: FakeTracker) -> None:
        with patch("copilot_work.main.get_client", return_value=tracker):
            result = runner.invoke(app, ["start", "--show"])
        assert result.exit_code == 1
        assert "Error: You must provide" in result.output

    def test_partial_results_printed_on_failure(self) -> None:
        tracker = FakeTracker(existing={"a/b", "c/d"}, fail_create_on=2)
        with patch("copilot_work.main.get_client", return_value=tracker):
            result = runner.invoke(app, ["start", "x", "y", "a/b", "c/d"])
        assert result.exit_code == 1
        assert "1. https://github.com/a/b/issues/1" in result.output
        assert "Error: Failed to create issue in a/b for 'y'" in result.output
        assert "Traceback" not in result.output

    def test_multiline_tool_output_is_one_error_line(self, tracker: FakeTracker) -> None:
        tracker.create_issue = MagicMock(  # type: ignore[method-assign]
            side_effect=CreationError("Issue created but URL not found in output. Raw output: line one\nline two")
        )
        with patch("copilot_work.main.get_client", return_value=tracker):
            result = runner.invoke(app, ["start", "Fix", "a/b"])
        assert result.exit_code == 1
        error_lines = [line for line in result.output.splitlines() if line.startswith("Error:")]
        assert error_lines == [
            "Error: Failed to create issue in a/b for 'Fix': "
            "Issue created but URL not found in output. Raw output: line one line two"
        ]
        assert "line two" not in result.output.replace(error_lines[0], "")

    def test_custom_title_from_settings(self, tracker: FakeTracker, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COPILOT_WORK_ISSUE_TITLE", "Agent task")
        with patch("copilot_work.main.get_client", return_value=tracker):
            result = runner.invoke(app, ["start", "Fix", "a/b"])
        assert result.exit_code == 0, result.output
        assert tracker.created == [("a/b", "Agent task", "Fix")]


class TestStartCopilotWork:
    def test_single_command_app(self, tracker: FakeTracker) -> None:
        with patch("copilot_work.main.get_client", return_value=tracker):
            result = runner.invoke(start_app, ["Add login feature", "a/b"])
        assert result.exit_code == 0, result.output
        assert tracker.created == [("a/b", "Copilot Request", "Add login feature")]


class TestFindPrs:
    def test_renders_table(self) -> None:
        tracker = FakeTracker()
        tracker.graphql_data = {
            "repositoryOwner": {
                "repositories": {
                    "nodes": [
                        {
                            "nameWithOwner": "octocat/alpha",
                            "pullRequests": {
                                "nodes": [
                                    {
                                        "number": 12,
                                        "title": "Add login",
                                        "url": "https://github.com/octocat/alpha/pull/12",
                                        "state": "OPEN",
                                        "isDraft": True,
                                        "updatedAt": "2026-01-01T00:00:00Z",
                                        "author": {"login": "Copilot"},
                                        "assignees": {"nodes": [{"login": "octocat"}]},
                                    }
                                ]
                            },
                        }
                    ]
                }
            }
        }
        with patch("copilot_work.main.get_client", return_value=tracker):
            result = runner.invoke(
                app, ["find-prs", "octocat", "--assignee", "octocat", "-n", "5"], env={"COLUMNS": "200"}
            )
        assert result.exit_code == 0, result.output
        assert "octocat/alpha" in result.output
        assert "Add login" in result.output
        _, variables = tracker.calls[-1]
        assert variables["repoCount"] == 5

    def test_no_results(self) -> None:
        tracker = FakeTracker()
        tracker.graphql_data = {"repositoryOwner": {"repositories": {"nodes": []}}}
        with patch("copilot_work.main.get_client", return_value=tracker):
            result = runner.invoke(app, ["find-prs", "octocat", "-u", "octocat"])
        assert result.exit_code == 0, result.output
        assert "No assigned pull requests found" in result.output

    def test_count_defaults_to_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COPILOT_WORK_PR_REPO_COUNT", "3")
        tracker = FakeTracker()
        tracker.graphql_data = {"repositoryOwner": {"repositories": {"nodes": []}}}
        with patch("copilot_work.main.get_client", return_value=tracker):
            result = runner.invoke(app, ["find-prs"])
        assert result.exit_code == 0, result.output
        _, variables = tracker.calls[-1]
        assert variables["repoCount"] == 3
        assert variables["owner"] == "octocat"

    def test_bad_state_exits(self) -> None:
        result = runner.invoke(app, ["find-prs", "--state", "draft"])
        assert result.exit_code == 1
        assert "Unknown state" in result.output

    def test_unknown_owner_exits(self) -> None:
        tracker = FakeTracker()
        tracker.graphql_data = {"repositoryOwner": None}
        with patch("copilot_work.main.get_client", return_value=tracker):
            result = runner.invoke(app, ["find-prs", "ghost", "-u", "ghost"])
        assert result.exit_code == 1
        assert "Error: GitHub user or organization 'ghost' not found" in result.output


class TestSetDefault:
    def test_creates_config_if_missing(self, isolated_config: Path) -> None:
        with patch("copilot_work.main.CONFIG_PATH", isolated_config):
            result = runner.invoke(app, ["set-default", "work"])
        assert result.exit_code == 0, result.output
        config = tomlkit.load(isolated_config.open())
        assert config["default_profile"] == "work"

    def test_validates_profile_exists(self, isolated_config: Path) -> None:
        doc = tomlkit.document()
        doc.add("work", {"github_auth": "gh-cli"})
        isolated_config.write_text(tomlkit.dumps(doc))
        with patch("copilot_work.main.CONFIG_PATH", isolated_config):
            result = runner.invoke(app, ["set-default", "nonexistent"])
        assert result.exit_code != 0


class TestConfigShow:
    def test_masks_token(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COPILOT_WORK_GITHUB_AUTH", "token")
        monkeypatch.setenv("COPILOT_WORK_GITHUB_TOKEN", "ghp_supersecret12345")
        result = runner.invoke(app, ["config-show"])
        assert result.exit_code == 0, result.output
        assert "ghp_supersecret12345" not in result.output
        assert "12345" in result.output
        assert "Copilot Request" in result.output
