"""Unit tests for the release_tagger CLI (main group, extract and run commands)."""

import json
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from release_tagger.exceptions import SourceRetrievalError
from release_tagger.main import cli
from release_tagger.models.domain import (
    CommitRecord,
    EventKind,
    RunResult,
    SelectionMode,
    TagApplication,
    TagOutcome,
    TagState,
    TaskReference,
)
from release_tagger.providers.base import SourceProvider, TaskTrackerProvider

RUNNER_VARIABLES = (
    "GITHUB_TOKEN",
    "GITHUB_REPOSITORY",
    "GITHUB_API_URL",
    "GITHUB_EVENT_NAME",
    "GITHUB_EVENT_PATH",
    "GITHUB_REF",
    "INPUT_GITHUB-TOKEN",
    "INPUT_CLICKUP-API-KEY",
    "INPUT_TAG-PREFIX",
    "INPUT_INCLUDE-PREVIOUS-RELEASE",
    "INPUT_RELEASE-NAME",
    "RELEASE_TAGGER_GITHUB_TOKEN",
    "RELEASE_TAGGER_CLICKUP_API_KEY",
    "RELEASE_TAGGER_LOG_LEVEL",
)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Hide any GitHub Actions variables of the machine running the tests."""
    for name in RUNNER_VARIABLES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def mock_configure_logging():
    """Keep the CLI group from reconfiguring structlog globally."""
    with patch("release_tagger.main.configure_logging") as mock_configure:
        yield mock_configure


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def release_event(tmp_path):
    """Write a 'release: published' payload and return its path."""
    path = tmp_path / "event.json"
    path.write_text(
        json.dumps(
            {
                "action": "published",
                "release": {"tag_name": "v1.2.0", "name": "v1.2.0"},
                "repository": {"name": "api", "owner": {"login": "acme"}},
            }
        )
    )
    return str(path)


@pytest.fixture
def release_args(release_event):
    """Arguments of a typical release run."""
    return [
        "run",
        "--github-token",
        "ghp_test",
        "--clickup-api-key",
        "pk_test",
        "--tag-prefix",
        "released-",
        "--event-name",
        "release",
        "--event-path",
        release_event,
        "--ref",
        "refs/tags/v1.2.0",
    ]


# =============================================================================
# Group and extract command
# =============================================================================


class TestCliGroup:
    """Tests for the CLI group options."""

    def test_help(self, cli_runner):
        """Should list the commands."""
        result = cli_runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "run" in result.output
        assert "extract" in result.output

    def test_log_options_configure_logging(self, cli_runner, mock_configure_logging):
        """Should pass level and format to configure_logging."""
        result = cli_runner.invoke(cli, ["--log-level", "debug", "--log-format", "console", "extract", "x"])

        assert result.exit_code == 0
        mock_configure_logging.assert_called_once_with("DEBUG", json_output=False)


class TestExtractCommand:
    """Tests for the extract command."""

    @staticmethod
    def printed_references(output: str) -> list[str]:
        # Unconfigured structlog writes debug events to the same stream
        return [line for line in output.splitlines() if line.startswith("CU-")]

    def test_prints_references(self, cli_runner):
        """Should print one reference per line in order."""
        result = cli_runner.invoke(cli, ["extract", "feature/CU-8a7b2 fixes #9c1d and cu_8a7b2"])

        assert result.exit_code == 0
        assert self.printed_references(result.output) == ["CU-8a7b2", "CU-8a7b2", "CU-9c1d"]

    def test_unique(self, cli_runner):
        """Should drop repeats with --unique."""
        result = cli_runner.invoke(cli, ["extract", "--unique", "CU-1 CU-1 #2"])

        assert self.printed_references(result.output) == ["CU-1", "CU-2"]

    def test_no_references(self, cli_runner):
        """Should print nothing for text without references."""
        result = cli_runner.invoke(cli, ["extract", "chore: bump deps"])

        assert result.exit_code == 0
        assert self.printed_references(result.output) == []


# =============================================================================
# Run command: configuration and summary
# =============================================================================


class TestRunCommand:
    """Tests for the run command with the release pipeline mocked out."""

    def test_release_run_summary(self, cli_runner, release_args):
        """Should build the context from the event and print a summary."""
        refs = [TaskReference("CU-1"), TaskReference("CU-2")]
        run_result = RunResult(
            references=refs,
            tagged_count=2,
            mode=SelectionMode.RELEASE_SINGLE,
            tag="released-v1.2.0",
            outcomes=[TagOutcome(ref, state=TagState.DONE) for ref in refs],
        )

        with patch("release_tagger.cli.run._run_release", new=AsyncMock(return_value=run_result)) as mock_run:
            result = cli_runner.invoke(cli, release_args)

        assert result.exit_code == 0, result.output
        assert "Found 2 unique ClickUp task references: CU-1, CU-2" in result.output
        assert 'Tagged 2 of 2 ClickUp tasks with "released-v1.2.0".' in result.output

        settings, context, owner, repo, dry_run = mock_run.await_args.args
        assert settings.tag_prefix == "released-"
        assert context.event_kind == EventKind.RELEASE
        assert context.release_tag == "v1.2.0"
        assert context.release_label == "v1.2.0"
        assert (owner, repo) == ("acme", "api")
        assert dry_run is False

    def test_action_inputs_from_environment(self, cli_runner, release_event, monkeypatch):
        """Should read GitHub Actions inputs and runner variables."""
        monkeypatch.setenv("INPUT_GITHUB-TOKEN", "ghp_env")
        monkeypatch.setenv("INPUT_CLICKUP-API-KEY", "pk_env")
        monkeypatch.setenv("INPUT_INCLUDE-PREVIOUS-RELEASE", "true")
        monkeypatch.setenv("INPUT_RELEASE-NAME", "Autumn")
        monkeypatch.setenv("GITHUB_EVENT_NAME", "release")
        monkeypatch.setenv("GITHUB_EVENT_PATH", release_event)
        monkeypatch.setenv("GITHUB_REPOSITORY", "acme/other")

        with patch("release_tagger.cli.run._run_release", new=AsyncMock(return_value=RunResult())) as mock_run:
            result = cli_runner.invoke(cli, ["run"])

        assert result.exit_code == 0, result.output
        settings, context, owner, repo, _ = mock_run.await_args.args
        assert settings.github_token.get_secret_value() == "ghp_env"
        assert context.include_previous_release is True
        assert context.release_label == "Autumn"
        assert (owner, repo) == ("acme", "other")

    def test_nothing_to_do(self, cli_runner, release_args):
        """Should report when no references were found."""
        with patch("release_tagger.cli.run._run_release", new=AsyncMock(return_value=RunResult())):
            result = cli_runner.invoke(cli, release_args)

        assert result.exit_code == 0
        assert "Nothing to do" in result.output

    def test_dry_run_without_clickup_key(self, cli_runner):
        """Should allow dry runs without a ClickUp key."""
        run_result = RunResult(references=[TaskReference("CU-1")], tag="main", dry_run=True)

        with patch("release_tagger.cli.run._run_release", new=AsyncMock(return_value=run_result)) as mock_run:
            result = cli_runner.invoke(
                cli,
                [
                    "run",
                    "--github-token",
                    "ghp_test",
                    "--repository",
                    "acme/api",
                    "--event-name",
                    "push",
                    "--ref",
                    "refs/heads/main",
                    "--dry-run",
                ],
            )

        assert result.exit_code == 0, result.output
        assert 'Dry run: would tag 1 tasks with "main".' in result.output
        assert mock_run.await_args.args[4] is True

    def test_tag_failures_reported(self, cli_runner, release_args):
        """Should list failed references but still exit 0."""
        refs = [TaskReference("CU-1"), TaskReference("CU-2")]
        run_result = RunResult(
            references=refs,
            tagged_count=1,
            tag="released-v1.2.0",
            outcomes=[
                TagOutcome(refs[0], state=TagState.DONE),
                TagOutcome(refs[1], state=TagState.TAG_FAILED, error="Failed to add tag (HTTP 403)"),
            ],
        )

        with patch("release_tagger.cli.run._run_release", new=AsyncMock(return_value=run_result)):
            result = cli_runner.invoke(cli, release_args)

        assert result.exit_code == 0
        assert "Tagged 1 of 2" in result.output
        assert "CU-2: tag_failed (Failed to add tag (HTTP 403))" in result.output


class TestRunCommandErrors:
    """Tests for configuration and runtime errors."""

    def test_missing_clickup_key(self, cli_runner, release_event):
        """Should exit 1 without a ClickUp key outside dry runs."""
        result = cli_runner.invoke(
            cli,
            ["run", "--github-token", "ghp_test", "--event-name", "release", "--event-path", release_event],
        )

        assert result.exit_code == 1
        assert "A ClickUp API key is required" in result.output

    def test_missing_github_token(self, cli_runner, release_event):
        """Should exit 1 without a GitHub token."""
        result = cli_runner.invoke(cli, ["run", "--event-path", release_event, "--dry-run"])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_unknown_repository(self, cli_runner):
        """Should exit 1 when neither option nor payload names the repository."""
        result = cli_runner.invoke(
            cli, ["run", "--github-token", "ghp_test", "--event-name", "push", "--ref", "refs/heads/main", "--dry-run"]
        )

        assert result.exit_code == 1
        assert "Repository unknown" in result.output

    def test_bad_event_payload(self, cli_runner, tmp_path):
        """Should exit 1 for a malformed payload file."""
        path = tmp_path / "event.json"
        path.write_text("not json")

        result = cli_runner.invoke(
            cli, ["run", "--github-token", "ghp_test", "--event-path", str(path), "--dry-run"]
        )

        assert result.exit_code == 1
        assert "Invalid JSON" in result.output

    def test_source_connect_failure(self, cli_runner, release_args):
        """Should exit 1 when GitHub cannot be reached at all."""
        error = SourceRetrievalError("Cannot open repository acme/api", status_code=401)

        with patch("release_tagger.cli.run._run_release", new=AsyncMock(side_effect=error)):
            result = cli_runner.invoke(cli, release_args)

        assert result.exit_code == 1
        assert "Error: Cannot open repository acme/api" in result.output

    def test_unexpected_error(self, cli_runner, release_args):
        """Should exit 1 and report unexpected exceptions."""
        with patch("release_tagger.cli.run._run_release", new=AsyncMock(side_effect=RuntimeError("boom"))):
            result = cli_runner.invoke(cli, release_args)

        assert result.exit_code == 1
        assert "Unexpected error: boom" in result.output


# =============================================================================
# Run command: provider wiring
# =============================================================================


class TestRunRelease:
    """Tests for provider construction and lifecycle."""

    def test_connects_runs_and_disconnects(self, cli_runner, release_args):
        """Should wire providers into the orchestrator and always disconnect."""
        source = AsyncMock(spec=SourceProvider)
        source.get_tag_commit.return_value = CommitRecord(sha="a" * 40, message="fix: CU-12 and #34")
        tracker = AsyncMock(spec=TaskTrackerProvider)
        tracker.add_tag.return_value = TagApplication.APPLIED

        with (
            patch("release_tagger.cli.run.GitHubRestProvider", return_value=source) as mock_github,
            patch("release_tagger.cli.run.ClickUpRestProvider", return_value=tracker) as mock_clickup,
        ):
            result = cli_runner.invoke(cli, release_args)

        assert result.exit_code == 0, result.output
        mock_github.assert_called_once_with(
            token="ghp_test", owner="acme", repo="api", base_url="https://api.github.com"
        )
        mock_clickup.assert_called_once_with(api_key="pk_test", base_url="https://api.clickup.com/api/v2")
        source.get_tag_commit.assert_awaited_once_with("v1.2.0")
        assert [c.args for c in tracker.add_tag.await_args_list] == [
            ("12", "released-v1.2.0"),
            ("34", "released-v1.2.0"),
        ]
        source.disconnect.assert_awaited_once()
        tracker.disconnect.assert_awaited_once()
        assert 'Tagged 2 of 2 ClickUp tasks with "released-v1.2.0".' in result.output

    def test_dry_run_never_builds_tracker(self, cli_runner, release_args):
        """Should not construct the ClickUp provider in dry runs."""
        source = AsyncMock(spec=SourceProvider)
        source.get_tag_commit.return_value = CommitRecord(sha="a" * 40, message="CU-1")

        with (
            patch("release_tagger.cli.run.GitHubRestProvider", return_value=source),
            patch("release_tagger.cli.run.ClickUpRestProvider") as mock_clickup,
        ):
            result = cli_runner.invoke(cli, [*release_args, "--dry-run"])

        assert result.exit_code == 0, result.output
        mock_clickup.assert_not_called()
        assert "Dry run: would tag 1 tasks" in result.output

    def test_disconnects_after_failure(self, cli_runner, release_args):
        """Should disconnect both providers when the run raises."""
        source = AsyncMock(spec=SourceProvider)
        source.get_tag_commit.return_value = CommitRecord(sha="a" * 40, message="CU-1")
        tracker = AsyncMock(spec=TaskTrackerProvider)
        tracker.add_tag.side_effect = RuntimeError("session lost")

        with (
            patch("release_tagger.cli.run.GitHubRestProvider", return_value=source),
            patch("release_tagger.cli.run.ClickUpRestProvider", return_value=tracker),
        ):
            result = cli_runner.invoke(cli, release_args)

        assert result.exit_code == 1
        source.disconnect.assert_awaited_once()
        tracker.disconnect.assert_awaited_once()
