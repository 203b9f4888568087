"""CLI command that tags ClickUp tasks for a release or branch push."""

import asyncio
import sys

import click
import structlog

from release_tagger.config.settings import TaggerSettings
from release_tagger.engine.event_context import (
    build_release_context,
    load_event_payload,
    repository_from_payload,
)
from release_tagger.engine.orchestrator import ReleaseTagOrchestrator
from release_tagger.exceptions import ConfigurationError, ReleaseTaggerError
from release_tagger.models.domain import ReleaseContext, RunResult
from release_tagger.providers.clickup_rest import ClickUpRestProvider
from release_tagger.providers.github_rest import GitHubRestProvider

log = structlog.get_logger(__name__)


@click.command(name="run")
@click.option(
    "--github-token",
    envvar=["INPUT_GITHUB-TOKEN", "GITHUB_TOKEN"],
    help="GitHub token for reading releases, commits and pull requests",
)
@click.option(
    "--clickup-api-key",
    envvar="INPUT_CLICKUP-API-KEY",
    help="ClickUp API token",
)
@click.option(
    "--tag-prefix",
    envvar="INPUT_TAG-PREFIX",
    help="Prefix prepended to the release label",
)
@click.option(
    "--include-previous-release",
    type=click.BOOL,
    default=None,
    envvar="INPUT_INCLUDE-PREVIOUS-RELEASE",
    help="Tag everything since the previous release (true/false)",
)
@click.option(
    "--release-name",
    envvar="INPUT_RELEASE-NAME",
    help="Label to use instead of the one derived from the event",
)
@click.option(
    "--repository",
    envvar="GITHUB_REPOSITORY",
    help="Repository as owner/name (defaults to the event payload)",
)
@click.option(
    "--github-api-url",
    envvar="GITHUB_API_URL",
    help="GitHub API base URL",
)
@click.option(
    "--event-name",
    envvar="GITHUB_EVENT_NAME",
    help="Triggering event name (push, release, ...)",
)
@click.option(
    "--event-path",
    envvar="GITHUB_EVENT_PATH",
    type=click.Path(dir_okay=False),
    help="Path to the event payload JSON",
)
@click.option(
    "--ref",
    envvar="GITHUB_REF",
    help="Full ref of the event (e.g. refs/heads/main)",
)
@click.option(
    "--config",
    type=click.Path(dir_okay=False),
    help="Optional YAML settings file",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Find task references without tagging anything",
)
def run_command(
    github_token: str | None,
    clickup_api_key: str | None,
    tag_prefix: str | None,
    include_previous_release: bool | None,
    release_name: str | None,
    repository: str | None,
    github_api_url: str | None,
    event_name: str | None,
    event_path: str | None,
    ref: str | None,
    config: str | None,
    dry_run: bool,
) -> None:
    """Tag every ClickUp task referenced by a release.

    Designed to run as a GitHub Actions step; every option falls back to the
    matching action input or runner environment variable.

    Examples:

        # Inside a workflow triggered by "release: published"
        release-tagger run

        # Locally, against a release payload saved from a webhook
        release-tagger run --event-name release --event-path event.json \\
            --repository acme/api --tag-prefix released- --dry-run
    """
    try:
        settings = TaggerSettings.load(
            config,
            github_token=github_token,
            clickup_api_key=clickup_api_key,
            tag_prefix=tag_prefix,
            include_previous_release=include_previous_release,
            release_name=release_name,
            repository=repository,
            github_api_url=github_api_url,
        )
        if settings.clickup_api_key is None and not dry_run:
            raise ConfigurationError("A ClickUp API key is required (use --clickup-api-key or --dry-run)")

        payload = load_event_payload(event_path)
        context = build_release_context(
            event_name,
            payload,
            ref,
            include_previous_release=settings.include_previous_release,
            release_name=settings.release_name,
        )
        owner, repo = _resolve_repository(settings, payload)

        result = asyncio.run(_run_release(settings, context, owner, repo, dry_run))
    except ReleaseTaggerError as e:
        click.echo(f"Error: {e.message}", err=True)
        log.debug("run_error", exc_info=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)
    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        log.error("run_unexpected", exc_info=True)
        sys.exit(1)

    _echo_summary(result)


def _resolve_repository(settings: TaggerSettings, payload: dict) -> tuple[str, str]:
    repository = settings.repository_parts or repository_from_payload(payload)
    if repository is None:
        raise ConfigurationError("Repository unknown: pass --repository owner/name or an event payload")
    return repository


async def _run_release(
    settings: TaggerSettings,
    context: ReleaseContext,
    owner: str,
    repo: str,
    dry_run: bool,
) -> RunResult:
    """Connect providers, run the orchestrator and always disconnect."""
    source = GitHubRestProvider(
        token=settings.github_token.get_secret_value(),
        owner=owner,
        repo=repo,
        base_url=settings.github_api_url,
    )
    tracker = None
    if not dry_run and settings.clickup_api_key is not None:
        tracker = ClickUpRestProvider(
            api_key=settings.clickup_api_key.get_secret_value(),
            base_url=settings.clickup_api_url,
        )

    await source.connect()
    try:
        if tracker is not None:
            await tracker.connect()

        orchestrator = ReleaseTagOrchestrator(
            source,
            tracker,
            tag_prefix=settings.tag_prefix,
            max_commits=settings.max_commits,
            release_page_size=settings.release_page_size,
            comment_template=settings.comment_template,
        )
        return await orchestrator.run(context, dry_run=dry_run)
    finally:
        if tracker is not None:
            await tracker.disconnect()
        await source.disconnect()


def _echo_summary(result: RunResult) -> None:
    if result.nothing_to_do:
        click.echo("Nothing to do: no ClickUp task references found.")
        return

    click.echo(
        f"Found {result.unique_count} unique ClickUp task references: "
        f"{', '.join(str(ref) for ref in result.references)}"
    )
    if result.dry_run:
        click.echo(f'Dry run: would tag {result.unique_count} tasks with "{result.tag}".')
        return

    click.echo(f'Tagged {result.tagged_count} of {result.unique_count} ClickUp tasks with "{result.tag}".')
    for outcome in result.outcomes:
        if outcome.error:
            click.echo(f"  {outcome.reference}: {outcome.state.value} ({outcome.error})", err=True)
