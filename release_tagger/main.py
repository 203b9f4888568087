"""CLI entry point for the release tagger."""

import click

from release_tagger.cli.run import run_command
from release_tagger.engine.extractor import extract_task_references
from release_tagger.engine.tags import deduplicate_references
from release_tagger.utils.logging_config import configure_logging


@click.group()
@click.option(
    "--log-level",
    default="INFO",
    envvar="RELEASE_TAGGER_LOG_LEVEL",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Logging level",
)
@click.option(
    "--log-format",
    default="json",
    type=click.Choice(["json", "console"]),
    help="Log output format",
)
def cli(log_level: str, log_format: str) -> None:
    """release-tagger: propagate GitHub releases to ClickUp tasks."""
    configure_logging(log_level.upper(), json_output=log_format == "json")


@cli.command()
@click.argument("text")
@click.option("--unique", is_flag=True, help="Drop repeated references")
def extract(text: str, unique: bool) -> None:
    """Print the ClickUp task references found in TEXT.

    Example:

        release-tagger extract "feature/CU-8a7b2 fixes #9c1d"
    """
    references = extract_task_references(text)
    if unique:
        references = deduplicate_references(references)
    for reference in references:
        click.echo(str(reference))


cli.add_command(run_command)


if __name__ == "__main__":
    cli()
