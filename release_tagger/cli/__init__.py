"""CLI commands for the release tagger.

The CLI is built using Click with the entry point ``release-tagger``.

Key Commands:
    run (release_tagger.cli.run):
        Tag every ClickUp task referenced by a release or branch push.
        Reads GitHub Actions inputs and runner environment by default.

    extract (release_tagger.main):
        Print the task references found in a piece of text.

Usage Examples:
    Tag tasks from inside a workflow::

        $ release-tagger run

    Check what a commit message would match::

        $ release-tagger extract "fix: CU-8a7b2 login"
"""

from release_tagger.cli.run import run_command

__all__ = ["run_command"]
