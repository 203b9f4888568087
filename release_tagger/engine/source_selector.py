"""
Selection of the commits that belong to a run.

One of four modes is chosen up front from the release context and then
executed once:

1. BRANCH_PUSH: a push event; recent commits on the pushed branch.
2. RELEASE_WITH_DIFF: a release event with previous-release diffing
   requested and a preceding release found; commits between the two tags.
3. RELEASE_SINGLE: any other release event; the commit the tag points to.
4. FALLBACK: neither; recent commits on whatever ref was supplied.

A failed GitHub call during retrieval yields an empty commit list, never a
failed run.
"""

from dataclasses import dataclass, field
from typing import Any

import structlog

from release_tagger.exceptions import SourceRetrievalError
from release_tagger.models.domain import CommitRecord, EventKind, ReleaseContext, SelectionMode
from release_tagger.providers.base import SourceProvider

log = structlog.get_logger(__name__)

SAMPLE_COMMIT_COUNT = 5


def choose_mode(context: ReleaseContext, previous_tag: str | None = None) -> SelectionMode:
    """Pick the selection mode for a run.

    Branch pushes are ruled out first; only then are the release payload and
    the previous release considered. A release without a tag name falls back
    to the supplied ref.

    Args:
        context: Release context of the run
        previous_tag: Tag of the chronologically preceding release, if known

    Returns:
        The single mode to execute
    """
    if context.event_kind == EventKind.PUSH:
        return SelectionMode.BRANCH_PUSH
    if context.event_kind == EventKind.RELEASE and context.release_tag:
        if context.include_previous_release and previous_tag:
            return SelectionMode.RELEASE_WITH_DIFF
        return SelectionMode.RELEASE_SINGLE
    return SelectionMode.FALLBACK


def find_previous_tag(release_tags: list[str], current_tag: str) -> str | None:
    """Return the release that precedes current_tag in a newest-first listing.

    None when current_tag is not listed or is the oldest release listed.
    """
    try:
        index = release_tags.index(current_tag)
    except ValueError:
        return None
    if index + 1 >= len(release_tags):
        return None
    return release_tags[index + 1]


@dataclass
class CommitSelection:
    """Commits chosen for a run and how they were chosen."""

    mode: SelectionMode
    commits: list[CommitRecord] = field(default_factory=list)
    previous_tag: str | None = None


class CommitSourceSelector:
    """Collects the in-scope commits for a release context."""

    def __init__(
        self,
        source: SourceProvider,
        max_commits: int = 100,
        release_page_size: int = 100,
        logger: Any = None,
    ):
        """Initialize selector.

        Args:
            source: GitHub (or other) source provider
            max_commits: Commit limit for branch and fallback modes
            release_page_size: How many recent releases to scan for the previous one
            logger: Optional structlog logger; defaults to the module logger
        """
        self.source = source
        self.max_commits = max_commits
        self.release_page_size = release_page_size
        self.log = logger or log

    async def select(self, context: ReleaseContext) -> CommitSelection:
        """Choose the mode for context and fetch its commits."""
        previous_tag = None
        if context.event_kind == EventKind.RELEASE and context.include_previous_release and context.release_tag:
            previous_tag = await self.previous_release_tag(context.release_tag)

        mode = choose_mode(context, previous_tag)
        self.log.info(
            "selection_mode_chosen",
            mode=mode.value,
            ref=context.ref_name,
            release_tag=context.release_tag,
            previous_tag=previous_tag,
        )

        release_tag = context.release_tag
        if mode == SelectionMode.RELEASE_WITH_DIFF and previous_tag and release_tag:
            commits = await self._commits_between(previous_tag, release_tag)
        elif mode == SelectionMode.RELEASE_SINGLE and release_tag:
            commits = await self._commits_for_tag(release_tag)
        else:
            commits = await self._commits_on_ref(context.ref_name)

        self.log.info("commits_selected", mode=mode.value, count=len(commits))
        return CommitSelection(mode=mode, commits=commits, previous_tag=previous_tag)

    async def previous_release_tag(self, current_tag: str) -> str | None:
        """Look up the release published before current_tag.

        Failures are logged and reported as "no previous release".
        """
        try:
            release_tags = await self.source.list_release_tags(limit=self.release_page_size)
        except SourceRetrievalError as e:
            self.log.warning("previous_release_lookup_failed", tag=current_tag, error=e.message)
            return None

        previous_tag = find_previous_tag(release_tags, current_tag)
        if previous_tag is None:
            self.log.info("previous_release_not_found", tag=current_tag, releases_scanned=len(release_tags))
        return previous_tag

    async def _commits_between(self, base: str, head: str) -> list[CommitRecord]:
        try:
            return await self.source.compare_commits(base, head)
        except SourceRetrievalError as e:
            self.log.error("compare_commits_failed", base=base, head=head, error=e.message)
            return []

    async def _commits_for_tag(self, tag: str) -> list[CommitRecord]:
        try:
            return [await self.source.get_tag_commit(tag)]
        except SourceRetrievalError as e:
            self.log.error("tag_commit_lookup_failed", tag=tag, error=e.message)
            return []

    async def _commits_on_ref(self, ref: str) -> list[CommitRecord]:
        if not ref:
            self.log.error("commit_listing_skipped", reason="no ref name supplied")
            return []

        try:
            commits = await self.source.list_commits(ref, limit=self.max_commits)
        except SourceRetrievalError as e:
            self.log.error("list_commits_failed", ref=ref, error=e.message)
            return []

        self.log.info(
            "branch_commits_fetched",
            ref=ref,
            count=len(commits),
            sample=[commit.summary for commit in commits[:SAMPLE_COMMIT_COUNT]],
        )
        return commits
