"""
Release tagging pipeline.

Drives one run from a release context to a RunResult:

    select commits -> resolve merged PRs -> extract references from commit
    messages, PR titles and PR branch names -> deduplicate -> sanitize the
    release tag once -> tag and comment each unique reference.
"""

from typing import Any

import structlog

from release_tagger.engine.extractor import extract_task_references
from release_tagger.engine.pr_correlator import PullRequestCorrelator, strip_merge_markers
from release_tagger.engine.source_selector import CommitSourceSelector
from release_tagger.engine.tag_applier import DEFAULT_COMMENT_TEMPLATE, IdempotentTagApplier
from release_tagger.engine.tags import compose_release_tag, deduplicate_references, sanitize_tag_name
from release_tagger.models.domain import (
    CommitRecord,
    PullRequestRecord,
    ReleaseContext,
    RunResult,
    TaskReference,
)
from release_tagger.providers.base import SourceProvider, TaskTrackerProvider

log = structlog.get_logger(__name__)


class ReleaseTagOrchestrator:
    """Correlates a release with ClickUp tasks and tags them."""

    def __init__(
        self,
        source: SourceProvider,
        tracker: TaskTrackerProvider | None,
        tag_prefix: str = "",
        max_commits: int = 100,
        release_page_size: int = 100,
        comment_template: str = DEFAULT_COMMENT_TEMPLATE,
        logger: Any = None,
    ):
        """Initialize orchestrator.

        Args:
            source: Source of commits, releases and pull requests
            tracker: Task tracker to tag; may be None for dry runs only
            tag_prefix: Prepended to the release label before sanitizing
            max_commits: Commit limit for branch and fallback modes
            release_page_size: Releases scanned when looking for the previous one
            comment_template: Comment text template (``{release}`` placeholder)
            logger: Optional structlog logger shared by all components
        """
        self.log = logger or log
        self.tracker = tracker
        self.tag_prefix = tag_prefix
        self.selector = CommitSourceSelector(
            source,
            max_commits=max_commits,
            release_page_size=release_page_size,
            logger=self.log,
        )
        self.correlator = PullRequestCorrelator(source, logger=self.log)
        self.applier = (
            IdempotentTagApplier(tracker, comment_template=comment_template, logger=self.log)
            if tracker is not None
            else None
        )

    async def run(self, context: ReleaseContext, dry_run: bool = False) -> RunResult:
        """Execute one run.

        Args:
            context: Release context of the triggering event
            dry_run: Collect and report references without touching ClickUp

        Returns:
            RunResult with unique references and tagging counts
        """
        self.log.info(
            "release_processing_started",
            event_kind=context.event_kind.value,
            ref=context.ref_name,
            release_label=context.release_label,
        )

        selection = await self.selector.select(context)
        pull_requests = await self.correlator.correlate(selection.commits)
        references = deduplicate_references(self.extract_references(selection.commits, pull_requests))

        result = RunResult(
            references=references,
            mode=selection.mode,
            commit_count=len(selection.commits),
            pull_request_count=len(pull_requests),
            dry_run=dry_run,
        )
        self.log.info(
            "unique_references_found",
            count=result.unique_count,
            references=[str(ref) for ref in references],
        )

        if result.nothing_to_do:
            self.log.info("nothing_to_do", reason="no ClickUp task references found")
            return result

        release_tag = compose_release_tag(self.tag_prefix, context.release_label)
        result.tag = sanitize_tag_name(release_tag)
        self.log.info("release_tag_prepared", tag=result.tag, original=release_tag, tasks=result.unique_count)

        if dry_run:
            self.log.info("dry_run_skipping_tagging", tag=result.tag)
            return result

        if self.applier is None:
            raise RuntimeError("A task tracker is required unless dry_run is set")

        result.outcomes = await self.applier.apply(references, result.tag, context.release_label)
        result.tagged_count = sum(1 for outcome in result.outcomes if outcome.tagged)
        self.log.info(
            "release_processing_complete",
            tag=result.tag,
            tagged=result.tagged_count,
            total=result.unique_count,
        )
        return result

    def extract_references(
        self,
        commits: list[CommitRecord],
        pull_requests: list[PullRequestRecord],
    ) -> list[TaskReference]:
        """Collect references from commit messages, PR titles and PR branches.

        Merge markers are stripped from commit messages first so that a
        merged PR's number is never taken for a task ID.
        """
        from_commits: list[TaskReference] = []
        for commit in commits:
            found = extract_task_references(strip_merge_markers(commit.message), logger=self.log)
            if found:
                self.log.info("references_in_commit", count=len(found), commit=commit.summary)
                from_commits.extend(found)

        from_titles: list[TaskReference] = []
        from_branches: list[TaskReference] = []
        for pull_request in pull_requests:
            found = extract_task_references(pull_request.title, logger=self.log)
            if found:
                self.log.info("references_in_pr_title", count=len(found), title=pull_request.title)
                from_titles.extend(found)

            found = extract_task_references(pull_request.head, logger=self.log)
            if found:
                self.log.info("references_in_branch_name", count=len(found), branch=pull_request.head)
                from_branches.extend(found)

        self.log.info(
            "references_extracted",
            from_commits=len(from_commits),
            from_pr_titles=len(from_titles),
            from_branch_names=len(from_branches),
            total=len(from_commits) + len(from_titles) + len(from_branches),
        )
        return from_commits + from_titles + from_branches
