"""Resolution of merged pull requests from merge commits."""

import re
from collections.abc import Iterable
from typing import Any

import structlog

from release_tagger.exceptions import SourceRetrievalError
from release_tagger.models.domain import CommitRecord, PullRequestRecord
from release_tagger.providers.base import SourceProvider

log = structlog.get_logger(__name__)

MERGE_PR_PATTERN = re.compile(r"Merge pull request #(\d+)")


def merged_pull_request_numbers(message: str | None) -> list[int]:
    """PR numbers referenced by "Merge pull request #<n>" markers, in order."""
    if not message:
        return []
    return [int(match.group(1)) for match in MERGE_PR_PATTERN.finditer(message)]


def strip_merge_markers(message: str | None) -> str:
    """Remove merge markers so their PR numbers are not read as task references."""
    if not message:
        return ""
    return MERGE_PR_PATTERN.sub("", message)


class PullRequestCorrelator:
    """Finds the merged pull requests behind a set of commits.

    Every merge marker in every commit message is resolved through the
    source. Unmerged or unreadable pull requests are skipped. The output
    follows commit order and is not deduplicated.
    """

    def __init__(self, source: SourceProvider, logger: Any = None):
        self.source = source
        self.log = logger or log

    async def correlate(self, commits: Iterable[CommitRecord]) -> list[PullRequestRecord]:
        merged: list[PullRequestRecord] = []

        for commit in commits:
            for number in merged_pull_request_numbers(commit.message):
                try:
                    pull_request = await self.source.get_pull_request(number)
                except SourceRetrievalError as e:
                    self.log.warning("pull_request_lookup_failed", number=number, sha=commit.sha, error=e.message)
                    continue

                if not pull_request.merged:
                    self.log.debug("pull_request_not_merged", number=number)
                    continue

                merged.append(pull_request)

        self.log.info("merged_pull_requests_found", count=len(merged))
        return merged
