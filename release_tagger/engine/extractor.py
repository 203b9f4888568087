"""
Task reference extraction from free text.

Commit messages, pull request titles and branch names mention ClickUp tasks
in two spellings:

- Full prefix: ``CU-abc123`` or ``cu_abc123`` (prefix case-insensitive,
  separator ``-`` or ``_``), normalized to ``CU-abc123``.
- Bare hash: ``#abc123``, normalized to ``CU-abc123``.

All full-prefix matches come first, then all bare-hash matches, each group
left to right. Duplicates are kept; deduplication happens once for the whole
run. When a bare-hash match overlaps a full-prefix match (``#CU-12``) the
full-prefix match wins and the bare-hash one is dropped.

Example:
    >>> [str(ref) for ref in extract_task_references("fix cu_9f2k and #77")]
    ['CU-9f2k', 'CU-77']
"""

import re
from typing import Any

import structlog

from release_tagger.models.domain import TaskReference

log = structlog.get_logger(__name__)

FULL_PREFIX_PATTERN = re.compile(r"(?i:cu)[-_]([A-Za-z0-9]+)")
BARE_HASH_PATTERN = re.compile(r"#([A-Za-z0-9]+)")


def extract_task_references(text: str | None, logger: Any = None) -> list[TaskReference]:
    """Extract normalized task references from text.

    Args:
        text: Commit message, PR title, branch name, or None
        logger: Optional structlog logger; defaults to the module logger

    Returns:
        References in match order, duplicates included. Empty for empty or
        missing text.
    """
    if not text:
        return []

    logger = logger or log
    references: list[TaskReference] = []
    claimed: list[tuple[int, int]] = []

    for match in FULL_PREFIX_PATTERN.finditer(text):
        claimed.append(match.span())
        references.append(TaskReference.from_task_id(match.group(1)))

    for match in BARE_HASH_PATTERN.finditer(text):
        start, end = match.span()
        if any(start < claimed_end and claimed_start < end for claimed_start, claimed_end in claimed):
            continue
        references.append(TaskReference.from_task_id(match.group(1)))

    if references:
        logger.debug(
            "task_references_extracted",
            references=[str(ref) for ref in references],
            text=text,
        )
    return references
