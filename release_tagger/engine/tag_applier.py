"""
Idempotent application of the release tag to task references.

Each reference goes through its own small state machine::

    PENDING -> TAGGING -> TAGGED -> COMMENTING -> DONE
                  |                      |
                  v                      v
              TAG_FAILED          COMMENT_FAILED

"Tag already exists on task" counts as TAGGED. A failed comment still leaves
the reference counted as tagged. Failures never stop the batch and are not
retried. References are handled one at a time: the tag and comment calls of
one reference finish before the next reference's tag call starts.
"""

from collections.abc import Iterable
from typing import Any

import structlog

from release_tagger.exceptions import TaskTrackerError
from release_tagger.models.domain import TagApplication, TagOutcome, TagState, TaskReference
from release_tagger.providers.base import TaskTrackerProvider

log = structlog.get_logger(__name__)

DEFAULT_COMMENT_TEMPLATE = "This task has been included in release: {release}"


class IdempotentTagApplier:
    """Applies one tag plus an informational comment to many tasks."""

    def __init__(
        self,
        tracker: TaskTrackerProvider,
        comment_template: str = DEFAULT_COMMENT_TEMPLATE,
        logger: Any = None,
    ):
        """Initialize applier.

        Args:
            tracker: Task tracker receiving the tag and comment calls
            comment_template: Comment text; ``{release}`` is replaced by the raw release label
            logger: Optional structlog logger; defaults to the module logger
        """
        self.tracker = tracker
        self.comment_template = comment_template
        self.log = logger or log

    def comment_for(self, release_label: str) -> str:
        return self.comment_template.format(release=release_label)

    async def apply(
        self,
        references: Iterable[TaskReference],
        tag: str,
        release_label: str,
    ) -> list[TagOutcome]:
        """Tag and comment every reference in turn.

        Args:
            references: Unique task references
            tag: Sanitized tag name
            release_label: Unsanitized release label for the comment text

        Returns:
            One terminal outcome per reference, in input order
        """
        outcomes = []
        for reference in references:
            outcomes.append(await self.apply_one(reference, tag, release_label))

        tagged = sum(1 for outcome in outcomes if outcome.tagged)
        self.log.info("tagging_complete", tag=tag, tagged=tagged, total=len(outcomes))
        return outcomes

    async def apply_one(self, reference: TaskReference, tag: str, release_label: str) -> TagOutcome:
        outcome = TagOutcome(reference=reference)
        bound = self.log.bind(reference=str(reference), task_id=reference.task_id)

        outcome.state = TagState.TAGGING
        try:
            application = await self.tracker.add_tag(reference.task_id, tag)
        except TaskTrackerError as e:
            outcome.state = TagState.TAG_FAILED
            outcome.error = str(e)
            bound.error(
                "tag_failed",
                tag=tag,
                status_code=e.status_code,
                response=e.response_text,
                error=e.message,
            )
            return outcome

        outcome.state = TagState.TAGGED
        outcome.already_present = application == TagApplication.ALREADY_PRESENT
        bound.info("task_tagged", tag=tag, already_present=outcome.already_present)

        outcome.state = TagState.COMMENTING
        try:
            await self.tracker.add_comment(reference.task_id, self.comment_for(release_label))
        except TaskTrackerError as e:
            outcome.state = TagState.COMMENT_FAILED
            outcome.error = str(e)
            bound.error(
                "comment_failed",
                status_code=e.status_code,
                response=e.response_text,
                error=e.message,
            )
            return outcome

        outcome.state = TagState.DONE
        return outcome
