"""
Domain models for the release tagger.

This module contains the data classes and enums that flow through one run:
what was read from GitHub (commits, pull requests), what was decided about
the event (release context, selection mode), what was extracted (task
references), and what happened when tagging them in ClickUp.

Example:
    Building the context for a release event::

        context = ReleaseContext(
            event_kind=EventKind.RELEASE,
            ref_name="v1.2.0",
            release_tag="v1.2.0",
            release_label="Spring release",
            include_previous_release=True,
        )
"""

from dataclasses import dataclass, field
from enum import Enum

TASK_REFERENCE_PREFIX = "CU-"


class EventKind(str, Enum):
    """Kind of GitHub event that triggered the run."""

    PUSH = "push"
    """A push to a branch."""

    RELEASE = "release"
    """A release was published (payload carries a ``release`` object)."""

    OTHER = "other"
    """Anything else (manual dispatch, tag push, local invocation)."""


class SelectionMode(str, Enum):
    """Which commits are in scope for the run.

    Exactly one mode is selected per run; see ``choose_mode``.
    """

    BRANCH_PUSH = "branch_push"
    """Most recent commits reachable from the pushed branch."""

    RELEASE_WITH_DIFF = "release_with_diff"
    """Commits between the previous release tag and the current one."""

    RELEASE_SINGLE = "release_single"
    """The single commit the release tag points to."""

    FALLBACK = "fallback"
    """Most recent commits reachable from whatever ref was supplied."""


class TagState(str, Enum):
    """Per-reference progress through the tag-then-comment sequence.

    PENDING -> TAGGING -> TAGGED -> COMMENTING -> DONE
    TAGGING -> TAG_FAILED
    COMMENTING -> COMMENT_FAILED
    """

    PENDING = "pending"
    TAGGING = "tagging"
    TAGGED = "tagged"
    TAG_FAILED = "tag_failed"
    COMMENTING = "commenting"
    DONE = "done"
    COMMENT_FAILED = "comment_failed"

    @property
    def is_terminal(self) -> bool:
        """True for states a reference never leaves."""
        return self in (TagState.TAG_FAILED, TagState.DONE, TagState.COMMENT_FAILED)

    @property
    def counts_as_tagged(self) -> bool:
        """True when the tag is on the task, whether or not the comment landed."""
        return self in (TagState.DONE, TagState.COMMENT_FAILED)


class TagApplication(str, Enum):
    """Successful outcomes of an "add tag" call."""

    APPLIED = "applied"
    ALREADY_PRESENT = "already_present"


@dataclass(frozen=True, order=True)
class TaskReference:
    """A normalized ClickUp task reference such as ``CU-abc123``.

    The prefix is always upper-case ``CU-``; the ID part keeps the casing it
    had in the source text. Equal values denote the same task, so references
    can be collected in sets.
    """

    value: str

    @property
    def task_id(self) -> str:
        """Bare ClickUp task ID with the ``CU-`` prefix stripped."""
        return self.value[len(TASK_REFERENCE_PREFIX) :]

    @classmethod
    def from_task_id(cls, task_id: str) -> "TaskReference":
        """Build a reference from a bare ID (``abc123`` -> ``CU-abc123``)."""
        return cls(f"{TASK_REFERENCE_PREFIX}{task_id}")

    def __str__(self) -> str:
        return self.value


@dataclass
class CommitRecord:
    """A commit as seen by the release tagger.

    Only the message is used for correlation; the SHA is kept for logging.
    """

    sha: str
    message: str

    @property
    def summary(self) -> str:
        """First line of the commit message."""
        return self.message.split("\n", 1)[0]


@dataclass
class PullRequestRecord:
    """A pull request resolved from a merge commit."""

    number: int
    title: str
    head: str
    """Source branch name (``head.ref``)."""

    merged: bool = False


@dataclass
class ReleaseContext:
    """Everything the source selector needs to know about the triggering event.

    Attributes:
        event_kind: Push, release, or anything else
        ref_name: Branch name for pushes, short ref name otherwise
        release_tag: Tag name of the release (release events only)
        release_label: Raw label used for the ClickUp tag and comment
        include_previous_release: Diff against the previous release if one exists
    """

    event_kind: EventKind
    ref_name: str
    release_tag: str | None = None
    release_label: str = ""
    include_previous_release: bool = False


@dataclass
class TagOutcome:
    """Final state of one task reference after the tag applier ran."""

    reference: TaskReference
    state: TagState = TagState.PENDING
    already_present: bool = False
    error: str | None = None

    @property
    def tagged(self) -> bool:
        return self.state.counts_as_tagged


@dataclass
class RunResult:
    """Aggregate result of one run."""

    references: list[TaskReference] = field(default_factory=list)
    """Unique task references found, in first-seen order."""

    tagged_count: int = 0
    """References whose tag is on the task (comment failures included)."""

    mode: SelectionMode | None = None
    commit_count: int = 0
    pull_request_count: int = 0
    tag: str | None = None
    """Sanitized tag that was (or, in a dry run, would have been) applied."""

    outcomes: list[TagOutcome] = field(default_factory=list)
    dry_run: bool = False

    @property
    def unique_count(self) -> int:
        return len(self.references)

    @property
    def failed_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.state == TagState.TAG_FAILED)

    @property
    def nothing_to_do(self) -> bool:
        return not self.references
