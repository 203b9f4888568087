"""
Abstract base classes for providers.

This module defines the two collaborator contracts the engine depends on: a
read-only source of releases, commits and pull requests (GitHub), and a
write-only task tracker that accepts tags and comments (ClickUp).
"""

from abc import ABC, abstractmethod

from release_tagger.models.domain import CommitRecord, PullRequestRecord, TagApplication


class SourceProvider(ABC):
    """Abstract base class for version-control sources.

    Implementations normalize provider-specific objects into the domain
    models defined in models.domain. Every method raises
    SourceRetrievalError on any API or transport failure; callers decide
    whether that is fatal.

    All methods are async to support non-blocking I/O.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the API client."""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Release the API client."""
        pass

    @abstractmethod
    async def list_release_tags(self, limit: int = 100) -> list[str]:
        """List tag names of the most recent releases.

        Args:
            limit: Maximum number of releases to read (one page).

        Returns:
            Tag names ordered newest first, so the entry after a given tag
            is the chronologically preceding release.

        Raises:
            SourceRetrievalError: If the API request fails.
        """
        pass

    @abstractmethod
    async def compare_commits(self, base: str, head: str) -> list[CommitRecord]:
        """List the commits reachable from head but not from base.

        Args:
            base: Base ref (excluded), typically the previous release tag.
            head: Head ref (included), typically the current release tag.

        Returns:
            Commits in the order the provider reports them.

        Raises:
            SourceRetrievalError: If the comparison fails.
        """
        pass

    @abstractmethod
    async def get_tag_commit(self, tag: str) -> CommitRecord:
        """Resolve a tag to the commit it points to.

        Annotated tags are dereferenced one level to their target commit.

        Raises:
            SourceRetrievalError: If the tag or commit cannot be read.
        """
        pass

    @abstractmethod
    async def list_commits(self, ref: str, limit: int = 100) -> list[CommitRecord]:
        """List the most recent commits reachable from a ref.

        Args:
            ref: Branch name, tag or SHA.
            limit: Maximum number of commits to return.

        Returns:
            Commits ordered newest first.

        Raises:
            SourceRetrievalError: If the API request fails.
        """
        pass

    @abstractmethod
    async def get_pull_request(self, number: int) -> PullRequestRecord:
        """Fetch a single pull request by number.

        Raises:
            SourceRetrievalError: If the pull request cannot be read
                (including not found).
        """
        pass


class TaskTrackerProvider(ABC):
    """Abstract base class for task trackers that receive release tags.

    Tasks are addressed by their bare ID (``abc123``, not ``CU-abc123``).
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the API client."""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Release the API client."""
        pass

    @abstractmethod
    async def add_tag(self, task_id: str, tag: str) -> TagApplication:
        """Add a tag to a task.

        Returns:
            APPLIED when the tag was added, ALREADY_PRESENT when the task
            already carried it. Both mean the tag is on the task.

        Raises:
            TaskTrackerError: For any other failure.
        """
        pass

    @abstractmethod
    async def add_comment(self, task_id: str, text: str) -> None:
        """Add a plain-text comment to a task.

        Raises:
            TaskTrackerError: If the comment could not be created.
        """
        pass
