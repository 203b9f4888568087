"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from unittest.mock import AsyncMock, Mock

import pytest

from release_tagger.models.domain import (
    CommitRecord,
    EventKind,
    PullRequestRecord,
    ReleaseContext,
    TagApplication,
)
from release_tagger.providers.base import SourceProvider, TaskTrackerProvider


@pytest.fixture
def make_commit() -> Callable[..., CommitRecord]:
    """Factory for commits with sequential SHAs."""
    counter = iter(range(1, 10_000))

    def _make(message: str, sha: str | None = None) -> CommitRecord:
        return CommitRecord(sha=sha or f"{next(counter):040x}", message=message)

    return _make


@pytest.fixture
def mock_source() -> AsyncMock:
    """Source provider returning nothing unless a test configures it."""
    source = AsyncMock(spec=SourceProvider)
    source.list_release_tags.return_value = []
    source.compare_commits.return_value = []
    source.list_commits.return_value = []
    return source


@pytest.fixture
def mock_tracker() -> AsyncMock:
    """Task tracker that accepts every tag and comment."""
    tracker = AsyncMock(spec=TaskTrackerProvider)
    tracker.add_tag.return_value = TagApplication.APPLIED
    tracker.add_comment.return_value = None
    return tracker


@pytest.fixture
def mock_logger() -> Mock:
    """Injected structlog-style logger recording every call."""
    return Mock()


@pytest.fixture
def release_context() -> ReleaseContext:
    """Release event for tag v1.2.0."""
    return ReleaseContext(
        event_kind=EventKind.RELEASE,
        ref_name="v1.2.0",
        release_tag="v1.2.0",
        release_label="Release 1.2.0",
    )


@pytest.fixture
def push_context() -> ReleaseContext:
    """Push to the main branch."""
    return ReleaseContext(
        event_kind=EventKind.PUSH,
        ref_name="main",
        release_label="main",
    )


@pytest.fixture
def merged_pr() -> PullRequestRecord:
    """A merged pull request referencing two tasks."""
    return PullRequestRecord(
        number=99,
        title="CU-55 improve x",
        head="feature/CU-77-foo",
        merged=True,
    )
