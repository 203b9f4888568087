"""Provider implementations for GitHub and ClickUp.

Key Components:
    - SourceProvider: Abstract base for version-control sources
    - TaskTrackerProvider: Abstract base for task trackers
    - GitHubRestProvider: GitHub source using PyGithub
    - ClickUpRestProvider: ClickUp task tracker using direct REST calls

Example:
    >>> from release_tagger.providers.github_rest import GitHubRestProvider
    >>> from release_tagger.providers.clickup_rest import ClickUpRestProvider
    >>> source = GitHubRestProvider(token="...", owner="acme", repo="api")
    >>> tracker = ClickUpRestProvider(api_key="...")
"""

from release_tagger.providers.base import SourceProvider, TaskTrackerProvider

__all__ = [
    "SourceProvider",
    "TaskTrackerProvider",
]
