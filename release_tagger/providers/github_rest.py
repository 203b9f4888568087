"""GitHub source implementation using PyGithub and the REST API."""

import asyncio
from collections.abc import Callable
from itertools import islice
from typing import TypeVar

import structlog
from github import Auth, Github, GithubException  # type: ignore[import-not-found]
from github.Commit import Commit as GHCommit  # type: ignore[import-not-found]
from github.PullRequest import PullRequest as GHPullRequest  # type: ignore[import-not-found]
from github.Repository import Repository as GHRepository  # type: ignore[import-not-found]

from release_tagger.exceptions import SourceRetrievalError
from release_tagger.models.domain import CommitRecord, PullRequestRecord
from release_tagger.providers.base import SourceProvider

log = structlog.get_logger(__name__)

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 100


async def _run_sync(func: Callable[[], T]) -> T:
    """Run a synchronous function in a thread pool.

    This prevents blocking the event loop when calling synchronous
    PyGithub methods.
    """
    return await asyncio.to_thread(func)


class GitHubRestProvider(SourceProvider):
    """GitHub source using the PyGithub library."""

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        base_url: str = "https://api.github.com",
    ):
        """Initialize GitHub provider.

        Args:
            token: GitHub token (the workflow's GITHUB_TOKEN is enough)
            owner: Repository owner (user or organization)
            repo: Repository name
            base_url: GitHub API base URL (for GitHub Enterprise)
        """
        self.token = token.strip() if token else token
        self.owner = owner
        self.repo = repo
        self.base_url = base_url.rstrip("/")
        self._client: Github | None = None
        self._repo: GHRepository | None = None

    async def connect(self) -> None:
        """Initialize GitHub client and resolve the repository."""

        def _connect() -> tuple[Github, GHRepository]:
            client = Github(auth=Auth.Token(self.token), base_url=self.base_url, per_page=DEFAULT_PAGE_SIZE)
            # Lazy: the first real request validates token and repository
            repo = client.get_repo(f"{self.owner}/{self.repo}", lazy=True)
            return client, repo

        try:
            self._client, self._repo = await _run_sync(_connect)
        except (GithubException, OSError) as e:
            raise self._source_error(f"Cannot open repository {self.owner}/{self.repo}", e) from e

        log.info(
            "github_connected",
            base_url=self.base_url,
            owner=self.owner,
            repo=self.repo,
        )

    async def disconnect(self) -> None:
        """Close GitHub client."""
        if self._client:
            await _run_sync(self._client.close)
            self._client = None
            self._repo = None

    @property
    def repository(self) -> GHRepository:
        if self._repo is None:
            raise RuntimeError("GitHubRestProvider is not connected; call connect() first")
        return self._repo

    async def list_release_tags(self, limit: int = DEFAULT_PAGE_SIZE) -> list[str]:
        """List tag names of the most recent releases, newest first."""
        log.debug("list_release_tags", limit=limit)

        try:
            releases = await _run_sync(lambda: list(islice(self.repository.get_releases(), limit)))
        except (GithubException, OSError) as e:
            raise self._source_error("Failed to list releases", e) from e

        return [release.tag_name for release in releases]

    async def compare_commits(self, base: str, head: str) -> list[CommitRecord]:
        """List commits in base...head."""
        log.debug("compare_commits", base=base, head=head)

        try:
            gh_commits = await _run_sync(lambda: list(self.repository.compare(base, head).commits))
        except (GithubException, OSError) as e:
            raise self._source_error(f"Failed to compare {base}...{head}", e) from e

        return [self._convert_commit(gh_commit) for gh_commit in gh_commits]

    async def get_tag_commit(self, tag: str) -> CommitRecord:
        """Resolve a tag to its commit, dereferencing annotated tags."""
        log.debug("get_tag_commit", tag=tag)

        def _resolve() -> CommitRecord:
            ref = self.repository.get_git_ref(f"tags/{tag}")
            sha = ref.object.sha

            # Annotated tags point at a tag object, not at the commit itself
            if ref.object.type == "tag":
                sha = self.repository.get_git_tag(sha).object.sha

            git_commit = self.repository.get_git_commit(sha)
            return CommitRecord(sha=git_commit.sha, message=git_commit.message or "")

        try:
            return await _run_sync(_resolve)
        except (GithubException, OSError) as e:
            raise self._source_error(f"Failed to resolve tag {tag}", e) from e

    async def list_commits(self, ref: str, limit: int = DEFAULT_PAGE_SIZE) -> list[CommitRecord]:
        """List the most recent commits reachable from ref, newest first."""
        log.debug("list_commits", ref=ref, limit=limit)

        try:
            gh_commits = await _run_sync(lambda: list(islice(self.repository.get_commits(sha=ref), limit)))
        except (GithubException, OSError) as e:
            raise self._source_error(f"Failed to list commits for {ref}", e) from e

        return [self._convert_commit(gh_commit) for gh_commit in gh_commits]

    async def get_pull_request(self, number: int) -> PullRequestRecord:
        """Get pull request by number."""
        log.debug("get_pull_request", number=number)

        try:
            gh_pr = await _run_sync(lambda: self.repository.get_pull(number))
        except (GithubException, OSError) as e:
            raise self._source_error(f"Failed to fetch pull request #{number}", e) from e

        return self._convert_pull_request(gh_pr)

    def _convert_commit(self, gh_commit: GHCommit) -> CommitRecord:
        """Convert a PyGithub Commit to our CommitRecord model."""
        return CommitRecord(sha=gh_commit.sha, message=gh_commit.commit.message or "")

    def _convert_pull_request(self, gh_pr: GHPullRequest) -> PullRequestRecord:
        """Convert a PyGithub PullRequest to our PullRequestRecord model."""
        return PullRequestRecord(
            number=gh_pr.number,
            title=gh_pr.title or "",
            head=gh_pr.head.ref,
            merged=bool(gh_pr.merged),
        )

    @staticmethod
    def _source_error(message: str, error: Exception) -> SourceRetrievalError:
        if isinstance(error, GithubException):
            data = error.data if isinstance(error.data, dict) else {}
            return SourceRetrievalError(
                f"{message}: {data.get('message') or error}",
                status_code=error.status,
                response_text=str(error.data) if error.data is not None else None,
            )
        return SourceRetrievalError(f"{message}: {error}")
