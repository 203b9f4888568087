"""ClickUp task tracker implementation using direct REST API calls."""

from typing import Any
from urllib.parse import quote

import httpx
import structlog

from release_tagger.exceptions import TaskTrackerError
from release_tagger.models.domain import TagApplication
from release_tagger.providers.base import TaskTrackerProvider

log = structlog.get_logger(__name__)

DEFAULT_CLICKUP_API_URL = "https://api.clickup.com/api/v2"

# Error text ClickUp returns with HTTP 400 when the tag is already on the task
TAG_ALREADY_EXISTS_ERROR = "Tag already exists on task"

# Path segments httpx would collapse instead of sending
_DOT_SEGMENTS = ("", ".", "..")


class ClickUpRestProvider(TaskTrackerProvider):
    """ClickUp implementation using direct REST API calls.

    One HTTP/2 client is opened on connect() and shared by every tag and
    comment call of the run.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_CLICKUP_API_URL,
        timeout: float = 30.0,
    ):
        """Initialize ClickUp provider.

        Args:
            api_key: Personal API token (sent as-is in the Authorization header)
            base_url: ClickUp API v2 base URL
            timeout: Request timeout in seconds
        """
        self.api_key = api_key.strip() if api_key else api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Open the HTTP client."""
        if self._client is not None:
            return

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            http2=True,
            headers={
                "Authorization": self.api_key,
                "Content-Type": "application/json",
            },
        )
        log.info("clickup_connected", base_url=self.base_url)

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            log.info("clickup_disconnected", base_url=self.base_url)

    async def __aenter__(self) -> "ClickUpRestProvider":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.disconnect()

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("ClickUpRestProvider is not connected; call connect() first")
        return self._client

    async def add_tag(self, task_id: str, tag: str) -> TagApplication:
        """Add a tag to a task, treating "already exists" as success."""
        log.info("add_tag", task_id=task_id, tag=tag)

        if tag.strip() in _DOT_SEGMENTS:
            raise TaskTrackerError(f"Invalid tag name {tag!r}: it cannot be empty, '.' or '..'", task_id=task_id)

        path = f"/task/{quote(task_id, safe='')}/tag/{quote(tag, safe='')}"
        try:
            response = await self.client.post(path, json={})
        except httpx.HTTPError as e:
            raise TaskTrackerError(f"Failed to add tag '{tag}': {e}", task_id=task_id) from e

        if response.is_success:
            return TagApplication.APPLIED

        if self._is_tag_already_present(response):
            log.info("clickup_tag_already_present", task_id=task_id, tag=tag)
            return TagApplication.ALREADY_PRESENT

        raise TaskTrackerError(
            f"Failed to add tag '{tag}'",
            task_id=task_id,
            status_code=response.status_code,
            response_text=response.text,
        )

    async def add_comment(self, task_id: str, text: str) -> None:
        """Add a comment to a task."""
        log.info("add_comment", task_id=task_id)

        try:
            response = await self.client.post(
                f"/task/{quote(task_id, safe='')}/comment",
                json={"comment_text": text},
            )
        except httpx.HTTPError as e:
            raise TaskTrackerError(f"Failed to add comment: {e}", task_id=task_id) from e

        if not response.is_success:
            raise TaskTrackerError(
                "Failed to add comment",
                task_id=task_id,
                status_code=response.status_code,
                response_text=response.text,
            )

    @staticmethod
    def _is_tag_already_present(response: httpx.Response) -> bool:
        if response.status_code != 400:
            return False
        try:
            payload = response.json()
        except ValueError:
            return False
        return isinstance(payload, dict) and payload.get("err") == TAG_ALREADY_EXISTS_ERROR
