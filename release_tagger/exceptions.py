"""Custom exception hierarchy for the release tagger.

Exception Hierarchy:
    ReleaseTaggerError (base)
    ├── ConfigurationError
    └── ExternalServiceError
        ├── SourceRetrievalError
        └── TaskTrackerError

Network-facing operations raise the ExternalServiceError subclasses; the
engine recovers from those locally. Anything else that escapes the engine
is a top-level failure of the run.

Example Usage:
    >>> from release_tagger.exceptions import ConfigurationError
    >>> try:
    ...     settings = TaggerSettings.from_yaml(path)
    ... except ConfigurationError as e:
    ...     print(e.message)
"""


class ReleaseTaggerError(Exception):
    """Base exception for all release tagger errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        """Initialize exception.

        Args:
            message: Error message
        """
        self.message = message
        super().__init__(message)


class ConfigurationError(ReleaseTaggerError):
    """Configuration-related errors.

    Examples:
        - Configuration file not found or unreadable
        - Invalid YAML syntax
        - Missing required settings (tokens, repository)
        - Event payload is not a JSON object
    """

    pass


class ExternalServiceError(ReleaseTaggerError):
    """External service communication errors.

    Raised when communication with GitHub or ClickUp fails
    (HTTP errors, API failures, timeouts, etc.).
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_text: str | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            status_code: HTTP status code (if applicable)
            response_text: Response body text (if applicable)
        """
        self.status_code = status_code
        self.response_text = response_text

        full_message = message
        if status_code:
            full_message = f"{message} (HTTP {status_code})"

        super().__init__(full_message)
        self.message = message


class SourceRetrievalError(ExternalServiceError):
    """Reading releases, commits or pull requests from GitHub failed."""

    pass


class TaskTrackerError(ExternalServiceError):
    """A ClickUp tag or comment call failed.

    Attributes:
        task_id: Bare ClickUp task ID the call was made for
    """

    def __init__(
        self,
        message: str,
        task_id: str | None = None,
        status_code: int | None = None,
        response_text: str | None = None,
    ) -> None:
        self.task_id = task_id
        super().__init__(message, status_code=status_code, response_text=response_text)
