"""Package-specific exception types."""

from __future__ import annotations


class EnhancementError(RuntimeError):
    """Base class for failures of the LLM enhancement pass.

    The heuristic converter is used instead whenever one of these is raised.
    """


class LLMConnectionError(EnhancementError):
    """Raised when the LLM server cannot be reached."""

    def __init__(self, message: str = "Cannot connect to LLM server - check your settings"):
        super().__init__(message)


class LLMTimeoutError(EnhancementError):
    """Raised when the LLM server does not answer within the configured timeout.

    Args:
        timeout: Timeout in seconds that was exceeded.
    """

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(
            f"Request timeout after {timeout:g}s - try increasing timeout in settings"
        )


class LLMAuthenticationError(EnhancementError):
    """Raised when the OpenAI API key is missing or rejected."""


class LLMResponseError(EnhancementError):
    """Raised when the LLM server answers with an error or malformed body.

    Args:
        message: Description of the failure.
        status_code: HTTP status code, when one was received.
    """

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)
