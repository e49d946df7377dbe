"""
Errors raised by generation capabilities.

The GenerationController is the only place these are caught; the end user
never sees their text.
"""


class CapabilityError(Exception):
    """A capability call failed (network, auth, quota, malformed response)."""


class RateLimitExceeded(CapabilityError):
    """Rate-limit retries were exhausted."""

    def __init__(self, max_retries: int, cause: Exception):
        super().__init__(f"Rate limit exceeded after {max_retries} retries: {cause}")
        self.max_retries = max_retries


class VideoGenerationTimeout(CapabilityError):
    """The Veo operation did not finish within the poll bound."""

    def __init__(self, timeout_seconds: float, operation_name: str = ""):
        super().__init__(
            f"Video generation did not finish within {timeout_seconds:.0f}s"
            + (f" (operation {operation_name})" if operation_name else "")
        )
        self.timeout_seconds = timeout_seconds
