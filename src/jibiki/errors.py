"""Error types raised by the jibiki cache layer."""


class JibikiError(Exception):
    """Base class for all jibiki errors."""


class SerializationError(JibikiError):
    """A record or cached payload could not be encoded or decoded."""


class CacheUnavailable(JibikiError):
    """The cache store could not be reached or timed out."""


class BackendError(JibikiError):
    """Raised by backend implementations for authoritative lookup failures.

    The cache layer never wraps or catches these; they reach the caller as-is.
    """


class TokenIssuanceError(JibikiError):
    """A session token was only partially written to the cache store."""

    def __init__(self, user_id: int, message: str) -> None:
        super().__init__(message)
        self.user_id = user_id
