"""Repo operator exception classes."""


class RepoOperatorError(Exception):
    """Base exception for all repo operator errors."""

    def __init__(
        self, code: str, message: str, status_code: int | None = None
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(f"[{code}] {message}")


class ConfigurationError(RepoOperatorError):
    """Raised when operator configuration is invalid or missing."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


class AuthenticationError(RepoOperatorError):
    """Raised when the repository service rejects our credentials."""

    pass


class AuthorizationError(RepoOperatorError):
    """Raised when access is denied."""

    pass


class NotFoundError(RepoOperatorError):
    """Raised when a resource is not found."""

    pass


class ConflictError(RepoOperatorError):
    """Raised on conflicts (stale resource version, duplicate object, etc.)."""

    pass


class RateLimitedError(RepoOperatorError):
    """Raised when rate limited."""

    def __init__(
        self,
        code: str,
        message: str,
        retry_after: int,
        status_code: int | None = None,
    ) -> None:
        super().__init__(code, message, status_code)
        self.retry_after = retry_after


class ValidationError(RepoOperatorError):
    """Raised on client errors that are not otherwise classified."""

    pass


class ServerError(RepoOperatorError):
    """Raised on server errors (5xx) and connection failures."""

    pass
