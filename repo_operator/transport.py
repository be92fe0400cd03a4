"""
HTTP Transport for the repository service.

Handles HTTP communication with authentication, automatic retry logic,
and error envelope parsing.
"""

import hashlib
import json
import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import httpx

from repo_operator.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    ConflictError,
    NotFoundError,
    RateLimitedError,
    RepoOperatorError,
    ServerError,
    ValidationError,
)
from repo_operator.logging import log_http_request, log_http_response

USER_AGENT = "repo-operator/0.1.0"

# Artifactory answers 400 for several benign cases (e.g. GET of a missing
# repository key); those responses are handed back to the caller untouched.
SOFT_STATUS_CODES = frozenset({400})


@dataclass
class RetryConfig:
    """Configuration for automatic retry behavior."""

    max_retries: int = 3
    backoff_factor: float = 2.0
    retry_on: list[int] = field(default_factory=lambda: [429, 502, 503])
    respect_retry_after: bool = True
    max_backoff: float = 60.0  # Maximum backoff time in seconds
    jitter: float = 0.1  # Jitter factor (0.1 = ±10%)


def compute_backoff(config: RetryConfig, attempt: int, retry_after: str | None = None) -> float:
    """
    Calculate backoff time for a retry attempt.

    Uses exponential backoff with jitter, respecting a Retry-After value
    if present.

    Args:
        config: Retry configuration
        attempt: Current attempt number (0-indexed)
        retry_after: Value of Retry-After header (if present)

    Returns:
        Time to wait in seconds
    """
    if retry_after and config.respect_retry_after:
        try:
            return float(retry_after)
        except ValueError:
            pass  # Fall through to exponential backoff

    base_wait = config.backoff_factor ** attempt

    jitter_range = base_wait * config.jitter
    jitter = random.uniform(-jitter_range, jitter_range)
    wait_time = base_wait + jitter

    return min(wait_time, config.max_backoff)


@dataclass
class APIResponse:
    """Result of a single call against the repository service."""

    status_code: int
    state: str  # HTTP reason phrase, e.g. "OK", "Created"
    data: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class HTTPTransport:
    """
    HTTP transport layer for the repository service REST API.

    Handles:
    - Basic or API-token authentication (exactly one per instance)
    - Exponential backoff with jitter for retries
    - Retry-After header respect for rate limiting
    - Error envelope parsing into typed exceptions
    """

    def __init__(
        self,
        base_url: str,
        username: str | None = None,
        password: str | None = None,
        token: str | None = None,
        verify_ssl: bool = True,
        timeout: float = 30.0,
        retry_config: RetryConfig | None = None,
    ) -> None:
        """
        Initialize HTTP transport.

        Args:
            base_url: Base URL for API requests (e.g., "https://repo.example.com/artifactory")
            username: Username for HTTP Basic auth
            password: Password for HTTP Basic auth
            token: API token; takes precedence over basic auth when given
            verify_ssl: Whether to verify the server's TLS certificate
            timeout: Request timeout in seconds
            retry_config: Configuration for retry behavior

        Raises:
            ConfigurationError: If neither a token nor a username/password pair is given
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()

        headers = {
            "User-Agent": USER_AGENT,
            "X-Result-Detail": "info, properties",
            "Content-Type": "application/json",
        }
        auth: httpx.Auth | None = None
        if token:
            self.auth_method = "token"
            headers["X-JFrog-Art-Api"] = token
        elif username and password:
            self.auth_method = "basic"
            auth = httpx.BasicAuth(username, password)
        else:
            raise ConfigurationError(
                "Either a token or both username and password are required"
            )

        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            headers=headers,
            auth=auth,
            verify=verify_ssl,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "HTTPTransport":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: Any = None,
        content_type: str | None = None,
    ) -> APIResponse:
        """
        Make a request with automatic retry.

        Args:
            method: HTTP method (GET, PUT, DELETE)
            path: API path (e.g., "/api/repositories/my-repo")
            params: Query parameters
            body: JSON-serializable request body
            content_type: Overrides the default application/json content type

        Returns:
            APIResponse with status code, reason phrase and parsed body

        Raises:
            RepoOperatorError: On non-2xx responses other than 400
        """
        headers: dict[str, str] = {}
        content: bytes | None = None
        if body is not None:
            content = json.dumps(body).encode("utf-8")
            headers["X-Checksum-Sha1"] = hashlib.sha1(content).hexdigest()
        if content_type:
            headers["Content-Type"] = content_type

        def make_request() -> httpx.Response:
            log_http_request(method, f"{self.base_url}{path}", headers, body)
            return self._client.request(
                method, path, params=params, content=content, headers=headers
            )

        return self._execute_with_retry(make_request)

    def _execute_with_retry(
        self, request_fn: Callable[[], httpx.Response]
    ) -> APIResponse:
        """
        Execute a request with automatic retry on retryable errors.

        Args:
            request_fn: Function that makes the HTTP request

        Returns:
            Parsed response

        Raises:
            RepoOperatorError: On non-retryable errors or after max retries
        """
        last_error: Exception | None = None

        for attempt in range(self.retry_config.max_retries + 1):
            try:
                started = time.monotonic()
                response = request_fn()
                elapsed_ms = (time.monotonic() - started) * 1000

                if (
                    200 <= response.status_code < 300
                    or response.status_code in SOFT_STATUS_CODES
                ):
                    data = self._parse_body(response)
                    log_http_response(
                        response.status_code, str(response.url), data, elapsed_ms
                    )
                    return APIResponse(
                        status_code=response.status_code,
                        state=response.reason_phrase,
                        data=data,
                    )

                log_http_response(
                    response.status_code, str(response.url), None, elapsed_ms
                )
                error = self._parse_error_response(response)

                if not self._should_retry(response.status_code, attempt):
                    raise error

                last_error = error

                retry_after = response.headers.get("Retry-After")
                wait_time = self._get_backoff_time(attempt, retry_after)
                time.sleep(wait_time)

            except httpx.RequestError as e:
                # Network errors are retryable
                if attempt >= self.retry_config.max_retries:
                    raise ServerError("CONNECTION_ERROR", str(e)) from e

                last_error = e
                wait_time = self._get_backoff_time(attempt, None)
                time.sleep(wait_time)

        if last_error:
            if isinstance(last_error, RepoOperatorError):
                raise last_error
            raise ServerError("MAX_RETRIES_EXCEEDED", str(last_error))

        raise ServerError("UNKNOWN_ERROR", "Request failed with no error details")

    def _should_retry(self, status_code: int, attempt: int) -> bool:
        """
        Determine if a request should be retried.

        Args:
            status_code: HTTP status code
            attempt: Current attempt number (0-indexed)

        Returns:
            True if the request should be retried
        """
        if attempt >= self.retry_config.max_retries:
            return False

        return status_code in self.retry_config.retry_on

    def _get_backoff_time(
        self, attempt: int, retry_after: str | None
    ) -> float:
        return compute_backoff(self.retry_config, attempt, retry_after)

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def _parse_error_response(self, response: httpx.Response) -> RepoOperatorError:
        """
        Parse an error response into a typed exception.

        The service answers with either ``{"errors": [{"status", "message"}]}``
        or ``{"error": "..."}``; all messages are folded into one.

        Args:
            response: HTTP response with error status

        Returns:
            Appropriate RepoOperatorError subclass
        """
        status_code = response.status_code
        message = self.error_message(status_code, response.text)
        code = response.reason_phrase.upper().replace(" ", "_") or "UNKNOWN_ERROR"

        if status_code == 401:
            return AuthenticationError(code, message, status_code)
        elif status_code == 403:
            return AuthorizationError(code, message, status_code)
        elif status_code == 404:
            return NotFoundError(code, message, status_code)
        elif status_code == 409:
            return ConflictError(code, message, status_code)
        elif status_code == 429:
            retry_after_str = response.headers.get("Retry-After", "60")
            try:
                retry_after = int(retry_after_str)
            except ValueError:
                retry_after = 60
            return RateLimitedError(code, message, retry_after, status_code)
        elif status_code >= 500:
            return ServerError(code, message, status_code)
        else:
            return ValidationError(code, message, status_code)

    @staticmethod
    def error_message(status_code: int, text: str) -> str:
        """Extract a single error message from an error envelope."""
        try:
            data = json.loads(text)
        except ValueError:
            data = None

        if not isinstance(data, dict):
            return (
                f"Unable to parse error json. Non-2xx code returned: {status_code}. "
                f"Message follows:\n{text}"
            )

        if data.get("error"):
            return str(data["error"])

        messages = [
            str(item.get("message", ""))
            for item in data.get("errors") or []
            if isinstance(item, dict)
        ]
        return "\n".join(messages) or f"HTTP {status_code}"
