"""
Repository service client.

Provides the primary interface to the artifact repository service's REST API.
"""

import logging
import os
from typing import Any

from repo_operator.clients import PermissionsClient, ReposClient, UsersClient
from repo_operator.exceptions import ConfigurationError
from repo_operator.logging import get_logger
from repo_operator.transport import HTTPTransport, RetryConfig

_FALSY = {"0", "false", "no", "off"}


class RepositoryServiceClient:
    """
    Main client for the repository service.

    Aggregates the resource clients over a single authenticated transport.

    Example:
        ```python
        from repo_operator import RepositoryServiceClient

        # Token authentication
        client = RepositoryServiceClient(
            base_url="https://repo.example.com/artifactory",
            token="...",
        )

        # Or from REPOSITORY_* environment variables
        client = RepositoryServiceClient.from_env()

        client.repos.get_local("app-docker-local")
        client.permissions.get("app-docker-repo-permission")
        ```
    """

    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        base_url: str,
        username: str | None = None,
        password: str | None = None,
        token: str | None = None,
        verify_ssl: bool = True,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
    ) -> None:
        """
        Initialize the repository service client.

        Args:
            base_url: Base URL of the service (also used to build repository URLs)
            username: Username for HTTP Basic auth
            password: Password for HTTP Basic auth
            token: API token (preferred over basic auth when given)
            verify_ssl: Whether to verify TLS certificates (default: True)
            timeout: Request timeout in seconds (default: 30.0)
            retry_config: Configuration for retry behavior (optional)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        self._transport = HTTPTransport(
            base_url=base_url,
            username=username,
            password=password,
            token=token,
            verify_ssl=verify_ssl,
            timeout=timeout,
            retry_config=retry_config,
        )

        self.repos = ReposClient(self._transport)
        self.users = UsersClient(self._transport)
        self.permissions = PermissionsClient(self._transport)

    @classmethod
    def from_env(
        cls,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
    ) -> "RepositoryServiceClient":
        """
        Create a client from environment variables.

        Environment variables:
            REPOSITORY_URL: Base URL of the service (required)
            REPOSITORY_TOKEN: API token; when set, token auth is used
            REPOSITORY_USERNAME / REPOSITORY_PASSWORD: Basic auth (required without a token)
            REPOSITORY_VERIFY_SSL: "false", "0" or "no" disables TLS verification
            REPOSITORY_DEBUG: When non-empty, HTTP traffic is logged at DEBUG level

        Raises:
            ConfigurationError: If required environment variables are missing
        """
        base_url = os.environ.get("REPOSITORY_URL")
        if not base_url:
            raise ConfigurationError("You must set the environment variable REPOSITORY_URL")

        token = os.environ.get("REPOSITORY_TOKEN") or None
        username = os.environ.get("REPOSITORY_USERNAME") or None
        password = os.environ.get("REPOSITORY_PASSWORD") or None
        if token is None and (username is None or password is None):
            raise ConfigurationError(
                "You must set the environment variables REPOSITORY_USERNAME & REPOSITORY_PASSWORD"
            )

        verify_ssl = os.environ.get("REPOSITORY_VERIFY_SSL", "true").strip().lower() not in _FALSY

        if os.environ.get("REPOSITORY_DEBUG"):
            get_logger("http").setLevel(logging.DEBUG)

        return cls(
            base_url=base_url,
            username=None if token else username,
            password=None if token else password,
            token=token,
            verify_ssl=verify_ssl,
            timeout=timeout,
            retry_config=retry_config,
        )

    @property
    def transport(self) -> HTTPTransport:
        """Get the underlying HTTP transport (for advanced use cases)."""
        return self._transport

    def close(self) -> None:
        """Close the client and release resources."""
        self._transport.close()

    def __enter__(self) -> "RepositoryServiceClient":
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit - closes the client."""
        self.close()
