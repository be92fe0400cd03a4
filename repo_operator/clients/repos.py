"""Repositories resource client."""

from typing import TYPE_CHECKING, Any

from repo_operator.transport import APIResponse
from repo_operator.types.repos import (
    LocalRepositoryConfig,
    RemoteRepository,
    RepositoryConfig,
    VirtualRepositoryConfig,
)

if TYPE_CHECKING:
    from repo_operator.transport import HTTPTransport


def _as_dict(data: Any) -> dict[str, Any]:
    # A soft 400 carries an error envelope or plain text rather than a document
    return data if isinstance(data, dict) else {}


class ReposClient:
    """Client for repository-related operations."""

    def __init__(self, transport: "HTTPTransport") -> None:
        """
        Initialize the repos client.

        Args:
            transport: HTTP transport for making requests
        """
        self.transport = transport

    def get_local(self, key: str) -> LocalRepositoryConfig:
        """
        Get a local repository configuration.

        A missing repository is reported either as NotFoundError or, as some
        service versions do, as a soft 400 whose parsed config has an empty key.

        Args:
            key: Repository key

        Returns:
            LocalRepositoryConfig (``key`` is empty when the service had no document)

        Raises:
            NotFoundError: If the repository does not exist
        """
        response = self.transport.request("GET", f"/api/repositories/{key}")
        return LocalRepositoryConfig.from_dict(_as_dict(response.data))

    def get_virtual(self, key: str) -> VirtualRepositoryConfig:
        """
        Get a virtual repository configuration.

        Args:
            key: Repository key

        Returns:
            VirtualRepositoryConfig (``key`` is empty when the service had no document)

        Raises:
            NotFoundError: If the repository does not exist
        """
        response = self.transport.request("GET", f"/api/repositories/{key}")
        return VirtualRepositoryConfig.from_dict(_as_dict(response.data))

    def list_remote(self, package_type: str) -> list[RemoteRepository]:
        """
        List remote repositories of one package type.

        Args:
            package_type: Package type, e.g. "maven" or "docker"

        Returns:
            List of RemoteRepository summaries
        """
        response = self.transport.request(
            "GET",
            "/api/repositories",
            params={"type": "remote", "packageType": package_type},
        )
        entries = response.data if isinstance(response.data, list) else []
        return [
            RemoteRepository(
                key=entry["key"],
                type=entry.get("type", "remote"),
                url=entry.get("url", ""),
                package_type=entry.get("packageType", entry.get("packagetype", "")),
            )
            for entry in entries
        ]

    def create(self, key: str, config: RepositoryConfig) -> APIResponse:
        """
        Create (or replace) a repository.

        Args:
            key: Repository key
            config: Local, remote or virtual repository configuration

        Returns:
            APIResponse with the service's status code and state
        """
        return self.transport.request(
            "PUT",
            f"/api/repositories/{key}",
            body=config.to_dict(),
            content_type=config.mime_type,
        )

    def delete(self, key: str) -> APIResponse:
        """
        Delete a repository.

        Args:
            key: Repository key

        Raises:
            NotFoundError: If the repository does not exist
        """
        return self.transport.request("DELETE", f"/api/repositories/{key}")
