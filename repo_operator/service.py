"""
Repository service contract.

The provisioner, permission synchronizer, strategies and reconciler only
talk to the repository service through ``RepositoryService``.
``RepositoryServiceClient`` fulfils it over HTTP and
``MockRepositoryService`` fulfils it in memory.
"""

from typing import Protocol, runtime_checkable

from repo_operator.transport import APIResponse
from repo_operator.types.permissions import PermissionTarget
from repo_operator.types.repos import (
    LocalRepositoryConfig,
    RemoteRepository,
    RepositoryConfig,
    VirtualRepositoryConfig,
)
from repo_operator.types.users import RepositoryUser, UserDetails


@runtime_checkable
class ReposAPI(Protocol):
    def get_local(self, key: str) -> LocalRepositoryConfig:
        """An empty ``key`` on the result means the repository is absent."""
        ...

    def get_virtual(self, key: str) -> VirtualRepositoryConfig:
        ...

    def list_remote(self, package_type: str) -> list[RemoteRepository]:
        ...

    def create(self, key: str, config: RepositoryConfig) -> APIResponse:
        ...

    def delete(self, key: str) -> APIResponse:
        ...


@runtime_checkable
class UsersAPI(Protocol):
    def get(self, name: str) -> RepositoryUser:
        """Raises NotFoundError when the user does not exist."""
        ...

    def create(self, details: UserDetails) -> tuple[str, APIResponse]:
        """Create or replace the user; returns the generated password."""
        ...

    def delete(self, name: str) -> APIResponse:
        ...


@runtime_checkable
class PermissionsAPI(Protocol):
    def get(self, name: str) -> PermissionTarget:
        ...

    def create(self, target: PermissionTarget) -> APIResponse:
        ...

    def delete(self, name: str) -> APIResponse:
        ...


@runtime_checkable
class RepositoryService(Protocol):
    """Repositories, users and permission targets of one service instance."""

    base_url: str
    repos: ReposAPI
    users: UsersAPI
    permissions: PermissionsAPI
