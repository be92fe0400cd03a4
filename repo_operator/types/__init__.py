"""Repo operator type definitions.

This module exports all data model types used by the operator.
"""

from repo_operator.types.permissions import FULL_ACCESS_ACTIONS, PermissionTarget
from repo_operator.types.repos import (
    LocalRepositoryConfig,
    RemoteRepository,
    RemoteRepositoryConfig,
    RepositoryConfig,
    VirtualRepositoryConfig,
    parse_repository_config,
)
from repo_operator.types.resources import (
    ObjectMeta,
    ObjectReference,
    OwnerReference,
    Repository,
    RepositorySpec,
    RepositoryStatus,
    Secret,
    ServiceAccount,
)
from repo_operator.types.users import RepositoryUser, UserDetails

__all__ = [
    # Repository service types
    "RepositoryConfig",
    "LocalRepositoryConfig",
    "RemoteRepositoryConfig",
    "VirtualRepositoryConfig",
    "RemoteRepository",
    "parse_repository_config",
    "UserDetails",
    "RepositoryUser",
    "PermissionTarget",
    "FULL_ACCESS_ACTIONS",
    # Cluster resource types
    "ObjectMeta",
    "ObjectReference",
    "OwnerReference",
    "Repository",
    "RepositorySpec",
    "RepositoryStatus",
    "Secret",
    "ServiceAccount",
]
