"""Repo operator - provisions artifact repositories for Repository resources."""

from repo_operator.client import RepositoryServiceClient
from repo_operator.controller import (
    FINALIZER,
    Controller,
    ReconcileResult,
    RepositoryReconciler,
    Request,
)
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
from repo_operator.logging import configure_logging, get_logger
from repo_operator.permissions import PermissionSynchronizer, SyncOutcome
from repo_operator.provisioning import (
    CleanupReport,
    EnsureResult,
    ProvisionResult,
    RepositoryProvisioner,
)
from repo_operator.service import RepositoryService
from repo_operator.strategies import (
    DockerStrategy,
    MavenStrategy,
    OtherStrategy,
    ProvisioningStrategy,
)
from repo_operator.transport import APIResponse, HTTPTransport, RetryConfig

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Main client
    "RepositoryServiceClient",
    "RepositoryService",
    # Reconciliation
    "RepositoryReconciler",
    "Controller",
    "Request",
    "ReconcileResult",
    "FINALIZER",
    # Provisioning
    "RepositoryProvisioner",
    "EnsureResult",
    "ProvisionResult",
    "CleanupReport",
    "PermissionSynchronizer",
    "SyncOutcome",
    "ProvisioningStrategy",
    "MavenStrategy",
    "DockerStrategy",
    "OtherStrategy",
    # Exceptions
    "RepoOperatorError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "RateLimitedError",
    "ValidationError",
    "ServerError",
    "ConfigurationError",
    # Transport
    "HTTPTransport",
    "APIResponse",
    "RetryConfig",
    # Logging
    "configure_logging",
    "get_logger",
]
