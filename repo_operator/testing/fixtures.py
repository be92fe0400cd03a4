"""
Pytest fixtures for repo operator testing.

Provides fakes for the repository service and the cluster store plus
helpers for building Repository objects.
"""

from typing import Generator

import pytest

from repo_operator.controller import FINALIZER, RepositoryReconciler
from repo_operator.testing.mock import MockRepositoryService
from repo_operator.testing.store import InMemoryStore
from repo_operator.types.resources import (
    ObjectMeta,
    Repository,
    RepositorySpec,
    RepositoryStatus,
    ServiceAccount,
)

TEST_NAMESPACE = "test-namespace"
TEST_REPOSITORY_URL = "https://repo.example.com/artifactory"


def create_mock_repository(
    name: str = "app",
    repo_type: str = "docker",
    users: list[str] | None = None,
    namespace: str = TEST_NAMESPACE,
    finalizers: list[str] | None = None,
    deletion_timestamp: str | None = None,
    status: RepositoryStatus | None = None,
) -> Repository:
    """
    Build a Repository with sensible defaults.

    By default the Repository already carries the operator's finalizer, so
    reconciling it goes straight to provisioning.
    """
    return Repository(
        metadata=ObjectMeta(
            name=name,
            namespace=namespace,
            uid=f"uid-{name}",
            finalizers=[FINALIZER] if finalizers is None else list(finalizers),
            deletion_timestamp=deletion_timestamp,
        ),
        spec=RepositorySpec(repo_type=repo_type, users=list(users or [])),
        status=status or RepositoryStatus(),
    )


def create_service_accounts(store: InMemoryStore, namespace: str = TEST_NAMESPACE) -> None:
    """Seed the ``default`` and ``builder`` service accounts into ``store``."""
    for name in ("default", "builder"):
        store.add(ServiceAccount(metadata=ObjectMeta(name=name, namespace=namespace)))


# ============================================================================
# Fake Fixtures
# ============================================================================


@pytest.fixture
def mock_service() -> Generator[MockRepositoryService, None, None]:
    """
    Provide an in-memory repository service.

    Example:
        ```python
        def test_my_feature(mock_service):
            mock_service.add_user("alice")
            ...
            assert mock_service.call_count("repos.create") == 2
        ```
    """
    service = MockRepositoryService(base_url=TEST_REPOSITORY_URL)
    yield service
    service.reset()


@pytest.fixture
def store() -> InMemoryStore:
    """Provide an in-memory cluster store holding the two well-known service accounts."""
    store = InMemoryStore()
    create_service_accounts(store)
    return store


@pytest.fixture
def reconciler(store: InMemoryStore, mock_service: MockRepositoryService) -> RepositoryReconciler:
    """Provide a reconciler wired to the in-memory fakes."""
    return RepositoryReconciler(store, mock_service, repository_url=TEST_REPOSITORY_URL)
