"""Repo operator testing utilities.

Provides in-memory fakes and fixtures for testing code built on the operator.
"""

from repo_operator.testing.fixtures import (
    create_mock_repository,
    create_service_accounts,
)
from repo_operator.testing.mock import MockCall, MockRepositoryService
from repo_operator.testing.store import InMemoryStore

__all__ = [
    # Fakes
    "MockRepositoryService",
    "InMemoryStore",
    "MockCall",
    # Helper functions
    "create_mock_repository",
    "create_service_accounts",
]
