"""
Pytest plugin for repo operator testing fixtures.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["repo_operator.testing.conftest"]
"""

# Re-export all fixtures for pytest auto-discovery
from repo_operator.testing.fixtures import mock_service, reconciler, store

__all__ = [
    "mock_service",
    "store",
    "reconciler",
]
