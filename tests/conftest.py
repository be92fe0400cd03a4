# Shared fixtures from the package's testing utilities
from repo_operator.testing.conftest import mock_service, reconciler, store  # noqa: F401
