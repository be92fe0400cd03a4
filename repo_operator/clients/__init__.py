"""Repository service resource clients."""

from repo_operator.clients.permissions import PermissionsClient
from repo_operator.clients.repos import ReposClient
from repo_operator.clients.users import UsersClient

__all__ = [
    "ReposClient",
    "UsersClient",
    "PermissionsClient",
]
