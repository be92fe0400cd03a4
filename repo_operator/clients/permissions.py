"""Permission targets resource client."""

from typing import TYPE_CHECKING, Any

from repo_operator.exceptions import NotFoundError
from repo_operator.transport import APIResponse
from repo_operator.types.permissions import PermissionTarget

if TYPE_CHECKING:
    from repo_operator.transport import HTTPTransport


def _parse_permission_target(data: dict[str, Any]) -> PermissionTarget:
    principals = data.get("principals") or {}
    return PermissionTarget(
        name=data.get("name", ""),
        includes_pattern=data.get("includesPattern", ""),
        excludes_pattern=data.get("excludesPattern", ""),
        repositories=list(data.get("repositories") or []),
        users={user: list(actions) for user, actions in (principals.get("users") or {}).items()},
        groups={group: list(actions) for group, actions in (principals.get("groups") or {}).items()},
    )


class PermissionsClient:
    """Client for permission target operations."""

    def __init__(self, transport: "HTTPTransport") -> None:
        """
        Initialize the permissions client.

        Args:
            transport: HTTP transport for making requests
        """
        self.transport = transport

    def get(self, name: str) -> PermissionTarget:
        """
        Get a permission target.

        Raises:
            NotFoundError: If the permission target does not exist
        """
        response = self.transport.request("GET", f"/api/security/permissions/{name}")
        if not response.ok:
            raise NotFoundError(
                "PERMISSION_NOT_FOUND",
                f"Permission target {name} not found",
                response.status_code,
            )
        data = response.data if isinstance(response.data, dict) else {}
        return _parse_permission_target(data)

    def create(self, target: PermissionTarget) -> APIResponse:
        """
        Create or fully replace a permission target.

        Args:
            target: Permission target document
        """
        body: dict[str, Any] = {
            "name": target.name,
            "includesPattern": target.includes_pattern,
            "excludesPattern": target.excludes_pattern,
            "repositories": list(target.repositories),
            "principals": {"users": dict(target.users), "groups": dict(target.groups)},
        }
        return self.transport.request(
            "PUT", f"/api/security/permissions/{target.name}", body=body
        )

    def delete(self, name: str) -> APIResponse:
        """Delete a permission target."""
        return self.transport.request("DELETE", f"/api/security/permissions/{name}")
