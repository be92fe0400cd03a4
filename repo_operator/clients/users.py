"""Users resource client."""

import secrets
from typing import TYPE_CHECKING

from repo_operator.exceptions import NotFoundError
from repo_operator.transport import APIResponse
from repo_operator.types.users import RepositoryUser, UserDetails

if TYPE_CHECKING:
    from repo_operator.transport import HTTPTransport

PASSWORD_LENGTH = 8
_DIGITS = "0123456789"
_SPECIALS = "~=+%^*/()[]{}/!@#$?|"
_LETTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"


def generate_random_password(length: int = PASSWORD_LENGTH) -> str:
    """
    Generate a password for an internal user.

    The result always holds at least one digit and one special character.
    """
    rng = secrets.SystemRandom()
    alphabet = _LETTERS + _DIGITS + _SPECIALS
    chars = [rng.choice(_DIGITS), rng.choice(_SPECIALS)]
    chars.extend(rng.choice(alphabet) for _ in range(length - 2))
    rng.shuffle(chars)
    return "".join(chars)


class UsersClient:
    """Client for security user operations."""

    def __init__(self, transport: "HTTPTransport") -> None:
        """
        Initialize the users client.

        Args:
            transport: HTTP transport for making requests
        """
        self.transport = transport

    def get(self, name: str) -> RepositoryUser:
        """
        Get a user.

        Raises:
            NotFoundError: If the user does not exist
        """
        response = self.transport.request("GET", f"/api/security/users/{name}")
        if not response.ok:
            raise NotFoundError(
                "USER_NOT_FOUND", f"User {name} not found", response.status_code
            )
        data = response.data if isinstance(response.data, dict) else {}
        return RepositoryUser(
            name=data.get("name", ""),
            email=data.get("email", ""),
            admin=bool(data.get("admin", False)),
            profile_updatable=bool(data.get("profileUpdatable", False)),
            disable_ui_access=bool(data.get("disableUIAccess", False)),
            realm=data.get("realm", ""),
            groups=list(data.get("groups") or []),
        )

    def create(self, details: UserDetails) -> tuple[str, APIResponse]:
        """
        Create (or replace) a user.

        A random password is generated when ``details.password`` is empty.

        Args:
            details: User document

        Returns:
            Tuple of the password that was set and the service response
        """
        if not details.password:
            details.password = generate_random_password()
        response = self.transport.request(
            "PUT", f"/api/security/users/{details.name}", body=details.to_dict()
        )
        return details.password, response

    def delete(self, name: str) -> APIResponse:
        """Delete a user."""
        return self.transport.request("DELETE", f"/api/security/users/{name}")
