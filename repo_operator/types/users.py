"""User-related data models."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class UserDetails:
    """Document sent when creating or replacing a user."""

    name: str
    email: str
    password: str
    admin: bool = False
    profile_updatable: bool = False
    disable_ui_access: bool = False
    internal_password_disabled: bool = False
    realm: str = ""
    groups: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "email": self.email,
            "password": self.password,
            "admin": self.admin,
            "profileUpdatable": self.profile_updatable,
            "disableUIAccess": self.disable_ui_access,
            "internalPasswordDisabled": self.internal_password_disabled,
        }
        if self.realm:
            data["realm"] = self.realm
        if self.groups:
            data["groups"] = list(self.groups)
        return data


@dataclass
class RepositoryUser:
    """User as returned by the service (never includes the password)."""

    name: str
    email: str = ""
    admin: bool = False
    profile_updatable: bool = False
    disable_ui_access: bool = False
    realm: str = ""
    groups: list[str] = field(default_factory=list)
