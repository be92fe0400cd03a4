"""Permission target data models."""

from dataclasses import dataclass, field

# read, delete, write, annotate, manage
FULL_ACCESS_ACTIONS = ("r", "d", "w", "n", "m")


@dataclass
class PermissionTarget:
    """A named grant binding principals to actions over a set of repositories."""

    name: str
    includes_pattern: str = "**"
    excludes_pattern: str = ""
    repositories: list[str] = field(default_factory=list)
    users: dict[str, list[str]] = field(default_factory=dict)
    groups: dict[str, list[str]] = field(default_factory=dict)

    @property
    def principal_names(self) -> list[str]:
        """Sorted user principal names."""
        return sorted(self.users)
