"""Repository configuration models.

Local, remote and virtual repositories share a common field set and differ
by ``rclass``. ``parse_repository_config`` dispatches on that field.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar

LOCAL_REPO_MIME_TYPE = "application/vnd.org.jfrog.artifactory.repositories.LocalRepositoryConfiguration+json"
REMOTE_REPO_MIME_TYPE = "application/vnd.org.jfrog.artifactory.repositories.RemoteRepositoryConfiguration+json"
VIRTUAL_REPO_MIME_TYPE = "application/vnd.org.jfrog.artifactory.repositories.VirtualRepositoryConfiguration+json"


def _get(data: dict[str, Any], camel: str, snake: str, default: Any = None) -> Any:
    """Get value from dict, trying camelCase first then snake_case."""
    return data.get(camel) if camel in data else data.get(snake, default)


@dataclass
class RepositoryConfig:
    """Fields common to every repository class."""

    rclass: ClassVar[str] = ""
    mime_type: ClassVar[str] = ""

    key: str
    package_type: str = ""
    description: str = ""
    notes: str = ""
    includes_pattern: str = ""
    excludes_pattern: str = ""
    layout_ref: str = ""
    handle_releases: bool | None = None
    handle_snapshots: bool | None = None
    property_sets: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the service's camelCase JSON, omitting empty values."""
        data: dict[str, Any] = {
            "key": self.key,
            "rclass": self.rclass,
            "packageType": self.package_type,
            "description": self.description,
            "notes": self.notes,
            "includesPattern": self.includes_pattern,
            "excludesPattern": self.excludes_pattern,
            "repoLayoutRef": self.layout_ref,
            "handleReleases": self.handle_releases,
            "handleSnapshots": self.handle_snapshots,
            "propertySets": self.property_sets,
        }
        data.update(self._extra_fields())
        return {k: v for k, v in data.items() if v not in (None, "", [])}

    def _extra_fields(self) -> dict[str, Any]:
        return {}

    @classmethod
    def _common_kwargs(cls, data: dict[str, Any]) -> dict[str, Any]:
        return {
            "key": data.get("key", ""),
            "package_type": _get(data, "packageType", "package_type", ""),
            "description": data.get("description", ""),
            "notes": data.get("notes", ""),
            "includes_pattern": _get(data, "includesPattern", "includes_pattern", ""),
            "excludes_pattern": _get(data, "excludesPattern", "excludes_pattern", ""),
            "layout_ref": _get(data, "repoLayoutRef", "layout_ref", ""),
            "handle_releases": _get(data, "handleReleases", "handle_releases"),
            "handle_snapshots": _get(data, "handleSnapshots", "handle_snapshots"),
            "property_sets": _get(data, "propertySets", "property_sets") or [],
        }


@dataclass
class LocalRepositoryConfig(RepositoryConfig):
    """A local repository: the deployment target for artifacts."""

    rclass: ClassVar[str] = "local"
    mime_type: ClassVar[str] = LOCAL_REPO_MIME_TYPE

    checksum_policy_type: str = ""
    docker_api_version: str = ""
    xray_index: bool = False

    def _extra_fields(self) -> dict[str, Any]:
        return {
            "checksumPolicyType": self.checksum_policy_type,
            "dockerApiVersion": self.docker_api_version,
            "xrayIndex": self.xray_index or None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LocalRepositoryConfig":
        return cls(
            **cls._common_kwargs(data),
            checksum_policy_type=data.get("checksumPolicyType", ""),
            docker_api_version=data.get("dockerApiVersion", ""),
            xray_index=bool(data.get("xrayIndex", False)),
        )


@dataclass
class RemoteRepositoryConfig(RepositoryConfig):
    """A remote repository: a caching proxy for an external registry."""

    rclass: ClassVar[str] = "remote"
    mime_type: ClassVar[str] = REMOTE_REPO_MIME_TYPE

    url: str = ""
    offline: bool = False

    def _extra_fields(self) -> dict[str, Any]:
        return {"url": self.url, "offline": self.offline or None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RemoteRepositoryConfig":
        return cls(
            **cls._common_kwargs(data),
            url=data.get("url", ""),
            offline=bool(data.get("offline", False)),
        )


@dataclass
class VirtualRepositoryConfig(RepositoryConfig):
    """A virtual repository aggregating one local and several remote repositories."""

    rclass: ClassVar[str] = "virtual"
    mime_type: ClassVar[str] = VIRTUAL_REPO_MIME_TYPE

    repositories: list[str] = field(default_factory=list)
    default_deployment_repo: str = ""

    def _extra_fields(self) -> dict[str, Any]:
        return {
            "repositories": self.repositories,
            "defaultDeploymentRepo": self.default_deployment_repo,
        }

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        # The service requires the list even when empty
        data["repositories"] = list(self.repositories)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VirtualRepositoryConfig":
        return cls(
            **cls._common_kwargs(data),
            repositories=list(data.get("repositories") or []),
            default_deployment_repo=data.get("defaultDeploymentRepo", ""),
        )


_CONFIG_CLASSES: dict[str, type[RepositoryConfig]] = {
    LocalRepositoryConfig.rclass: LocalRepositoryConfig,
    RemoteRepositoryConfig.rclass: RemoteRepositoryConfig,
    VirtualRepositoryConfig.rclass: VirtualRepositoryConfig,
}


def parse_repository_config(data: dict[str, Any]) -> RepositoryConfig:
    """
    Parse a repository document into the config class matching its ``rclass``.

    Raises:
        ValueError: If ``rclass`` is missing or unknown
    """
    rclass = data.get("rclass", "")
    try:
        config_cls = _CONFIG_CLASSES[rclass]
    except KeyError:
        raise ValueError(f"Unknown repository class: {rclass!r}") from None
    return config_cls.from_dict(data)  # type: ignore[attr-defined]


@dataclass
class RemoteRepository:
    """Summary entry returned when listing repositories."""

    key: str
    type: str
    url: str = ""
    package_type: str = ""
