"""Deterministic names for everything the operator creates.

Every remote key and cluster object name is derived from the Repository's
name and type alone, so a re-run always addresses the same resources.
"""

MAVEN = "maven"
DOCKER = "docker"

LOCAL_SUFFIX = "-local"
SNAPSHOT_SUFFIX = "-snapshot"
RELEASE_SUFFIX = "-release"
USER_SUFFIX = "-repo-user"
PERMISSION_SUFFIX = "-repo-permission"
SECRET_SUFFIX = "-repo-docker-secret"


def repository_key(name: str, repo_type: str) -> str:
    """Virtual repository key: ``<name>-<repoType>``."""
    return f"{name}-{repo_type}"


def local_key(repository_key: str) -> str:
    """Local repository key paired with a virtual key."""
    return f"{repository_key}{LOCAL_SUFFIX}"


def maven_keys(name: str) -> tuple[str, str]:
    """Snapshot and release virtual keys for a maven Repository."""
    base = repository_key(name, MAVEN)
    return f"{base}{SNAPSHOT_SUFFIX}", f"{base}{RELEASE_SUFFIX}"


def permission_target_name(name: str, repo_type: str) -> str:
    return f"{name}-{repo_type}{PERMISSION_SUFFIX}"


def repository_user_name(name: str) -> str:
    return f"{name}{USER_SUFFIX}"


def docker_secret_name(name: str) -> str:
    return f"{name}{SECRET_SUFFIX}"
