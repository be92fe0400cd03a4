"""
Idempotent provisioning primitives against the repository service.

Every ``ensure_*`` call fetches first and only issues a PUT when the
resource is absent, so repeated reconciliations never re-submit an
unchanged definition. Deletions are best effort: failures are collected
in a ``CleanupReport`` instead of being raised.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from repo_operator.exceptions import NotFoundError, RepoOperatorError
from repo_operator.logging import get_logger
from repo_operator.naming import (
    MAVEN,
    DOCKER,
    RELEASE_SUFFIX,
    SNAPSHOT_SUFFIX,
    local_key,
    repository_user_name,
)
from repo_operator.types.repos import LocalRepositoryConfig, VirtualRepositoryConfig
from repo_operator.types.users import UserDetails

if TYPE_CHECKING:
    from repo_operator.service import RepositoryService

logger = get_logger("provisioning")

OK_STATUS_CODE = 200
OK_STATE = "ok"
CONFLICT_STATUS_CODE = 409
CONFLICT_STATE = "Conflict"


@dataclass
class EnsureResult:
    """Outcome of ensuring a single remote resource."""

    existed: bool
    status_code: int = 0
    state: str = ""


@dataclass
class ProvisionResult:
    """Outcome of ensuring a local/virtual repository pair."""

    status_code: int
    state: str

    @property
    def conflict(self) -> bool:
        return self.state == CONFLICT_STATE


@dataclass
class CleanupReport:
    """Resources a cleanup attempted to delete and the errors it swallowed."""

    attempted: list[str] = field(default_factory=list)
    errors: list[RepoOperatorError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def run(self, description: str, fn: Callable[[], Any]) -> None:
        """Run one deletion, recording rather than raising its failure."""
        self.attempted.append(description)
        try:
            fn()
        except RepoOperatorError as e:
            logger.error(f"Failed to delete {description}: {e}")
            self.errors.append(e)

    def merge(self, other: "CleanupReport") -> None:
        self.attempted.extend(other.attempted)
        self.errors.extend(other.errors)


def local_repository_config(
    repo_key: str, repo_type: str, namespace: str
) -> LocalRepositoryConfig:
    """
    Build the local repository document for a virtual key.

    Maven repositories handle either snapshots or releases depending on the
    key's suffix; docker uses the simple layout; anything else uses the
    package type's default layout.
    """
    config = LocalRepositoryConfig(
        key=local_key(repo_key),
        package_type=repo_type,
        description=f"Local repository for {namespace} namespace in-house libraries",
        layout_ref=f"{repo_type}-default",
        xray_index=True,
    )
    if repo_type == MAVEN:
        config.layout_ref = "maven-2-default"
        config.handle_snapshots = True
        config.handle_releases = True
        if repo_key.endswith(SNAPSHOT_SUFFIX):
            config.handle_releases = False
        elif repo_key.endswith(RELEASE_SUFFIX):
            config.handle_snapshots = False
    elif repo_type == DOCKER:
        config.layout_ref = "simple-default"
    return config


def virtual_repository_config(
    remote_keys: list[str], repo_key: str, repo_type: str, namespace: str
) -> VirtualRepositoryConfig:
    """Build the virtual repository document aggregating remotes plus the local repo."""
    return VirtualRepositoryConfig(
        key=repo_key,
        package_type=repo_type,
        layout_ref="simple-default",
        property_sets=["artifactory"],
        description=f"virtual repository for {namespace} namespace and required remote libraries",
        repositories=[*remote_keys, local_key(repo_key)],
        default_deployment_repo=local_key(repo_key),
    )


class RepositoryProvisioner:
    """Converges repositories and users on the repository service."""

    def __init__(self, service: "RepositoryService") -> None:
        """
        Initialize the provisioner.

        Args:
            service: Repository service client (or an in-memory fake with the same shape)
        """
        self.service = service

    def ensure_local(self, repo_key: str, repo_type: str, namespace: str) -> EnsureResult:
        """
        Ensure the local repository for ``repo_key`` exists.

        Raises:
            RepoOperatorError: On any fetch error other than not-found, or a failed create
        """
        key = local_key(repo_key)
        try:
            existing = self.service.repos.get_local(key)
        except NotFoundError:
            existing = None

        if existing is not None and existing.key == key:
            logger.info(f"Skip reconcile: repository already exists {key}")
            return EnsureResult(existed=True)

        logger.info(f"Creating local repository {key}")
        response = self.service.repos.create(
            key, local_repository_config(repo_key, repo_type, namespace)
        )
        return EnsureResult(
            existed=False, status_code=response.status_code, state=response.state
        )

    def ensure_virtual(self, repo_key: str, repo_type: str, namespace: str) -> EnsureResult:
        """
        Ensure the virtual repository ``repo_key`` exists.

        A new virtual repository aggregates every remote repository of the
        same package type plus the local repository.

        Raises:
            RepoOperatorError: On any fetch error other than not-found, or a failed create
        """
        try:
            existing = self.service.repos.get_virtual(repo_key)
        except NotFoundError:
            existing = None

        if existing is not None and existing.key == repo_key:
            logger.info(f"Skip reconcile: repository already exists {repo_key}")
            return EnsureResult(existed=True)

        remotes = self.service.repos.list_remote(repo_type)
        logger.info(f"Creating virtual repository {repo_key}")
        response = self.service.repos.create(
            repo_key,
            virtual_repository_config(
                [remote.key for remote in remotes], repo_key, repo_type, namespace
            ),
        )
        return EnsureResult(
            existed=False, status_code=response.status_code, state=response.state
        )

    def ensure_repositories(
        self, repo_key: str, repo_type: str, namespace: str, status_code: int
    ) -> ProvisionResult:
        """
        Ensure the local/virtual pair for ``repo_key``.

        When both already existed and the stored status code is not the "ok"
        code, the names collide with repositories this operator did not
        create; a Conflict result is returned instead of adopting them.

        Args:
            repo_key: Virtual repository key
            repo_type: Package type
            namespace: Namespace of the owning Repository
            status_code: Status code currently stored on the Repository

        Returns:
            ProvisionResult with the ok or Conflict code/state
        """
        local = self.ensure_local(repo_key, repo_type, namespace)
        virtual = self.ensure_virtual(repo_key, repo_type, namespace)

        if local.existed and virtual.existed and status_code != OK_STATUS_CODE:
            logger.warning(
                f"Repositories {repo_key} already exist and are not managed here - marking conflict"
            )
            return ProvisionResult(CONFLICT_STATUS_CODE, CONFLICT_STATE)
        return ProvisionResult(OK_STATUS_CODE, OK_STATE)

    def create_repository_user(self, name: str) -> str:
        """
        Create (or reset) the internal user for a Repository.

        Args:
            name: Repository name

        Returns:
            The freshly generated password
        """
        user_name = repository_user_name(name)
        details = UserDetails(
            name=user_name,
            email=f"{user_name}@internal.com",
            password="",
            disable_ui_access=True,
            profile_updatable=False,
            internal_password_disabled=False,
            realm="Internal",
        )
        password, _ = self.service.users.create(details)
        return password

    def delete_repositories(self, repo_key: str) -> CleanupReport:
        """Delete the local then the virtual repository for ``repo_key``."""
        report = CleanupReport()
        key = local_key(repo_key)
        report.run(f"repository {key}", lambda: self.service.repos.delete(key))
        report.run(f"repository {repo_key}", lambda: self.service.repos.delete(repo_key))
        return report

    def delete_user(self, name: str) -> CleanupReport:
        report = CleanupReport()
        user_name = repository_user_name(name)
        report.run(f"user {user_name}", lambda: self.service.users.delete(user_name))
        return report

    def delete_permission_target(self, target_name: str) -> CleanupReport:
        report = CleanupReport()
        report.run(
            f"permission target {target_name}",
            lambda: self.service.permissions.delete(target_name),
        )
        return report
