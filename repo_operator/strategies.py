"""
Per-type provisioning strategies.

A strategy turns one Repository into the set of remote resources its type
needs: maven gets a snapshot and a release repository pair, docker gets a
single pair plus credential wiring, every other type gets a single pair.

Provisioning order within one reconciliation:

1. ensure each local/virtual repository pair, persisting the derived status
   after each one when its code changed
2. stop here if the status is Conflict
3. wire credentials (docker) and sync permissions

Cleanup runs the same resources in reverse and never raises.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from repo_operator.logging import get_logger
from repo_operator.naming import (
    DOCKER,
    MAVEN,
    local_key,
    maven_keys,
    permission_target_name,
    repository_key,
    repository_user_name,
)
from repo_operator.permissions import PermissionSynchronizer
from repo_operator.provisioning import (
    CONFLICT_STATE,
    CleanupReport,
    ProvisionResult,
    RepositoryProvisioner,
)
from repo_operator.types.resources import Repository, RepositoryStatus
from repo_operator.wiring import CredentialWiring

if TYPE_CHECKING:
    from repo_operator.service import RepositoryService
    from repo_operator.store import ClusterStore

logger = get_logger("reconcile")


class ProvisioningStrategy(ABC):
    """Base strategy: one local/virtual pair per key in ``repository_keys``."""

    def __init__(
        self,
        service: "RepositoryService",
        store: "ClusterStore",
        repository_url: str = "",
    ) -> None:
        self.service = service
        self.store = store
        self.repository_url = repository_url.rstrip("/")
        self.provisioner = RepositoryProvisioner(service)
        self.permissions = PermissionSynchronizer(service)

    @abstractmethod
    def repository_keys(self, repository: Repository) -> list[str]:
        """Virtual repository keys to provision, in order."""

    def url_key(self, repository: Repository) -> str:
        """Virtual key published in ``status.repourl``."""
        return self.repository_keys(repository)[-1]

    def permission_users(self, repository: Repository) -> list[str]:
        return list(repository.spec.users)

    def ensure_repositories(self, repository: Repository) -> Repository:
        """
        Ensure every pair, persisting the status after each one.

        Every pair is judged against the status code stored when the run
        started; once any pair conflicts the result stays Conflict. Persisting
        after each pair means a retry after a failure part-way through sees
        the pairs already created as managed.

        Returns:
            The Repository as stored after the last status write
        """
        stored_code = repository.status.status_code
        result: ProvisionResult | None = None
        for key in self.repository_keys(repository):
            pair = self.provisioner.ensure_repositories(
                key,
                repository.spec.repo_type,
                repository.namespace,
                stored_code,
            )
            if result is None or not result.conflict:
                result = pair
            repository = self.persist_status(repository, result)
        return repository

    def persist_status(self, repository: Repository, result: ProvisionResult) -> Repository:
        status = self.derive_status(repository, result)
        if status == repository.status:
            return repository
        updated = repository.copy()
        updated.status = status
        return self.store.update_status(updated)

    def derive_status(
        self, repository: Repository, result: ProvisionResult
    ) -> RepositoryStatus:
        """Status to store: unchanged unless the result's code differs."""
        if result.status_code == repository.status.status_code:
            return repository.status
        return RepositoryStatus(
            status_code=result.status_code,
            state=result.state,
            repo_url=f"{self.repository_url}/{self.url_key(repository)}",
        )

    def grant_access(self, repository: Repository) -> None:
        self.permissions.sync(
            repository.name,
            repository.spec.repo_type,
            repository.namespace,
            self.permission_users(repository),
            [local_key(key) for key in self.repository_keys(repository)],
        )

    def provision(self, repository: Repository) -> RepositoryStatus:
        """
        Converge remote state for ``repository``.

        Args:
            repository: The Repository as currently stored (spec and status)

        Returns:
            The status now stored on the Repository

        Raises:
            RepoOperatorError: On any remote or store failure; the caller retries
        """
        repository = self.ensure_repositories(repository)
        status = repository.status

        if status.state == CONFLICT_STATE:
            logger.info(
                f"{repository.namespace}/{repository.name} is in conflict state - "
                "not creating permission target"
            )
            return status

        self.grant_access(repository)
        return status

    def cleanup(self, repository: Repository) -> CleanupReport:
        """Delete every remote resource this strategy creates, best effort."""
        report = CleanupReport()
        for key in self.repository_keys(repository):
            report.merge(self.provisioner.delete_repositories(key))
        report.merge(
            self.provisioner.delete_permission_target(
                permission_target_name(repository.name, repository.spec.repo_type)
            )
        )
        return report


class MavenStrategy(ProvisioningStrategy):
    """Separate snapshot and release repositories."""

    def repository_keys(self, repository: Repository) -> list[str]:
        snapshot, release = maven_keys(repository.name)
        return [snapshot, release]


class DockerStrategy(ProvisioningStrategy):
    """One repository pair plus an internal user and a linked pull secret."""

    def __init__(
        self,
        service: "RepositoryService",
        store: "ClusterStore",
        repository_url: str = "",
    ) -> None:
        super().__init__(service, store, repository_url)
        self.wiring = CredentialWiring(store, self.provisioner, repository_url)

    def repository_keys(self, repository: Repository) -> list[str]:
        return [repository_key(repository.name, DOCKER)]

    def permission_users(self, repository: Repository) -> list[str]:
        return [*repository.spec.users, repository_user_name(repository.name)]

    def grant_access(self, repository: Repository) -> None:
        self.wiring.ensure(repository)
        super().grant_access(repository)

    def cleanup(self, repository: Repository) -> CleanupReport:
        report = CleanupReport()
        key = repository_key(repository.name, DOCKER)
        report.merge(self.provisioner.delete_repositories(key))
        report.merge(self.provisioner.delete_user(repository.name))
        report.merge(
            self.provisioner.delete_permission_target(
                permission_target_name(repository.name, DOCKER)
            )
        )
        report.merge(self.wiring.remove(repository))
        return report


class OtherStrategy(ProvisioningStrategy):
    """Any other package type: one repository pair with the type's default layout."""

    def repository_keys(self, repository: Repository) -> list[str]:
        return [repository_key(repository.name, repository.spec.repo_type)]


STRATEGIES: dict[str, type[ProvisioningStrategy]] = {
    MAVEN: MavenStrategy,
    DOCKER: DockerStrategy,
}


def strategy_class(repo_type: str) -> type[ProvisioningStrategy]:
    return STRATEGIES.get(repo_type, OtherStrategy)
