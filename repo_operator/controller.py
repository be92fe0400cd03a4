"""
Repository reconciliation.

``RepositoryReconciler.reconcile`` is level triggered: each call looks at
the Repository as it is stored now (deletion timestamp, finalizer, spec,
status) and takes the single action that state calls for:

- object gone: nothing to do
- live, no finalizer: add the finalizer and stop, before any remote call
- live, finalizer present: provision through the type's strategy
- deleting, finalizer present: best-effort cleanup, then drop the finalizer
- deleting, no finalizer: nothing to do

``Controller`` feeds watch events into the reconciler and retries failed
reconciliations with capped exponential backoff. At most one
reconciliation per Repository runs at a time because events are processed
sequentially.
"""

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from repo_operator.exceptions import NotFoundError, RateLimitedError, RepoOperatorError
from repo_operator.logging import get_logger, log_reconcile_event
from repo_operator.provisioning import CONFLICT_STATE
from repo_operator.strategies import ProvisioningStrategy, strategy_class
from repo_operator.transport import RetryConfig, compute_backoff
from repo_operator.types.resources import Repository

if TYPE_CHECKING:
    from repo_operator.service import RepositoryService
    from repo_operator.store import ClusterStore

logger = get_logger("reconcile")

FINALIZER = "finalizer.repositories.sebshift.io"


@dataclass(frozen=True)
class Request:
    namespace: str
    name: str


@dataclass
class ReconcileResult:
    requeue: bool = False


class RepositoryReconciler:
    """Reconciles Repository objects against the repository service."""

    def __init__(
        self,
        store: "ClusterStore",
        service: "RepositoryService",
        repository_url: str = "",
    ) -> None:
        """
        Initialize the reconciler.

        Args:
            store: Cluster store holding Repository, Secret and ServiceAccount objects
            service: Repository service client (or an in-memory fake)
            repository_url: Base URL published in ``status.repourl``
        """
        self.store = store
        self.service = service
        self.repository_url = repository_url

    def strategy_for(self, repository: Repository) -> ProvisioningStrategy:
        cls = strategy_class(repository.spec.repo_type)
        return cls(self.service, self.store, self.repository_url)

    def reconcile(self, request: Request) -> ReconcileResult:
        """
        Reconcile one Repository.

        Raises:
            RepoOperatorError: When provisioning or a store write fails; the
                caller is expected to retry with backoff
        """
        log_reconcile_event(request.namespace, request.name, "Reconciling Repository")

        try:
            repository = self.store.get(Repository, request.namespace, request.name)
        except NotFoundError:
            # Deleted after the event was queued; owned objects are garbage collected
            return ReconcileResult()

        if repository.is_being_deleted:
            if repository.has_finalizer(FINALIZER):
                self.finalize(repository)
            return ReconcileResult()

        if not repository.has_finalizer(FINALIZER):
            log_reconcile_event(request.namespace, request.name, "Adding finalizer")
            repository.metadata.finalizers.append(FINALIZER)
            self.store.update(repository)
            return ReconcileResult(requeue=True)

        self.strategy_for(repository).provision(repository)
        return ReconcileResult()

    def finalize(self, repository: Repository) -> None:
        """Clean up remote resources, then remove the finalizer."""
        namespace, name = repository.namespace, repository.name
        if repository.status.state == CONFLICT_STATE:
            log_reconcile_event(
                namespace, name, "Repository is in conflict state - skipping remote cleanup"
            )
        else:
            log_reconcile_event(namespace, name, "Cleaning up remote resources")
            report = self.strategy_for(repository).cleanup(repository)
            for error in report.errors:
                logger.error(f"Cleanup of {namespace}/{name} left an error behind: {error}")

        repository.metadata.finalizers = [
            f for f in repository.metadata.finalizers if f != FINALIZER
        ]
        self.store.update(repository)
        log_reconcile_event(namespace, name, "Finalizer removed")


class Controller:
    """Drives a reconciler from a stream of watch events."""

    def __init__(
        self,
        reconciler: RepositoryReconciler,
        namespace: str | None = None,
        retry_config: RetryConfig | None = None,
    ) -> None:
        self.reconciler = reconciler
        self.namespace = namespace
        self.retry_config = retry_config or RetryConfig(max_retries=5, max_backoff=300.0)

    def run(self) -> None:
        """Reconcile every Repository event until the watch stream ends."""
        for event in self.reconciler.store.watch(self.namespace):
            if event.type == "DELETED":
                continue
            self.process(Request(event.object.namespace, event.object.name))

    def process(self, request: Request) -> bool:
        """
        Reconcile ``request`` until it succeeds without a requeue or retries run out.

        Returns:
            True if the Repository converged
        """
        attempt = 0
        while True:
            try:
                result = self.reconciler.reconcile(request)
            except RepoOperatorError as e:
                if attempt >= self.retry_config.max_retries:
                    logger.error(
                        f"Giving up on {request.namespace}/{request.name} after "
                        f"{attempt + 1} attempts: {e}"
                    )
                    return False
                retry_after = str(e.retry_after) if isinstance(e, RateLimitedError) else None
                wait_time = compute_backoff(self.retry_config, attempt, retry_after)
                logger.warning(
                    f"Reconcile of {request.namespace}/{request.name} failed, "
                    f"retrying in {wait_time:.1f}s: {e}"
                )
                time.sleep(wait_time)
                attempt += 1
                continue
            if not result.requeue:
                return True
