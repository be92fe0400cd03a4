"""
Cluster store.

The reconciler only needs get/create/update/watch over three kinds of
objects. ``ClusterStore`` states that contract; ``KubernetesStore`` fulfils
it against a real API server with the official ``kubernetes`` client.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar

from kubernetes import client as k8s_client
from kubernetes import config as k8s_config
from kubernetes import watch as k8s_watch
from kubernetes.client.exceptions import ApiException

from repo_operator.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    RepoOperatorError,
    ServerError,
    ValidationError,
)
from repo_operator.logging import get_logger
from repo_operator.types.resources import (
    REPOSITORY_GROUP,
    REPOSITORY_PLURAL,
    REPOSITORY_VERSION,
    Repository,
    Secret,
    ServiceAccount,
)

logger = get_logger("store")

T = TypeVar("T", Repository, Secret, ServiceAccount)


@dataclass
class WatchEvent:
    type: str  # "ADDED", "MODIFIED", "DELETED"
    object: Repository


class ClusterStore(Protocol):
    """Key-value access to cluster objects with optimistic-concurrency updates."""

    def get(self, kind: type[T], namespace: str, name: str) -> T:
        """Raises NotFoundError when the object does not exist."""
        ...

    def create(self, obj: T) -> T:
        ...

    def update(self, obj: T) -> T:
        """Raises ConflictError when the stored resource version moved on."""
        ...

    def update_status(self, obj: Repository) -> Repository:
        ...

    def watch(self, namespace: str | None = None) -> Iterator[WatchEvent]:
        ...


def translate_api_exception(e: ApiException) -> RepoOperatorError:
    """Map a Kubernetes API failure onto the operator's exception types."""
    status = e.status or 0
    message = e.reason or str(e)
    code = f"KUBERNETES_{status}"
    if status == 401:
        return AuthenticationError(code, message, status)
    if status == 403:
        return AuthorizationError(code, message, status)
    if status == 404:
        return NotFoundError(code, message, status)
    if status == 409:
        return ConflictError(code, message, status)
    if 400 <= status < 500:
        return ValidationError(code, message, status)
    return ServerError(code, message, status or None)


class KubernetesStore:
    """ClusterStore backed by the Kubernetes API server."""

    def __init__(self, api_client: k8s_client.ApiClient | None = None) -> None:
        self._api_client = api_client or k8s_client.ApiClient()
        self._core = k8s_client.CoreV1Api(self._api_client)
        self._custom = k8s_client.CustomObjectsApi(self._api_client)

    @classmethod
    def from_env(cls) -> "KubernetesStore":
        """Use in-cluster credentials when available, otherwise the local kubeconfig."""
        try:
            k8s_config.load_incluster_config()
        except k8s_config.ConfigException:
            k8s_config.load_kube_config()
        return cls()

    def _to_dict(self, obj: Any) -> dict[str, Any]:
        if isinstance(obj, dict):
            return obj
        return self._api_client.sanitize_for_serialization(obj)

    def get(self, kind: type[T], namespace: str, name: str) -> T:
        try:
            if kind is Repository:
                raw = self._custom.get_namespaced_custom_object(
                    REPOSITORY_GROUP, REPOSITORY_VERSION, namespace, REPOSITORY_PLURAL, name
                )
            elif kind is Secret:
                raw = self._core.read_namespaced_secret(name, namespace)
            elif kind is ServiceAccount:
                raw = self._core.read_namespaced_service_account(name, namespace)
            else:
                raise TypeError(f"Unsupported kind: {kind!r}")
        except ApiException as e:
            raise translate_api_exception(e) from e
        return kind.from_dict(self._to_dict(raw))

    def create(self, obj: T) -> T:
        namespace = obj.metadata.namespace
        body = obj.to_dict()
        try:
            if isinstance(obj, Repository):
                raw = self._custom.create_namespaced_custom_object(
                    REPOSITORY_GROUP, REPOSITORY_VERSION, namespace, REPOSITORY_PLURAL, body
                )
            elif isinstance(obj, Secret):
                raw = self._core.create_namespaced_secret(namespace, body)
            else:
                raw = self._core.create_namespaced_service_account(namespace, body)
        except ApiException as e:
            raise translate_api_exception(e) from e
        return type(obj).from_dict(self._to_dict(raw))

    def update(self, obj: T) -> T:
        namespace, name = obj.metadata.namespace, obj.metadata.name
        body = obj.to_dict()
        try:
            if isinstance(obj, Repository):
                raw = self._custom.replace_namespaced_custom_object(
                    REPOSITORY_GROUP, REPOSITORY_VERSION, namespace, REPOSITORY_PLURAL, name, body
                )
            elif isinstance(obj, Secret):
                raw = self._core.replace_namespaced_secret(name, namespace, body)
            else:
                raw = self._core.replace_namespaced_service_account(name, namespace, body)
        except ApiException as e:
            raise translate_api_exception(e) from e
        return type(obj).from_dict(self._to_dict(raw))

    def update_status(self, obj: Repository) -> Repository:
        try:
            raw = self._custom.replace_namespaced_custom_object_status(
                REPOSITORY_GROUP,
                REPOSITORY_VERSION,
                obj.metadata.namespace,
                REPOSITORY_PLURAL,
                obj.metadata.name,
                obj.to_dict(),
            )
        except ApiException as e:
            raise translate_api_exception(e) from e
        return Repository.from_dict(self._to_dict(raw))

    def watch(self, namespace: str | None = None) -> Iterator[WatchEvent]:
        """Stream Repository events, cluster-wide or for one namespace."""
        logger.info(f"Watching repositories in {namespace or 'all namespaces'}")
        watcher = k8s_watch.Watch()
        if namespace:
            stream = watcher.stream(
                self._custom.list_namespaced_custom_object,
                REPOSITORY_GROUP,
                REPOSITORY_VERSION,
                namespace,
                REPOSITORY_PLURAL,
            )
        else:
            stream = watcher.stream(
                self._custom.list_cluster_custom_object,
                REPOSITORY_GROUP,
                REPOSITORY_VERSION,
                REPOSITORY_PLURAL,
            )
        try:
            for event in stream:
                yield WatchEvent(
                    type=event["type"],
                    object=Repository.from_dict(self._to_dict(event["object"])),
                )
        except ApiException as e:
            raise translate_api_exception(e) from e
        finally:
            watcher.stop()
