"""
Credential wiring for docker repositories.

A docker Repository gets an internal service user whose credentials are
stored in a ``kubernetes.io/dockerconfigjson`` Secret. That Secret is linked
to the namespace's ``default`` service account as an image pull secret and
to the ``builder`` service account as a mountable secret.

Service accounts are shared by every Repository in a namespace, so links
are only written when they actually change, and unlinking removes nothing
but the Secret owned by the Repository being cleaned up. Updates are plain
read-modify-write: two Repositories wiring the same service account at the
same moment can race, and the loser fails with ConflictError and is retried
by the reconcile loop.
"""

import base64
import json
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from repo_operator.exceptions import NotFoundError
from repo_operator.logging import get_logger
from repo_operator.naming import docker_secret_name, repository_user_name
from repo_operator.provisioning import CleanupReport
from repo_operator.types.resources import (
    ObjectMeta,
    ObjectReference,
    OwnerReference,
    Repository,
    Secret,
    ServiceAccount,
)

if TYPE_CHECKING:
    from repo_operator.provisioning import RepositoryProvisioner
    from repo_operator.store import ClusterStore

logger = get_logger("wiring")

DOCKER_CONFIG_JSON_KEY = ".dockerconfigjson"
DOCKER_CONFIG_JSON_TYPE = "kubernetes.io/dockerconfigjson"
DEFAULT_SERVICE_ACCOUNT = "default"
BUILDER_SERVICE_ACCOUNT = "builder"
SECRET_LABELS = {"origin": "repo-operator", "type": "dockercfg"}


def encode_docker_auth(username: str, password: str) -> str:
    return base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")


def docker_config_json(username: str, password: str, server: str) -> bytes:
    """Render a registry credential file: ``{"auths": {server: {"auth": ...}}}``."""
    document = {"auths": {server: {"auth": encode_docker_auth(username, password)}}}
    return json.dumps(document).encode("utf-8")


def registry_server(repository_url: str, fallback: str) -> str:
    """Registry host for the credential file; ``fallback`` when no URL is configured."""
    return urlparse(repository_url).netloc or fallback


def generate_repo_secret(
    namespace: str, secret_name: str, username: str, password: str, server: str
) -> Secret:
    return Secret(
        metadata=ObjectMeta(
            name=secret_name, namespace=namespace, labels=dict(SECRET_LABELS)
        ),
        type=DOCKER_CONFIG_JSON_TYPE,
        data={DOCKER_CONFIG_JSON_KEY: docker_config_json(username, password, server)},
    )


def _same_owner(a: OwnerReference, b: OwnerReference) -> bool:
    return a.api_version == b.api_version and a.kind == b.kind and a.name == b.name


def set_owner_reference(owner: Repository, obj: Secret) -> None:
    """Add (or refresh) a non-controller owner reference to ``owner`` on ``obj``."""
    ref = OwnerReference(
        api_version=owner.api_version,
        kind=owner.kind,
        name=owner.name,
        uid=owner.metadata.uid,
        controller=False,
        block_owner_deletion=False,
    )
    refs = obj.metadata.owner_references
    for i, existing in enumerate(refs):
        if _same_owner(existing, ref):
            refs[i] = ref
            return
    refs.append(ref)


def link_image_pull_secret(sa: ServiceAccount, secret_name: str) -> bool:
    """Add ``secret_name`` as an image pull secret. Returns True if ``sa`` changed."""
    if any(ref.name == secret_name for ref in sa.image_pull_secrets):
        return False
    sa.image_pull_secrets.append(ObjectReference(name=secret_name))
    return True


def link_secret(sa: ServiceAccount, secret_name: str) -> bool:
    """Add ``secret_name`` to the mountable secrets. Returns True if ``sa`` changed."""
    if any(ref.name == secret_name for ref in sa.secrets):
        return False
    sa.secrets.append(ObjectReference(name=secret_name, namespace=sa.metadata.namespace))
    return True


def unlink_image_pull_secret(sa: ServiceAccount, repository_name: str) -> bool:
    """Drop the pull secret owned by ``repository_name``. Returns True if ``sa`` changed."""
    secret_name = docker_secret_name(repository_name)
    kept = [ref for ref in sa.image_pull_secrets if ref.name != secret_name]
    changed = len(kept) != len(sa.image_pull_secrets)
    sa.image_pull_secrets = kept
    return changed


def unlink_secret(sa: ServiceAccount, repository_name: str) -> bool:
    """Drop the secret owned by ``repository_name``. Returns True if ``sa`` changed."""
    secret_name = docker_secret_name(repository_name)
    kept = [ref for ref in sa.secrets if ref.name != secret_name]
    changed = len(kept) != len(sa.secrets)
    sa.secrets = kept
    return changed


class CredentialWiring:
    """Creates and removes the pull-secret wiring for one docker Repository."""

    def __init__(
        self,
        store: "ClusterStore",
        provisioner: "RepositoryProvisioner",
        repository_url: str = "",
    ) -> None:
        self.store = store
        self.provisioner = provisioner
        self.repository_url = repository_url

    def ensure(self, repository: Repository) -> bool:
        """
        Wire credentials for ``repository`` unless its Secret already exists.

        The Secret is created last: until it exists every step is simply
        redone on the next reconciliation, and once it exists none is.

        Returns:
            True if wiring was performed, False if the Secret was already there

        Raises:
            RepoOperatorError: If any step fails
        """
        namespace, name = repository.namespace, repository.name
        secret_name = docker_secret_name(name)
        try:
            self.store.get(Secret, namespace, secret_name)
            return False
        except NotFoundError:
            pass

        logger.info(f"Creating internal user and pull secret {secret_name} in {namespace}")
        password = self.provisioner.create_repository_user(name)

        default_sa = self.store.get(ServiceAccount, namespace, DEFAULT_SERVICE_ACCOUNT)
        builder_sa = self.store.get(ServiceAccount, namespace, BUILDER_SERVICE_ACCOUNT)

        if link_image_pull_secret(default_sa, secret_name):
            logger.info(f"Linking {secret_name} to {DEFAULT_SERVICE_ACCOUNT} as pull secret")
            self.store.update(default_sa)
        if link_secret(builder_sa, secret_name):
            logger.info(f"Linking {secret_name} to {BUILDER_SERVICE_ACCOUNT}")
            self.store.update(builder_sa)

        secret = generate_repo_secret(
            namespace,
            secret_name,
            repository_user_name(name),
            password,
            registry_server(self.repository_url, secret_name),
        )
        set_owner_reference(repository, secret)
        self.store.create(secret)
        return True

    def remove(self, repository: Repository) -> CleanupReport:
        """
        Unlink the Repository's Secret from both service accounts.

        The Secret itself is garbage collected through its owner reference.
        """
        report = CleanupReport()
        namespace, name = repository.namespace, repository.name
        for sa_name, unlink in (
            (BUILDER_SERVICE_ACCOUNT, unlink_secret),
            (DEFAULT_SERVICE_ACCOUNT, unlink_image_pull_secret),
        ):
            report.run(
                f"service account link {namespace}/{sa_name}",
                lambda sa_name=sa_name, unlink=unlink: self._unlink(namespace, sa_name, name, unlink),
            )
        return report

    def _unlink(self, namespace: str, sa_name: str, repository_name: str, unlink) -> None:
        try:
            sa = self.store.get(ServiceAccount, namespace, sa_name)
        except NotFoundError:
            logger.info(f"Service account {namespace}/{sa_name} not found - nothing to unlink")
            return
        if unlink(sa, repository_name):
            self.store.update(sa)
