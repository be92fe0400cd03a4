"""Cluster resource models.

Thin dataclass views over the Kubernetes objects the operator reads and
writes: the Repository custom resource, Secrets and ServiceAccounts.
Each converts to and from the API server's JSON representation.
"""

import base64
import copy
from dataclasses import dataclass, field
from typing import Any, ClassVar

REPOSITORY_GROUP = "repository.storage.sebshift.io"
REPOSITORY_VERSION = "v1beta1"
REPOSITORY_PLURAL = "repositories"


@dataclass
class OwnerReference:
    api_version: str
    kind: str
    name: str
    uid: str
    controller: bool = False
    block_owner_deletion: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "name": self.name,
            "uid": self.uid,
            "controller": self.controller,
            "blockOwnerDeletion": self.block_owner_deletion,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OwnerReference":
        return cls(
            api_version=data.get("apiVersion", ""),
            kind=data.get("kind", ""),
            name=data.get("name", ""),
            uid=data.get("uid", ""),
            controller=bool(data.get("controller", False)),
            block_owner_deletion=bool(data.get("blockOwnerDeletion", False)),
        )


@dataclass
class ObjectMeta:
    name: str
    namespace: str = ""
    uid: str = ""
    resource_version: str = ""
    deletion_timestamp: str | None = None
    finalizers: list[str] = field(default_factory=list)
    labels: dict[str, str] = field(default_factory=dict)
    owner_references: list[OwnerReference] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name}
        if self.namespace:
            data["namespace"] = self.namespace
        if self.uid:
            data["uid"] = self.uid
        if self.resource_version:
            data["resourceVersion"] = self.resource_version
        if self.deletion_timestamp:
            data["deletionTimestamp"] = self.deletion_timestamp
        # Always sent so that an emptied list clears the field on update
        data["finalizers"] = list(self.finalizers)
        if self.labels:
            data["labels"] = dict(self.labels)
        if self.owner_references:
            data["ownerReferences"] = [ref.to_dict() for ref in self.owner_references]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ObjectMeta":
        return cls(
            name=data.get("name", ""),
            namespace=data.get("namespace", ""),
            uid=data.get("uid", ""),
            resource_version=str(data.get("resourceVersion") or ""),
            deletion_timestamp=data.get("deletionTimestamp"),
            finalizers=list(data.get("finalizers") or []),
            labels=dict(data.get("labels") or {}),
            owner_references=[
                OwnerReference.from_dict(ref) for ref in data.get("ownerReferences") or []
            ],
        )


@dataclass
class RepositorySpec:
    repo_type: str
    users: list[str] = field(default_factory=list)


@dataclass
class RepositoryStatus:
    status_code: int = 0
    state: str = ""
    repo_url: str = ""


@dataclass
class Repository:
    """The Repository custom resource."""

    kind: ClassVar[str] = "Repository"
    api_version: ClassVar[str] = f"{REPOSITORY_GROUP}/{REPOSITORY_VERSION}"

    metadata: ObjectMeta
    spec: RepositorySpec
    status: RepositoryStatus = field(default_factory=RepositoryStatus)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace

    @property
    def is_being_deleted(self) -> bool:
        return bool(self.metadata.deletion_timestamp)

    def has_finalizer(self, finalizer: str) -> bool:
        return finalizer in self.metadata.finalizers

    def copy(self) -> "Repository":
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": self.metadata.to_dict(),
            "spec": {"repotype": self.spec.repo_type, "users": list(self.spec.users)},
            "status": {
                "statuscode": self.status.status_code,
                "state": self.status.state,
                "repourl": self.status.repo_url,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Repository":
        spec = data.get("spec") or {}
        status = data.get("status") or {}
        return cls(
            metadata=ObjectMeta.from_dict(data.get("metadata") or {}),
            spec=RepositorySpec(
                repo_type=spec.get("repotype", ""),
                users=list(spec.get("users") or []),
            ),
            status=RepositoryStatus(
                status_code=int(status.get("statuscode") or 0),
                state=status.get("state", ""),
                repo_url=status.get("repourl", ""),
            ),
        )


@dataclass
class ObjectReference:
    name: str
    namespace: str = ""

    def to_dict(self) -> dict[str, Any]:
        data = {"name": self.name}
        if self.namespace:
            data["namespace"] = self.namespace
        return data


@dataclass
class ServiceAccount:
    kind: ClassVar[str] = "ServiceAccount"
    api_version: ClassVar[str] = "v1"

    metadata: ObjectMeta
    secrets: list[ObjectReference] = field(default_factory=list)
    image_pull_secrets: list[ObjectReference] = field(default_factory=list)

    def copy(self) -> "ServiceAccount":
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": self.metadata.to_dict(),
            "secrets": [ref.to_dict() for ref in self.secrets],
            # Image pull secrets are local references: name only
            "imagePullSecrets": [{"name": ref.name} for ref in self.image_pull_secrets],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ServiceAccount":
        return cls(
            metadata=ObjectMeta.from_dict(data.get("metadata") or {}),
            secrets=[
                ObjectReference(name=s.get("name", ""), namespace=s.get("namespace", ""))
                for s in data.get("secrets") or []
            ],
            image_pull_secrets=[
                ObjectReference(name=s.get("name", ""))
                for s in data.get("imagePullSecrets") or []
            ],
        )


@dataclass
class Secret:
    kind: ClassVar[str] = "Secret"
    api_version: ClassVar[str] = "v1"

    metadata: ObjectMeta
    type: str = "Opaque"
    data: dict[str, bytes] = field(default_factory=dict)

    def copy(self) -> "Secret":
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": self.metadata.to_dict(),
            "type": self.type,
            "data": {
                key: base64.b64encode(value).decode("ascii")
                for key, value in self.data.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Secret":
        return cls(
            metadata=ObjectMeta.from_dict(data.get("metadata") or {}),
            type=data.get("type", "Opaque"),
            data={
                key: base64.b64decode(value)
                for key, value in (data.get("data") or {}).items()
            },
        )
