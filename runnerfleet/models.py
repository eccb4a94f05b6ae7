"""Resource objects managed by the runner controllers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .labels import LabelSelector

__all__ = [
    "GROUP_VERSION",
    "ControllerReferenceError",
    "OwnerReference",
    "ObjectMeta",
    "RunnerSpec",
    "RunnerTemplate",
    "Runner",
    "RunnerDeploymentSpec",
    "RunnerDeploymentStatus",
    "RunnerDeployment",
    "RunnerReplicaSetSpec",
    "RunnerReplicaSetStatus",
    "RunnerReplicaSet",
    "set_controller_reference",
    "get_controller_of",
]

GROUP_VERSION = "actions.summerwind.dev/v1alpha1"


class ControllerReferenceError(ValueError):
    """Raised when a controller reference cannot be set."""


@dataclass
class OwnerReference:
    """Points from a dependent object to the object that owns it."""

    api_version: str
    kind: str
    name: str
    uid: str = ""
    controller: bool = False
    block_owner_deletion: bool = False


@dataclass
class ObjectMeta:
    """Identity, labels and lifecycle data shared by all resources."""

    name: str = ""
    generate_name: str = ""
    namespace: str = ""
    uid: str = ""
    labels: dict[str, str] | None = None
    annotations: dict[str, str] | None = None
    creation_timestamp: datetime | None = None
    deletion_timestamp: datetime | None = None
    owner_references: list[OwnerReference] = field(default_factory=list)


@dataclass
class RunnerSpec:
    """Where a runner registers and how its pod is built."""

    repository: str = ""
    organization: str = ""
    enterprise: str = ""
    group: str = ""
    labels: list[str] | None = None
    image: str = ""
    ephemeral: bool | None = None
    env: dict[str, str] | None = None


@dataclass
class RunnerTemplate:
    """Metadata and spec stamped onto every runner of a set."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: RunnerSpec = field(default_factory=RunnerSpec)


@dataclass
class Runner:
    """A single self-hosted runner."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: RunnerSpec = field(default_factory=RunnerSpec)


@dataclass
class RunnerDeploymentSpec:
    replicas: int | None = None
    selector: LabelSelector | None = None
    template: RunnerTemplate = field(default_factory=RunnerTemplate)
    effective_time: datetime | None = None


@dataclass
class RunnerDeploymentStatus:
    available_replicas: int | None = None
    ready_replicas: int | None = None
    desired_replicas: int | None = None
    replicas: int | None = None
    updated_replicas: int | None = None


@dataclass
class RunnerDeployment:
    """Keeps a replica set of runners in line with a template."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: RunnerDeploymentSpec = field(default_factory=RunnerDeploymentSpec)
    status: RunnerDeploymentStatus = field(default_factory=RunnerDeploymentStatus)


@dataclass
class RunnerReplicaSetSpec:
    replicas: int | None = None
    selector: LabelSelector | None = None
    template: RunnerTemplate = field(default_factory=RunnerTemplate)
    effective_time: datetime | None = None


@dataclass
class RunnerReplicaSetStatus:
    replicas: int | None = None
    available_replicas: int | None = None
    ready_replicas: int | None = None


@dataclass
class RunnerReplicaSet:
    """A fixed number of runners created from one template."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: RunnerReplicaSetSpec = field(default_factory=RunnerReplicaSetSpec)
    status: RunnerReplicaSetStatus = field(default_factory=RunnerReplicaSetStatus)


def get_controller_of(obj) -> OwnerReference | None:
    """Return the owner reference marked as controller, if any."""
    for ref in obj.metadata.owner_references:
        if ref.controller:
            return ref
    return None


def set_controller_reference(owner, obj, kind: str) -> None:
    """Make ``owner`` (of the given kind) the controller of ``obj``.

    Raises ControllerReferenceError for a cross-namespace reference or when
    ``obj`` is already controlled by another object.
    """
    owner_meta = owner.metadata
    obj_meta = obj.metadata

    if owner_meta.namespace and owner_meta.namespace != obj_meta.namespace:
        raise ControllerReferenceError(
            f"cross-namespace owner references are disallowed, owner's namespace "
            f"{owner_meta.namespace}, obj's namespace {obj_meta.namespace}"
        )

    ref = OwnerReference(
        api_version=GROUP_VERSION,
        kind=kind,
        name=owner_meta.name,
        uid=owner_meta.uid,
        controller=True,
        block_owner_deletion=True,
    )

    existing = get_controller_of(obj)
    if existing is not None and not _same_owner(existing, ref):
        raise ControllerReferenceError(
            f"object {obj_meta.namespace}/{obj_meta.name or obj_meta.generate_name} "
            f"is already owned by another {existing.kind} controller {existing.name}"
        )

    refs = [r for r in obj_meta.owner_references if not _same_owner(r, ref)]
    refs.append(ref)
    obj_meta.owner_references = refs


def _same_owner(a: OwnerReference, b: OwnerReference) -> bool:
    group_a = a.api_version.split("/")[0] if "/" in a.api_version else ""
    group_b = b.api_version.split("/")[0] if "/" in b.api_version else ""
    return group_a == group_b and a.kind == b.kind and a.name == b.name