"""Reconciliation of runner deployments into runner replica sets."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Callable, Protocol

from .hashing import fnv_hash_string_objects
from .labels import (
    LABEL_KEY_RUNNER_DEPLOYMENT_NAME,
    LABEL_KEY_RUNNER_TEMPLATE_HASH,
    LabelSelector,
    clone_and_add_label,
    clone_selector_and_add_label,
    get_int_or_default,
)
from .models import (
    ControllerReferenceError,
    ObjectMeta,
    RunnerDeployment,
    RunnerDeploymentStatus,
    RunnerReplicaSet,
    RunnerReplicaSetSpec,
    set_controller_reference,
)

__all__ = [
    "Result",
    "RunnerDeploymentReconciler",
    "compute_hash",
    "get_template_hash",
    "get_selector",
    "new_runner_replica_set",
]

_REQUEUE_DELAY = timedelta(seconds=5)
_DEFAULT_REPLICAS = 1
_EVENT_NORMAL = "Normal"


@dataclass(frozen=True)
class Result:
    """Outcome of one reconciliation."""

    requeue: bool = False
    requeue_after: timedelta | None = None


class _Client(Protocol):
    def get(self, namespace: str, name: str) -> RunnerDeployment | None: ...

    def list_replica_sets(self, namespace: str, owner_name: str) -> list[RunnerReplicaSet]: ...

    def create(self, obj) -> None: ...

    def update(self, obj) -> None: ...

    def delete(self, obj) -> None: ...

    def update_status(self, obj) -> None: ...


def compute_hash(template) -> str:
    """Return a short, word-safe hash of ``template``."""
    return fnv_hash_string_objects(template)


def get_template_hash(rs: RunnerReplicaSet) -> str | None:
    """Return the template hash label of ``rs``, or None if it has none."""
    return (rs.metadata.labels or {}).get(LABEL_KEY_RUNNER_TEMPLATE_HASH)


def get_selector(rd: RunnerDeployment) -> LabelSelector:
    """Return the deployment's selector, defaulting to its name label."""
    if rd.spec.selector is not None:
        return rd.spec.selector
    return LabelSelector(match_labels={LABEL_KEY_RUNNER_DEPLOYMENT_NAME: rd.metadata.name})


def new_runner_replica_set(
    rd: RunnerDeployment, common_runner_labels=()
) -> RunnerReplicaSet:
    """Build the replica set that ``rd`` currently asks for.

    Raises ControllerReferenceError when ``rd`` cannot own the result.
    """
    template = copy.deepcopy(rd.spec.template)
    common = list(common_runner_labels)
    if common:
        template.spec.labels = [*(template.spec.labels or []), *common]

    template_hash = compute_hash(template)

    template.metadata.labels = clone_and_add_label(
        template.metadata.labels, LABEL_KEY_RUNNER_TEMPLATE_HASH, template_hash
    )
    template.metadata.labels = clone_and_add_label(
        template.metadata.labels, LABEL_KEY_RUNNER_DEPLOYMENT_NAME, rd.metadata.name
    )

    selector = clone_selector_and_add_label(
        get_selector(rd), LABEL_KEY_RUNNER_TEMPLATE_HASH, template_hash
    )

    rs = RunnerReplicaSet(
        metadata=ObjectMeta(
            generate_name=rd.metadata.name + "-",
            namespace=rd.metadata.namespace,
            labels=dict(template.metadata.labels),
        ),
        spec=RunnerReplicaSetSpec(
            replicas=rd.spec.replicas,
            selector=selector,
            template=template,
            effective_time=rd.spec.effective_time,
        ),
    )
    set_controller_reference(rd, rs, "RunnerDeployment")
    return rs


def _created_key(rs: RunnerReplicaSet) -> tuple[bool, float]:
    ts = rs.metadata.creation_timestamp
    return (ts is not None, ts.timestamp() if ts is not None else 0.0)


@dataclass
class RunnerDeploymentReconciler:
    """Drives runner replica sets toward what a runner deployment asks for."""

    client: _Client
    common_runner_labels: list[str] = field(default_factory=list)
    log: logging.Logger | None = None
    recorder: Callable[[object, str, str, str], None] | None = None
    name: str = "runnerdeployment-controller"

    @property
    def _log(self) -> logging.Logger:
        return self.log if self.log is not None else logging.getLogger(__name__)

    def _event(self, obj, reason: str, message: str) -> None:
        if self.recorder is not None:
            self.recorder(obj, _EVENT_NORMAL, reason, message)

    def new_runner_replica_set(self, rd: RunnerDeployment) -> RunnerReplicaSet:
        """Build the desired replica set with this reconciler's common labels."""
        return new_runner_replica_set(rd, self.common_runner_labels)

    def reconcile(self, namespace: str, name: str) -> Result:
        """Reconcile one runner deployment; client errors propagate."""
        log = self._log
        key = f"{namespace}/{name}"

        rd = self.client.get(namespace, name)
        if rd is None or rd.metadata.deletion_timestamp is not None:
            return Result()

        sets = sorted(self.client.list_replica_sets(namespace, name), key=_created_key, reverse=True)
        newest = sets[0] if sets else None
        old_sets = sets[1:]

        try:
            desired = self.new_runner_replica_set(rd)
        except ControllerReferenceError as exc:
            self._event(rd, "RunnerAutoscalingFailure", str(exc))
            log.error("Could not create runnerreplicaset: %s (runnerdeployment=%s)", exc, key)
            raise

        if newest is None:
            self.client.create(desired)
            log.info("Created runnerreplicaset (runnerdeployment=%s)", key)
            return Result()

        newest_hash = get_template_hash(newest)
        if newest_hash is None:
            log.info(
                "Failed to get template hash of newest runnerreplicaset resource. It must be in "
                "an invalid state. Please manually delete the runnerreplicaset so that it is recreated"
            )
            return Result()

        desired_hash = get_template_hash(desired)
        if desired_hash is None:
            log.info(
                "Failed to get template hash of desired runnerreplicaset resource. It must be in "
                "an invalid state. Please manually delete the runnerreplicaset so that it is recreated"
            )
            return Result()

        if newest_hash != desired_hash:
            self.client.create(desired)
            log.info("Created runnerreplicaset (runnerdeployment=%s)", key)
            # Requeue so that the old replica sets are cleaned up soon.
            return Result(requeue_after=_REQUEUE_DELAY)

        if newest.spec.selector != desired.spec.selector:
            update_set = copy.deepcopy(newest)
            update_set.spec = copy.deepcopy(desired.spec)
            self.client.update(update_set)
            return Result(requeue_after=_REQUEUE_DELAY)

        current_desired = get_int_or_default(newest.spec.replicas, _DEFAULT_REPLICAS)
        new_desired = get_int_or_default(desired.spec.replicas, _DEFAULT_REPLICAS)

        if current_desired != new_desired:
            updated = copy.deepcopy(newest)
            updated.spec.replicas = new_desired
            updated.spec.effective_time = rd.spec.effective_time
            self.client.update(updated)
            return Result()

        if old_sets:
            ready = newest.status.ready_replicas or 0
            if ready < current_desired:
                log.info(
                    "Waiting until the newest runnerreplicaset to be 100%% available "
                    "(ready=%d desired=%d old=%d)",
                    ready,
                    current_desired,
                    len(old_sets),
                )
                return Result()

            log.info("The newest runnerreplicaset is 100% available. Deleting old runnerreplicasets")

            for rs in old_sets:
                rs_name = rs.metadata.name
                if rs.status.replicas is not None and rs.status.replicas > 0:
                    if rs.spec.replicas == 0:
                        log.debug("Waiting for runnerreplicaset %s to scale to zero", rs_name)
                        continue
                    updated = copy.deepcopy(rs)
                    updated.spec.replicas = 0
                    self.client.update(updated)
                    log.info("Scaled runnerreplicaset %s to zero", rs_name)
                    continue

                self.client.delete(rs)
                self._event(rd, "RunnerReplicaSetDeleted", f"Deleted runnerreplicaset '{rs_name}'")
                log.info("Deleted runnerreplicaset %s", rs_name)

        total_current = sum(rs.status.replicas or 0 for rs in [newest, *old_sets])
        total_available = sum(rs.status.available_replicas or 0 for rs in [newest, *old_sets])

        status = RunnerDeploymentStatus(
            available_replicas=total_available,
            ready_replicas=total_available,
            desired_replicas=new_desired,
            replicas=total_current,
            updated_replicas=newest.status.replicas or 0,
        )

        if rd.status != status:
            updated_rd = copy.deepcopy(rd)
            updated_rd.status = status
            try:
                self.client.update_status(updated_rd)
            except Exception as exc:  # any failure is retried immediately
                log.info("Failed to patch runnerdeployment status. Retrying immediately: %s", exc)
                return Result(requeue=True)

        return Result()