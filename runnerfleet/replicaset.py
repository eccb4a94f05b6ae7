"""Runner objects derived from runner replica sets."""

from __future__ import annotations

import copy
from datetime import datetime, timedelta

from .deployment import compute_hash
from .labels import LABEL_KEY_RUNNER_TEMPLATE_HASH, clone_and_add_label
from .models import Runner, RunnerReplicaSet, set_controller_reference

__all__ = [
    "SYNC_TIME_ANNOTATION_KEY",
    "ensure_template_hash",
    "new_runner",
    "registration_only_runner_name_for",
]

SYNC_TIME_ANNOTATION_KEY = "sync-time"


def _rfc3339(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.astimezone()
    text = moment.replace(microsecond=0).isoformat()
    if moment.utcoffset() == timedelta(0):
        return text[: -len("+00:00")] + "Z"
    return text


def ensure_template_hash(rs: RunnerReplicaSet) -> str:
    """Make sure ``rs`` carries a runner template hash label and return it.

    A replica set created directly by a user may lack the label.  It is then
    computed from the spec, ignoring replicas and effective time, and added
    to both the replica set's labels and its template's labels.  Only the
    given object is changed.
    """
    if rs.metadata.labels is None:
        rs.metadata.labels = {}

    existing = rs.metadata.labels.get(LABEL_KEY_RUNNER_TEMPLATE_HASH, "")
    if existing:
        return existing

    spec = copy.deepcopy(rs.spec)
    spec.replicas = None
    spec.effective_time = None
    template_hash = compute_hash(spec)

    rs.metadata.labels = clone_and_add_label(
        rs.metadata.labels, LABEL_KEY_RUNNER_TEMPLATE_HASH, template_hash
    )
    rs.spec.template.metadata.labels = clone_and_add_label(
        rs.spec.template.metadata.labels, LABEL_KEY_RUNNER_TEMPLATE_HASH, template_hash
    )
    return template_hash


def new_runner(rs: RunnerReplicaSet, now: datetime | None = None) -> Runner:
    """Build a runner from the template of ``rs``, controlled by ``rs``.

    The runner is stamped with a sync-time annotation for ``now`` (the
    current time by default).  Raises ControllerReferenceError when ``rs``
    cannot become the runner's controller.
    """
    if now is None:
        now = datetime.now().astimezone()

    metadata = copy.deepcopy(rs.spec.template.metadata)
    metadata.generate_name = rs.metadata.name + "-"
    metadata.namespace = rs.metadata.namespace
    annotations = dict(metadata.annotations or {})
    annotations[SYNC_TIME_ANNOTATION_KEY] = _rfc3339(now)
    metadata.annotations = annotations

    runner = Runner(metadata=metadata, spec=copy.deepcopy(rs.spec.template.spec))
    set_controller_reference(rs, runner, "RunnerReplicaSet")
    return runner


def registration_only_runner_name_for(rs_name: str) -> str:
    """Return the name of the registration-only runner of a replica set."""
    return rs_name + "-registration-only"