import pytest

from runnerfleet.models import (
    GROUP_VERSION,
    ControllerReferenceError,
    ObjectMeta,
    OwnerReference,
    RunnerDeployment,
    RunnerReplicaSet,
    get_controller_of,
    set_controller_reference,
)


def _deployment(name="example", namespace="ns", uid="uid-1"):
    return RunnerDeployment(metadata=ObjectMeta(name=name, namespace=namespace, uid=uid))


def _replica_set(namespace="ns"):
    return RunnerReplicaSet(metadata=ObjectMeta(generate_name="example-", namespace=namespace))


def test_set_controller_reference_records_owner():
    rd = _deployment()
    rs = _replica_set()
    set_controller_reference(rd, rs, "RunnerDeployment")
    ref = get_controller_of(rs)
    assert ref == OwnerReference(
        api_version=GROUP_VERSION,
        kind="RunnerDeployment",
        name="example",
        uid="uid-1",
        controller=True,
        block_owner_deletion=True,
    )


def test_set_controller_reference_twice_keeps_one_reference():
    rd = _deployment()
    rs = _replica_set()
    set_controller_reference(rd, rs, "RunnerDeployment")
    set_controller_reference(rd, rs, "RunnerDeployment")
    assert len(rs.metadata.owner_references) == 1


def test_set_controller_reference_rejects_second_controller():
    rs = _replica_set()
    set_controller_reference(_deployment(name="first"), rs, "RunnerDeployment")
    with pytest.raises(ControllerReferenceError):
        set_controller_reference(_deployment(name="second"), rs, "RunnerDeployment")
    assert get_controller_of(rs).name == "first"


def test_set_controller_reference_rejects_cross_namespace():
    rs = _replica_set(namespace="other")
    with pytest.raises(ControllerReferenceError):
        set_controller_reference(_deployment(namespace="ns"), rs, "RunnerDeployment")
    assert rs.metadata.owner_references == []


def test_set_controller_reference_keeps_non_controller_refs():
    rs = _replica_set()
    other = OwnerReference(api_version="v1", kind="ConfigMap", name="cm")
    rs.metadata.owner_references.append(other)
    set_controller_reference(_deployment(), rs, "RunnerDeployment")
    assert rs.metadata.owner_references[0] == other
    assert get_controller_of(rs).kind == "RunnerDeployment"


def test_get_controller_of_without_controller():
    rs = _replica_set()
    rs.metadata.owner_references.append(
        OwnerReference(api_version="v1", kind="ConfigMap", name="cm")
    )
    assert get_controller_of(rs) is None


def test_default_collections_are_not_shared():
    a = ObjectMeta()
    b = ObjectMeta()
    a.owner_references.append(OwnerReference(api_version="v1", kind="X", name="x"))
    assert b.owner_references == []