from dataclasses import dataclass, field

from runnerfleet.hashing import (
    deep_format,
    deep_hash_object,
    fnv32a,
    fnv_hash_string_objects,
    safe_encode_string,
)

ALPHABET = set("bcdfghjklmnpqrstvwxz2456789")


@dataclass
class Sample:
    name: str
    labels: list = field(default_factory=list)
    meta: dict = field(default_factory=dict)


def test_fnv32a_of_empty_input_is_offset_basis():
    assert fnv32a(b"") == 0x811C9DC5


def test_fnv32a_known_vector():
    assert fnv32a(b"a") == 0xE40C292C


def test_safe_encode_digits():
    assert safe_encode_string("0123456789") == "456789bcdf"


def test_safe_encode_keeps_length_and_alphabet():
    encoded = safe_encode_string("4294967295 hello AEIOU")
    assert len(encoded) == len("4294967295 hello AEIOU")
    assert set(encoded) <= ALPHABET


def test_deep_format_ignores_mapping_order():
    assert deep_format({"a": 1, "b": 2}) == deep_format({"b": 2, "a": 1})


def test_deep_format_includes_dataclass_fields():
    text = deep_format(Sample(name="runner", labels=["dev"]))
    assert "name:" in text
    assert "'runner'" in text
    assert "'dev'" in text


def test_deep_hash_equal_for_equal_structures():
    first = Sample(name="x", labels=["a", "b"], meta={"k": "v", "z": "y"})
    second = Sample(name="x", labels=["a", "b"], meta={"z": "y", "k": "v"})
    assert deep_hash_object(first) == deep_hash_object(second)


def test_deep_hash_changes_with_list_content():
    base = Sample(name="x", labels=["project1", "dev"])
    other = Sample(name="x", labels=["project2", "dev"])
    assert deep_hash_object(base) == deep_hash_object(Sample(name="x", labels=["project1", "dev"]))
    assert deep_hash_object(base) != deep_hash_object(other)


def test_deep_format_distinguishes_types():
    assert deep_format(1) == deep_format(1)
    assert deep_format(1) != deep_format("1")
    assert deep_format(True) != deep_format(1)


def test_deep_format_handles_cycles():
    items = []
    items.append(items)
    assert "<circular>" in deep_format(items)


def test_fnv_hash_string_objects_depends_on_last_object():
    assert fnv_hash_string_objects("first", "second") == fnv_hash_string_objects("second")


def test_fnv_hash_string_objects_without_objects():
    assert fnv_hash_string_objects() == safe_encode_string(str(fnv32a(b"")))


def test_fnv_hash_string_objects_alphabet():
    result = fnv_hash_string_objects(Sample(name="x"))
    assert result
    assert set(result) <= ALPHABET