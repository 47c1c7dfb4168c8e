"""
Tests for serialization and deserialization of Massif objects.

These tests ensure lossless dict/JSON/YAML round-trip using the explicit
serialization functions in `massif.serialization`, and that bad input is
reported with the right error class.
"""

import json

import pytest
import yaml
from massif.model import HeapNode, MassifData, Snapshot
from massif.examples import build_example_profile, build_minimal_profile
from massif.errors import InconsistentInputError, MalformedInputError
from massif.serialization import (
    heap_node_to_dict,
    heap_node_from_dict,
    massif_to_dict,
    massif_from_dict,
    massif_to_json,
    massif_from_json,
    massif_to_yaml,
    massif_from_yaml,
)


def test_minimal_profile_dict_shape():
    d = massif_to_dict(build_minimal_profile())
    assert d == {
        "desc": "profile",
        "cmd": "myapp --flag",
        "time_unit": "i",
        "snapshots": [
            {
                "snapshot_num": 0,
                "time": 0,
                "mem_heap_b": 1024,
                "mem_heap_extra_b": 64,
                "mem_stacks_b": 0,
                "heap_tree": {
                    "num_children": 0,
                    "bytes": 1024,
                    "address": "0x0",
                    "function": "main",
                    "file_info": None,
                    "children": [],
                },
            }
        ],
    }


def test_minimal_profile_roundtrip():
    profile = build_minimal_profile()
    for restored in (
        massif_from_json(massif_to_json(profile)),
        massif_from_yaml(massif_to_yaml(profile)),
    ):
        assert restored == profile
        assert restored.snapshots[0].heap_tree.num_children == 0


def test_json_roundtrip():
    profile = build_example_profile()
    restored = massif_from_json(massif_to_json(profile))
    assert restored == profile


def test_yaml_roundtrip():
    profile = build_example_profile()
    restored = massif_from_yaml(massif_to_yaml(profile))
    assert restored == profile


def test_child_order_survives_roundtrip():
    tree = HeapNode(
        bytes=3,
        address="0x10",
        function="root",
        children=[
            HeapNode(bytes=2, address="0x20", function="zeta"),
            HeapNode(bytes=1, address="0x30", function="alpha"),
        ],
    )
    restored = heap_node_from_dict(json.loads(json.dumps(heap_node_to_dict(tree))))
    assert [c.function for c in restored.children] == ["zeta", "alpha"]


def test_optional_fields_keep_presence():
    """None stays None and '' stays '' through JSON and YAML."""
    profile = MassifData(
        desc="",
        cmd="",
        time_unit="B",
        snapshots=[
            Snapshot(snapshot_num=0, time=0, mem_heap_b=0, mem_heap_extra_b=0, mem_stacks_b=0),
            Snapshot(
                snapshot_num=1,
                time=8,
                mem_heap_b=8,
                mem_heap_extra_b=8,
                mem_stacks_b=0,
                heap_tree=HeapNode(
                    bytes=8,
                    address="0x0",
                    function="root",
                    children=[
                        HeapNode(bytes=4, address="0x1", function="a", file_info=None),
                        HeapNode(bytes=4, address="0x2", function="b", file_info=""),
                    ],
                ),
            ),
        ],
    )
    d = massif_to_dict(profile)
    assert d["snapshots"][0]["heap_tree"] is None
    assert "heap_tree" in d["snapshots"][0]

    for restored in (massif_from_json(massif_to_json(profile)), massif_from_yaml(massif_to_yaml(profile))):
        children = restored.snapshots[1].heap_tree.children
        assert children[0].file_info is None
        assert children[1].file_info == ""
        assert restored.snapshots[0].heap_tree is None


def test_fractional_time_roundtrip():
    profile = MassifData(
        desc="",
        cmd="./prog",
        time_unit="ms",
        snapshots=[Snapshot(snapshot_num=0, time=1.5, mem_heap_b=0, mem_heap_extra_b=0, mem_stacks_b=0)],
    )
    assert massif_from_yaml(massif_to_yaml(profile)).snapshots[0].time == 1.5


class TestDecodingErrors:
    """Bad input raises MalformedInputError or InconsistentInputError."""

    def test_missing_key(self):
        d = massif_to_dict(build_minimal_profile())
        del d["snapshots"][0]["mem_heap_b"]
        with pytest.raises(MalformedInputError):
            massif_from_dict(d)

    def test_wrong_type(self):
        d = massif_to_dict(build_minimal_profile())
        d["snapshots"][0]["heap_tree"]["bytes"] = "1024"
        with pytest.raises(MalformedInputError):
            massif_from_dict(d)

    def test_bool_is_not_a_count(self):
        d = massif_to_dict(build_minimal_profile())
        d["snapshots"][0]["snapshot_num"] = True
        with pytest.raises(MalformedInputError):
            massif_from_dict(d)

    def test_not_a_mapping(self):
        with pytest.raises(MalformedInputError):
            massif_from_dict(["not", "a", "profile"])

    def test_invalid_json(self):
        with pytest.raises(MalformedInputError):
            massif_from_json("{not json")

    def test_num_children_mismatch(self):
        d = massif_to_dict(build_minimal_profile())
        d["snapshots"][0]["heap_tree"]["num_children"] = 2
        with pytest.raises(InconsistentInputError):
            massif_from_dict(d)

    def test_missing_num_children(self):
        d = massif_to_dict(build_minimal_profile())
        del d["snapshots"][0]["heap_tree"]["num_children"]
        with pytest.raises(MalformedInputError):
            massif_from_dict(d)

    def test_num_children_wrong_type(self):
        """A textual child count is malformed, not inconsistent."""
        d = massif_to_dict(build_minimal_profile())
        d["snapshots"][0]["heap_tree"]["num_children"] = "0"
        with pytest.raises(MalformedInputError):
            massif_from_dict(d)

    @pytest.mark.parametrize("key", ["snapshot_num", "time", "mem_heap_b", "mem_heap_extra_b", "mem_stacks_b"])
    def test_negative_snapshot_field(self, key):
        d = massif_to_dict(build_minimal_profile())
        d["snapshots"][0][key] = -5
        with pytest.raises(MalformedInputError):
            massif_from_dict(d)

    def test_negative_node_bytes(self):
        d = massif_to_dict(build_example_profile())
        d["snapshots"][1]["heap_tree"]["children"][1]["bytes"] = -1
        with pytest.raises(MalformedInputError):
            massif_from_dict(d)

    def test_snapshots_out_of_order(self):
        """Reversed snapshots break both numbering and time order."""
        d = massif_to_dict(build_example_profile())
        d["snapshots"].reverse()
        with pytest.raises(InconsistentInputError):
            massif_from_dict(d)

    def test_repeated_snapshot_number(self):
        d = massif_to_dict(build_example_profile())
        d["snapshots"][2]["snapshot_num"] = 1
        with pytest.raises(InconsistentInputError):
            massif_from_json(json.dumps(d))

    def test_time_going_backwards(self):
        d = massif_to_dict(build_example_profile())
        d["snapshots"][2]["time"] = 5
        with pytest.raises(InconsistentInputError):
            massif_from_yaml(yaml.safe_dump(d))
