"""
Serialization helpers for Massif model objects (MassifData, Snapshot, HeapNode).

Provides lossless JSON/YAML round-trip via intermediate dict representation.
Keys are the field names. Absent optional values (file_info, heap_tree) are
written as explicit nulls so they stay distinguishable from empty values.
"""
from __future__ import annotations

import json
from typing import Any, Dict

import yaml

from massif.errors import InconsistentInputError, MalformedInputError
from massif.model import HeapNode, MassifData, Snapshot, snapshot_order_problems


def _require(d: Any, key: str, kind: type | tuple, what: str) -> Any:
    if not isinstance(d, dict):
        raise MalformedInputError(f"{what} must be a mapping, got {type(d).__name__}")
    if key not in d:
        raise MalformedInputError(f"{what} is missing '{key}'")
    value = d[key]
    # bool is an int subclass but never a valid count
    if isinstance(value, bool) or not isinstance(value, kind):
        raise MalformedInputError(f"{what} field '{key}' has unexpected type {type(value).__name__}")
    return value


def _require_count(d: Any, key: str, what: str) -> int:
    value = _require(d, key, int, what)
    if value < 0:
        raise MalformedInputError(f"{what} field '{key}' must be non-negative, got {value}")
    return value


def _optional_str(d: Dict[str, Any], key: str, what: str) -> str | None:
    value = d.get(key)
    if value is not None and not isinstance(value, str):
        raise MalformedInputError(f"{what} field '{key}' has unexpected type {type(value).__name__}")
    return value


def heap_node_to_dict(node: HeapNode) -> Dict[str, Any]:
    return {
        "num_children": node.num_children,
        "bytes": node.bytes,
        "address": node.address,
        "function": node.function,
        "file_info": node.file_info,
        "children": [heap_node_to_dict(c) for c in node.children],
    }


def heap_node_from_dict(d: Any) -> HeapNode:
    children = _require(d, "children", list, "heap node")
    node = HeapNode(
        bytes=_require_count(d, "bytes", "heap node"),
        address=_require(d, "address", str, "heap node"),
        function=_require(d, "function", str, "heap node"),
        file_info=_optional_str(d, "file_info", "heap node"),
        children=[heap_node_from_dict(c) for c in children],
    )
    declared = _require_count(d, "num_children", "heap node")
    if declared != node.num_children:
        raise InconsistentInputError(
            f"heap node '{node.function}' declares {declared} children but has {node.num_children}"
        )
    return node


def snapshot_to_dict(s: Snapshot) -> Dict[str, Any]:
    return {
        "snapshot_num": s.snapshot_num,
        "time": s.time,
        "mem_heap_b": s.mem_heap_b,
        "mem_heap_extra_b": s.mem_heap_extra_b,
        "mem_stacks_b": s.mem_stacks_b,
        "heap_tree": heap_node_to_dict(s.heap_tree) if s.heap_tree is not None else None,
    }


def snapshot_from_dict(d: Any) -> Snapshot:
    time = _require(d, "time", (int, float), "snapshot")
    if time < 0:
        raise MalformedInputError(f"snapshot field 'time' must be non-negative, got {time}")
    tree = d.get("heap_tree")
    return Snapshot(
        snapshot_num=_require_count(d, "snapshot_num", "snapshot"),
        time=time,
        mem_heap_b=_require_count(d, "mem_heap_b", "snapshot"),
        mem_heap_extra_b=_require_count(d, "mem_heap_extra_b", "snapshot"),
        mem_stacks_b=_require_count(d, "mem_stacks_b", "snapshot"),
        heap_tree=heap_node_from_dict(tree) if tree is not None else None,
    )


def massif_to_dict(m: MassifData) -> Dict[str, Any]:
    return {
        "desc": m.desc,
        "cmd": m.cmd,
        "time_unit": m.time_unit,
        "snapshots": [snapshot_to_dict(s) for s in m.snapshots],
    }


def massif_from_dict(d: Any) -> MassifData:
    snapshots = _require(d, "snapshots", list, "massif data")
    data = MassifData(
        desc=_require(d, "desc", str, "massif data"),
        cmd=_require(d, "cmd", str, "massif data"),
        time_unit=_require(d, "time_unit", str, "massif data"),
        snapshots=[snapshot_from_dict(s) for s in snapshots],
    )
    problems = snapshot_order_problems(data.snapshots)
    if problems:
        raise InconsistentInputError("; ".join(problems))
    return data


def massif_to_json(m: MassifData) -> str:
    return json.dumps(massif_to_dict(m), sort_keys=True)


def massif_from_json(s: str) -> MassifData:
    try:
        d = json.loads(s)
    except json.JSONDecodeError as e:
        raise MalformedInputError(f"invalid JSON: {e}") from e
    return massif_from_dict(d)


def massif_to_yaml(m: MassifData) -> str:
    return yaml.safe_dump(massif_to_dict(m))


def massif_from_yaml(s: str) -> MassifData:
    try:
        d = yaml.safe_load(s)
    except yaml.YAMLError as e:
        raise MalformedInputError(f"invalid YAML: {e}") from e
    return massif_from_dict(d)
