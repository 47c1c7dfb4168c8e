"""
Massif Parser (Raw Input → Massif model).

Converts the text written by `valgrind --tool=massif` (massif.out.<pid>)
into a MassifData object.

File Format:
    desc: --time-unit=B
    cmd: ./prog arg
    time_unit: i
    #-----------
    snapshot=0
    #-----------
    time=0
    mem_heap_B=0
    mem_heap_extra_B=0
    mem_stacks_B=0
    heap_tree=empty
    ...
    heap_tree=detailed
    n2: 1000 (heap allocation functions) malloc/new/new[], --alloc-fns, etc.
     n0: 600 0x4005BD: main (prog.c:10)
     n0: 400 in 3 places, all below massif's threshold (1.00%)

Syntax Notes:
    - heap_tree is one of empty, detailed or peak; the last two are
      followed by a tree
    - nK declares K children; children are indented one column deeper
    - file_info is the trailing "(...)" group of a node line
"""

import logging
import re
import warnings
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from massif.errors import InconsistentInputError, MalformedInputError
from massif.model import HeapNode, MassifData, Snapshot, snapshot_order_problems

logger = logging.getLogger(__name__)

_NODE_RE = re.compile(r"^n(\d+):\s+(\d+)(?:\s+(.*))?$")
_ADDRESS_RE = re.compile(r"^(\S+):\s+(.*)$")

_HEADER_KEYS = ("desc:", "cmd:", "time_unit:")
_SNAPSHOT_FIELDS = {
    "time": "time",
    "mem_heap_B": "mem_heap_b",
    "mem_heap_extra_B": "mem_heap_extra_b",
    "mem_stacks_B": "mem_stacks_b",
}
_TREE_KINDS = ("detailed", "peak")


@dataclass
class _Line:
    """A raw input line with its 1-based number and leading-space count."""
    number: int
    indent: int
    text: str


@dataclass
class _SnapshotFields:
    """Mutable accumulator for one snapshot while its lines are read."""
    snapshot_num: int
    time: Union[int, float] = 0
    mem_heap_b: int = 0
    mem_heap_extra_b: int = 0
    mem_stacks_b: int = 0
    heap_tree: Optional[HeapNode] = None

    def build(self) -> Snapshot:
        return Snapshot(
            snapshot_num=self.snapshot_num,
            time=self.time,
            mem_heap_b=self.mem_heap_b,
            mem_heap_extra_b=self.mem_heap_extra_b,
            mem_stacks_b=self.mem_stacks_b,
            heap_tree=self.heap_tree,
        )


def _report(message: str, strict: bool) -> None:
    """Raise in strict mode, warn otherwise."""
    if strict:
        raise InconsistentInputError(message)
    warnings.warn(message, UserWarning)


def _parse_count(value: str, key: str, line: int) -> int:
    try:
        count = int(value)
    except ValueError:
        raise MalformedInputError(f"{key} is not an integer: {value!r}", line=line)
    if count < 0:
        raise MalformedInputError(f"{key} must be non-negative, got {count}", line=line)
    return count


def _parse_time(value: str, line: int) -> Union[int, float]:
    try:
        time = int(value)
    except ValueError:
        try:
            time = float(value)
        except ValueError:
            raise MalformedInputError(f"time is not a number: {value!r}", line=line)
    if time < 0:
        raise MalformedInputError(f"time must be non-negative, got {time}", line=line)
    return time


def _is_node_line(line: _Line) -> bool:
    return line.text.startswith("n") and line.text[1:2].isdigit()


def parse_heap_node_line(text: str, line: int = 0) -> Tuple[int, HeapNode]:
    """
    Parse a single tree line into (declared child count, childless HeapNode).

    Handles the three shapes Massif writes:
        nK: BYTES ADDRESS: FUNCTION (FILE:LINE)
        nK: BYTES in N places, all below massif's threshold (X%)
        nK: BYTES (heap allocation functions) malloc/new/new[], --alloc-fns, etc.

    Raises:
        MalformedInputError: If the line does not have the nK: BYTES prefix
    """
    match = _NODE_RE.match(text.strip())
    if match is None:
        raise MalformedInputError(f"not a heap tree line: {text.strip()!r}", line=line or None)

    declared = int(match.group(1))
    node_bytes = int(match.group(2))
    rest = match.group(3) or ""

    address = ""
    function = rest
    file_info = None

    if not rest.startswith("in ") and not rest.startswith("("):
        addr_match = _ADDRESS_RE.match(rest)
        if addr_match:
            address = addr_match.group(1)
            function = addr_match.group(2)
            paren_start = function.rfind(" (")
            if paren_start != -1 and function.endswith(")"):
                file_info = function[paren_start + 2:-1]
                function = function[:paren_start]

    return declared, HeapNode(
        bytes=node_bytes,
        address=address,
        function=function,
        file_info=file_info,
    )


def _parse_tree(lines: List[_Line], pos: int, strict: bool) -> Tuple[HeapNode, int]:
    """
    Parse the subtree whose root is lines[pos].

    Children are collected by indentation: every following node line
    indented deeper than the root belongs to it. The declared count
    is then checked against what was found.
    """
    root_line = lines[pos]
    declared, node = parse_heap_node_line(root_line.text, root_line.number)
    pos += 1

    children = []
    while pos < len(lines) and _is_node_line(lines[pos]) and lines[pos].indent > root_line.indent:
        child, pos = _parse_tree(lines, pos, strict)
        children.append(child)

    if len(children) != declared:
        _report(
            f"line {root_line.number}: node '{node.function}' declares {declared} "
            f"children but {len(children)} were found",
            strict,
        )

    if not children:
        return node, pos
    return HeapNode(
        bytes=node.bytes,
        address=node.address,
        function=node.function,
        file_info=node.file_info,
        children=children,
    ), pos


def _check_ordering(snapshots: List[Snapshot], strict: bool) -> None:
    for problem in snapshot_order_problems(snapshots):
        _report(problem, strict)


def parse_massif_string(content: str, strict: bool = True) -> MassifData:
    """
    Parse Massif output into a MassifData object.

    Args:
        content: Full text of a massif.out file
        strict: Raise on invariant violations instead of warning

    Returns:
        MassifData with snapshots in file order

    Raises:
        MalformedInputError: If the text cannot be mapped onto the model
        InconsistentInputError: If strict and the text breaks an invariant
            (child counts, snapshot order)
    """
    lines = [
        _Line(number=n, indent=len(raw) - len(raw.lstrip()), text=raw.strip())
        for n, raw in enumerate(content.splitlines(), start=1)
    ]

    header = {"desc": "", "cmd": "", "time_unit": ""}
    snapshots: List[Snapshot] = []
    current: Optional[_SnapshotFields] = None

    pos = 0
    while pos < len(lines):
        line = lines[pos]
        text = line.text

        if not text or text.startswith("#"):
            pos += 1
            continue

        if text.startswith(_HEADER_KEYS):
            key, _, value = text.partition(":")
            header[key] = value.strip()

        elif text.startswith("snapshot="):
            if current is not None:
                snapshots.append(current.build())
            num = _parse_count(text[len("snapshot="):].strip(), "snapshot", line.number)
            current = _SnapshotFields(snapshot_num=num)

        elif text.startswith("heap_tree="):
            if current is None:
                raise MalformedInputError("heap_tree outside of a snapshot", line=line.number)
            kind = text[len("heap_tree="):].strip()
            if kind in _TREE_KINDS:
                pos += 1
                if pos < len(lines) and _is_node_line(lines[pos]):
                    current.heap_tree, pos = _parse_tree(lines, pos, strict)
                    continue
                if strict:
                    raise MalformedInputError(f"heap_tree={kind} is not followed by a tree", line=line.number)
                warnings.warn(f"line {line.number}: heap_tree={kind} has no tree", UserWarning)
                continue
            if kind != "empty":
                if strict:
                    raise MalformedInputError(f"unknown heap_tree kind: {kind!r}", line=line.number)
                warnings.warn(f"line {line.number}: unknown heap_tree kind {kind!r}", UserWarning)

        elif _is_node_line(line):
            _report(f"line {line.number}: heap tree line outside of a tree: {text!r}", strict)

        else:
            key, sep, value = text.partition("=")
            if sep and key in _SNAPSHOT_FIELDS:
                if current is None:
                    raise MalformedInputError(f"{key} outside of a snapshot", line=line.number)
                if key == "time":
                    current.time = _parse_time(value.strip(), line.number)
                else:
                    setattr(current, _SNAPSHOT_FIELDS[key], _parse_count(value.strip(), key, line.number))
            else:
                logger.debug("Ignoring unrecognised line %d: %r", line.number, text)

        pos += 1

    if current is not None:
        snapshots.append(current.build())

    _check_ordering(snapshots, strict)

    logger.debug(
        "Parsed %d snapshots (%d detailed)",
        len(snapshots),
        sum(1 for s in snapshots if s.heap_tree is not None),
    )

    return MassifData(
        desc=header["desc"],
        cmd=header["cmd"],
        time_unit=header["time_unit"],
        snapshots=snapshots,
    )


def parse_massif_file(filepath: str, strict: bool = True) -> MassifData:
    """
    Parse a massif.out file into a MassifData object.

    Args:
        filepath: Path to the Massif output file
        strict: Raise on invariant violations instead of warning

    Returns:
        MassifData object

    Raises:
        FileNotFoundError: If file doesn't exist
        MalformedInputError: If the file is not UTF-8 text, or see parse_massif_string
        InconsistentInputError: See parse_massif_string
    """
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            content = f.read()
    except FileNotFoundError:
        raise FileNotFoundError(f"Massif file not found: {filepath}")
    except UnicodeDecodeError as e:
        raise MalformedInputError(f"{filepath} is not valid UTF-8: {e}") from e

    logger.debug("Parsing Massif file %s", filepath)
    return parse_massif_string(content, strict=strict)


__all__ = [
    "parse_massif_string",
    "parse_massif_file",
    "parse_heap_node_line",
]
