"""
Core Massif Model Objects

Defines the data structures describing one Valgrind Massif profiling run:
    - HeapNode (one allocation site in a snapshot's call tree)
    - Snapshot (one point-in-time measurement)
    - MassifData (root container for the whole run)

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about the massif.out text format
        - Are immutable (frozen dataclasses, tuples for sequences)
        - Are fully serializable
        - Represent shape, not behavior

    Any transformation (filtering a tree, dropping snapshots) builds
    new objects. Nothing is mutated in place.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

Number = Union[int, float]


@dataclass(frozen=True)
class HeapNode:
    """
    One node of an allocation-site call tree.

    Properties:
        num_children:
            Number of children. Derived from `children` when the node
            is constructed, so it always equals len(children).

        bytes:
            Bytes attributed to this allocation site.

        address:
            Code address as written by the profiler (e.g. "0x4C2DB8F").
            Kept as text so formatting survives. Empty for the
            "below threshold" summary nodes.

        function:
            Function or symbol name. For summary nodes this is the
            summary text, e.g. "in 3 places, all below massif's threshold (1.00%)".

        file_info:
            Source location such as "alloc.c:12", or None when unknown.
            None and "" are different values.

        children:
            Child nodes, in the order the profiler reported them.
    """

    num_children: int = field(init=False)
    bytes: int
    address: str
    function: str
    file_info: Optional[str] = None
    children: Tuple["HeapNode", ...] = ()

    def __post_init__(self):
        children = tuple(self.children)
        object.__setattr__(self, "children", children)
        object.__setattr__(self, "num_children", len(children))

    @property
    def is_leaf(self) -> bool:
        return not self.children


@dataclass(frozen=True)
class Snapshot:
    """
    One point-in-time measurement of heap usage.

    Properties:
        snapshot_num:
            Producer's snapshot number (unique within a run)

        time:
            Timestamp in the run's time_unit

        mem_heap_b:
            Useful heap bytes

        mem_heap_extra_b:
            Heap bookkeeping and alignment overhead in bytes

        mem_stacks_b:
            Stack bytes (zero unless --stacks=yes)

        heap_tree:
            Root of the allocation tree, or None when the snapshot
            is not detailed.

    NOTE:
        heap_tree.bytes usually equals mem_heap_b, but that is a producer
        convention. The model does not enforce it; see
        massif.validation for an optional check.
    """

    snapshot_num: int
    time: Number
    mem_heap_b: int
    mem_heap_extra_b: int
    mem_stacks_b: int
    heap_tree: Optional[HeapNode] = None

    @property
    def total_bytes(self) -> int:
        """Heap, heap overhead and stack bytes together."""
        return self.mem_heap_b + self.mem_heap_extra_b + self.mem_stacks_b

    @property
    def is_detailed(self) -> bool:
        return self.heap_tree is not None


@dataclass(frozen=True)
class MassifData:
    """
    Root container for one profiling run.

    Properties:
        desc:
            Description line from the profiler invocation (e.g. "--time-unit=B")

        cmd:
            Profiled command line

        time_unit:
            Unit of every Snapshot.time ("i", "ms" or "B" for Massif)

        snapshots:
            Snapshots in capture order

    INVARIANTS:
        - snapshot_num values are unique and non-decreasing
        - time values are non-decreasing
    """

    desc: str
    cmd: str
    time_unit: str
    snapshots: Tuple[Snapshot, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "snapshots", tuple(self.snapshots))

    def get_snapshot(self, snapshot_num: int) -> Optional[Snapshot]:
        """
        Retrieve a snapshot by its number.

        Args:
            snapshot_num: Producer's snapshot number

        Returns:
            Snapshot object or None if not found
        """
        for snapshot in self.snapshots:
            if snapshot.snapshot_num == snapshot_num:
                return snapshot
        return None

    def detailed_snapshots(self) -> Sequence[Snapshot]:
        """Snapshots that carry a heap tree, in capture order."""
        return [s for s in self.snapshots if s.heap_tree is not None]

    def peak_snapshot(self) -> Optional[Snapshot]:
        """
        Snapshot with the largest heap footprint (mem_heap_b + mem_heap_extra_b).

        The first one wins on ties. Returns None for a run with no snapshots.
        """
        peak = None
        for snapshot in self.snapshots:
            size = snapshot.mem_heap_b + snapshot.mem_heap_extra_b
            if peak is None or size > peak.mem_heap_b + peak.mem_heap_extra_b:
                peak = snapshot
        return peak


def snapshot_order_problems(snapshots: Sequence[Snapshot]) -> List[str]:
    """
    Describe every place where a snapshot sequence breaks capture order.

    Snapshot numbers must be unique and increasing, times non-decreasing.
    An empty list means the sequence is in order.
    """
    problems = []
    for prev, cur in zip(snapshots, snapshots[1:]):
        if cur.snapshot_num <= prev.snapshot_num:
            problems.append(
                f"snapshot {cur.snapshot_num} follows snapshot {prev.snapshot_num}; "
                f"snapshot numbers must be unique and increasing"
            )
        if cur.time < prev.time:
            problems.append(
                f"snapshot {cur.snapshot_num} has time {cur.time}, "
                f"earlier than snapshot {prev.snapshot_num} ({prev.time})"
            )
    return problems
