"""
Example profile builders.

build_minimal_profile() is the smallest useful run: one detailed snapshot
with a lone root node. build_example_profile() is a short run with a
two-level tree, a below-threshold summary node and an empty snapshot.
"""
from massif.model import HeapNode, MassifData, Snapshot


def build_minimal_profile() -> MassifData:
    return MassifData(
        desc="profile",
        cmd="myapp --flag",
        time_unit="i",
        snapshots=[
            Snapshot(
                snapshot_num=0,
                time=0,
                mem_heap_b=1024,
                mem_heap_extra_b=64,
                mem_stacks_b=0,
                heap_tree=HeapNode(bytes=1024, address="0x0", function="main", file_info=None),
            )
        ],
    )


def build_example_profile() -> MassifData:
    make_buffer = HeapNode(
        bytes=600,
        address="0x4005BD",
        function="make_buffer",
        file_info="prog.c:10",
        children=[
            HeapNode(bytes=600, address="0x400612", function="main", file_info="prog.c:25"),
        ],
    )
    below = HeapNode(
        bytes=400,
        address="",
        function="in 3 places, all below massif's threshold (1.00%)",
    )
    root = HeapNode(
        bytes=1000,
        address="",
        function="(heap allocation functions) malloc/new/new[], --alloc-fns, etc.",
        children=[make_buffer, below],
    )

    return MassifData(
        desc="--time-unit=i",
        cmd="./prog 10",
        time_unit="i",
        snapshots=[
            Snapshot(snapshot_num=0, time=0, mem_heap_b=0, mem_heap_extra_b=0, mem_stacks_b=0),
            Snapshot(
                snapshot_num=1,
                time=120345,
                mem_heap_b=1000,
                mem_heap_extra_b=24,
                mem_stacks_b=0,
                heap_tree=root,
            ),
            Snapshot(snapshot_num=2, time=240000, mem_heap_b=400, mem_heap_extra_b=16, mem_stacks_b=0),
        ],
    )
