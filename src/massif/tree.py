"""
Read-only helpers over allocation trees.

Nothing here mutates a HeapNode. Functions that "change" a tree
(filter_tree) return a freshly built one.
"""

from __future__ import annotations

from typing import Iterator, List, Optional

from massif.model import HeapNode


def iter_nodes(root: HeapNode | None) -> Iterator[HeapNode]:
    """Yield every node of the tree in pre-order (parent before children, left to right)."""
    if root is None:
        return
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        # Reversed so the leftmost child is visited first
        stack.extend(reversed(node.children))


def count_nodes(root: HeapNode | None) -> int:
    return sum(1 for _ in iter_nodes(root))


def tree_depth(root: HeapNode | None) -> int:
    """Number of levels in the tree; 0 for no tree, 1 for a lone root."""
    if root is None:
        return 0
    depth = 0
    level = [root]
    while level:
        depth += 1
        level = [child for node in level for child in node.children]
    return depth


def leaf_nodes(root: HeapNode | None) -> List[HeapNode]:
    return [node for node in iter_nodes(root) if node.is_leaf]


def find_functions(root: HeapNode | None, name: str) -> List[HeapNode]:
    """All nodes whose function name contains `name`, in pre-order."""
    return [node for node in iter_nodes(root) if name in node.function]


def filter_tree(root: HeapNode | None, min_bytes: int) -> Optional[HeapNode]:
    """
    Build a copy of the tree without subtrees smaller than `min_bytes`.

    The root is always kept so a snapshot's tree never disappears
    because of filtering. Child order is preserved.

    Args:
        root: Tree root (None passes through)
        min_bytes: Smallest node size to keep

    Returns:
        New HeapNode tree, or None if root is None
    """
    if root is None:
        return None
    return _filter_node(root, min_bytes)


def _filter_node(node: HeapNode, min_bytes: int) -> HeapNode:
    kept = tuple(
        _filter_node(child, min_bytes)
        for child in node.children
        if child.bytes >= min_bytes
    )
    return HeapNode(
        bytes=node.bytes,
        address=node.address,
        function=node.function,
        file_info=node.file_info,
        children=kept,
    )


__all__ = [
    "iter_nodes",
    "count_nodes",
    "tree_depth",
    "leaf_nodes",
    "find_functions",
    "filter_tree",
]
