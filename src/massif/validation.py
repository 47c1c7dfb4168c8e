"""
Massif Validator: invariant checks and inventory of MassifData objects.

This module checks the properties consumers rely on:
    - Snapshot numbering (unique, increasing)
    - Chronological order of snapshot times
    - Non-negative byte counts
    - Non-negative node bytes in every tree
    - Optionally, heap_tree.bytes against mem_heap_b

IMPORTANT: It does NOT modify the data and never raises for bad data.
Everything it finds goes into a read-only report.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from massif.model import MassifData, Snapshot
from massif.tree import iter_nodes, tree_depth

logger = logging.getLogger(__name__)


@dataclass
class ValidationReport:
    """Outcome of validating one MassifData."""

    cmd: str
    total_snapshots: int = 0
    detailed_snapshots: int = 0
    total_nodes: int = 0
    max_tree_depth: int = 0
    peak_snapshot_num: Optional[int] = None
    peak_heap_bytes: int = 0

    # Invariant violations
    errors: List[str] = field(default_factory=list)

    # Producer-convention mismatches (not invariant violations)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        if msg not in self.errors:
            self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)


def _check_counts(snapshot: Snapshot, report: ValidationReport) -> None:
    for name in ("mem_heap_b", "mem_heap_extra_b", "mem_stacks_b"):
        if getattr(snapshot, name) < 0:
            report.add_error(f"Snapshot {snapshot.snapshot_num}: negative {name}")
    if snapshot.time < 0:
        report.add_error(f"Snapshot {snapshot.snapshot_num}: negative time")


def _check_tree(snapshot: Snapshot, report: ValidationReport, check_heap_totals: bool) -> None:
    root = snapshot.heap_tree
    if root is None:
        return

    for node in iter_nodes(root):
        report.total_nodes += 1
        if node.bytes < 0:
            report.add_error(f"Snapshot {snapshot.snapshot_num}: node '{node.function}' has negative bytes")

    report.max_tree_depth = max(report.max_tree_depth, tree_depth(root))

    if check_heap_totals and root.bytes != snapshot.mem_heap_b:
        report.add_warning(
            f"Snapshot {snapshot.snapshot_num}: heap tree holds {root.bytes} bytes "
            f"but mem_heap_b is {snapshot.mem_heap_b}"
        )


def validate_massif_data(data: MassifData, check_heap_totals: bool = False) -> ValidationReport:
    """
    Check a MassifData against the model's invariants.

    Checks for:
    - Unique, increasing snapshot numbers
    - Non-decreasing times
    - Non-negative byte counts and times
    - Non-negative bytes on every tree node
    - heap_tree.bytes == mem_heap_b (only with check_heap_totals; a mismatch
      is a warning because Massif does not promise it)

    Returns a ValidationReport with counts, errors and warnings.
    """
    report = ValidationReport(cmd=data.cmd)
    report.total_snapshots = len(data.snapshots)
    report.detailed_snapshots = len(data.detailed_snapshots())

    peak = data.peak_snapshot()
    if peak is not None:
        report.peak_snapshot_num = peak.snapshot_num
        report.peak_heap_bytes = peak.mem_heap_b + peak.mem_heap_extra_b

    seen = set()
    previous: Optional[Snapshot] = None
    for snapshot in data.snapshots:
        if snapshot.snapshot_num in seen:
            report.add_error(f"Duplicate snapshot number: {snapshot.snapshot_num}")
        seen.add(snapshot.snapshot_num)

        if previous is not None:
            if snapshot.snapshot_num < previous.snapshot_num:
                report.add_error(
                    f"Snapshot {snapshot.snapshot_num} is listed after snapshot {previous.snapshot_num}"
                )
            if snapshot.time < previous.time:
                report.add_error(
                    f"Time goes backwards at snapshot {snapshot.snapshot_num}: "
                    f"{previous.time} -> {snapshot.time}"
                )

        _check_counts(snapshot, report)
        _check_tree(snapshot, report, check_heap_totals)
        previous = snapshot

    if data.snapshots and not data.time_unit:
        report.add_warning("Missing time_unit")

    logger.debug(
        "Validated %d snapshots: %d errors, %d warnings",
        report.total_snapshots,
        len(report.errors),
        len(report.warnings),
    )
    return report


__all__ = ["ValidationReport", "validate_massif_data"]
