"""
Demo: Parse a Massif output file (or use the example profile), validate it
and print a report.

Usage:
    python demo_massif_report.py [massif.out.<pid>]
"""

import sys

from massif.examples import build_example_profile
from massif.parser import parse_massif_file
from massif.serialization import massif_to_yaml
from massif.tree import filter_tree, iter_nodes
from massif.validation import validate_massif_data


def print_report(report):
    """Pretty-print a ValidationReport."""
    print()
    print("=" * 70)
    print(f"MASSIF PROFILE REPORT: {report.cmd}")
    print("=" * 70)
    print()

    print("📊 BASIC METRICS")
    print(f"  Total Snapshots:       {report.total_snapshots}")
    print(f"  Detailed Snapshots:    {report.detailed_snapshots}")
    print(f"  Tree Nodes:            {report.total_nodes}")
    print(f"  Max Tree Depth:        {report.max_tree_depth}")
    print()

    print("📈 PEAK")
    if report.peak_snapshot_num is None:
        print("  No snapshots")
    else:
        print(f"  Snapshot:              {report.peak_snapshot_num}")
        print(f"  Heap Bytes:            {report.peak_heap_bytes}")
    print()

    if report.errors:
        print("❌ ERRORS")
        for i, error in enumerate(report.errors, 1):
            print(f"  {i}. {error}")
        print()

    if report.warnings:
        print("⚠️  WARNINGS")
        for i, warning in enumerate(report.warnings, 1):
            print(f"  {i}. {warning}")
    elif report.is_valid:
        print("✨ NO WARNINGS - Profile looks clean!")
    print()


def print_peak_tree(data, min_bytes):
    peak = data.peak_snapshot()
    if peak is None or peak.heap_tree is None:
        return
    print(f"🌳 TOP ALLOCATION SITES (snapshot {peak.snapshot_num}, >= {min_bytes} bytes)")
    for node in iter_nodes(filter_tree(peak.heap_tree, min_bytes)):
        location = f" ({node.file_info})" if node.file_info is not None else ""
        print(f"  {node.bytes:>10}  {node.function}{location}")
    print()


if __name__ == "__main__":
    if len(sys.argv) > 1:
        data = parse_massif_file(sys.argv[1], strict=False)
    else:
        data = build_example_profile()

    report = validate_massif_data(data, check_heap_totals=True)
    print_report(report)
    print_peak_tree(data, min_bytes=report.peak_heap_bytes // 100)

    # Also save to YAML for inspection
    yaml_str = massif_to_yaml(data)
    with open("massif_profile_output.yaml", "w") as f:
        f.write(yaml_str)
    print(f"✅ Profile exported to massif_profile_output.yaml")
