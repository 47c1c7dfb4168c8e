"""
Massif Heap Profile Model Package

This is the in-memory representation of a Valgrind Massif profiling run:
snapshots of a program's heap over time, each optionally carrying a tree
of allocation sites.

ARCHITECTURAL GUARANTEE:
------------------------
The model (massif.model) contains ZERO knowledge of:
    - The massif.out text format
    - JSON/YAML encodings
    - Rendering or visualization

It defines PROFILE SHAPE only.

Parsing (massif.parser), encoding (massif.serialization) and checking
(massif.validation) happen in separate layers that consume the model
unchanged.
"""

__version__ = "0.1.0"
