"""
fdtview: read-only queries over Flattened Device Tree (DTB) blobs.

Finds nodes by name (optionally with a unit address) and returns raw
property bytes as zero-copy views of the caller's buffer. The blob is
never modified; malformed input raises InvalidStructure instead of being
read out of bounds.
"""

from .errors import FdtError, InvalidBlob, InvalidStructure, OutOfBounds
from .header import (
    FDT_BEGIN_NODE,
    FDT_END,
    FDT_END_NODE,
    FDT_MAGIC,
    FDT_NOP,
    FDT_PROP,
    FdtHeader,
)
from .lookup import NodeLookup, PropertyLookup, PropertyMatch
from .node import Fdt, FdtNode, open_fdt
from .traversal import Visitor, traverse_fdt, traverse_node

__all__ = [
    "FDT_BEGIN_NODE",
    "FDT_END",
    "FDT_END_NODE",
    "FDT_MAGIC",
    "FDT_NOP",
    "FDT_PROP",
    "Fdt",
    "FdtError",
    "FdtHeader",
    "FdtNode",
    "InvalidBlob",
    "InvalidStructure",
    "NodeLookup",
    "OutOfBounds",
    "PropertyLookup",
    "PropertyMatch",
    "Visitor",
    "open_fdt",
    "traverse_fdt",
    "traverse_node",
]
