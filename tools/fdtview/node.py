"""Node handles over a flattened device tree blob.

A handle is just (token offset, header): it borrows the caller's buffer,
owns nothing and is cheap to copy. FdtNode() with no arguments is the
invalid handle that lookups return for "not found".

    fdt = open_fdt(blob)
    uart = fdt.get_sub_node("uart", "10000000")
    compatible = uart.get_property("compatible")    # memoryview or None
"""

import logging
from typing import Optional

from .errors import InvalidBlob, InvalidStructure
from .header import FdtHeader
from .lookup import Name, NodeLookup, PropertyLookup
from .traversal import Visitor, traverse_fdt, traverse_node


log = logging.getLogger(__name__)


class FdtNode:
    """Handle to one node of the tree."""

    __slots__ = ("offset", "header")

    def __init__(self, offset: Optional[int] = None,
                 header: Optional[FdtHeader] = None):
        self.offset = offset
        self.header = header

    def is_valid(self) -> bool:
        return self.offset is not None and self.header is not None

    @property
    def name(self) -> str:
        """Full node name including any @unit-address ("" for the root)."""
        if not self.is_valid():
            return ""
        return self.header.read_node_name(self.offset).decode("utf-8", "replace")

    def _traverse(self, visitor: Visitor):
        traverse_node(self.header, self.offset, visitor)

    def get_sub_node(self, name: Name, unit_address: Optional[Name] = None) -> "FdtNode":
        """Return the first immediate child matching name.

        Without unit_address the child's full name must equal name. With it,
        the child must be named "<name>@<unit_address>".

        Returns:
            The child's handle, or an invalid handle if there is none.

        Raises:
            InvalidStructure: If the blob is corrupt.
        """
        if not self.is_valid():
            return FdtNode()
        lookup = NodeLookup(name, unit_address)
        self._traverse(lookup.visitor())
        if lookup.match is None:
            return FdtNode()
        return FdtNode(lookup.match, self.header)

    def get_property(self, name: Name) -> Optional[memoryview]:
        """Return a read-only view of the raw property value.

        The view borrows the blob; an empty property gives an empty view and
        a missing one gives None. Decoding the bytes is up to the caller.
        """
        if not self.is_valid():
            return None
        lookup = PropertyLookup(name)
        self._traverse(lookup.visitor())
        match = lookup.result()
        if not match.found:
            return None
        if match.offset is None:
            return self.header.data[0:0]
        return self.header.read_value(match.offset, match.length)

    def has_property(self, name: Name) -> bool:
        if not self.is_valid():
            return False
        lookup = PropertyLookup(name)
        self._traverse(lookup.visitor())
        return lookup.found

    def find_node(self, path: str) -> "FdtNode":
        """Resolve a '/'-separated path of node names below this node.

        Each component is compared with the full child name, so
        "soc/uart@10000000" selects a specific unit. Empty components are
        ignored, which makes "/" resolve to this node itself.
        """
        node = self
        for component in path.split("/"):
            if not component:
                continue
            node = node.get_sub_node(component)
            if not node.is_valid():
                break
        return node

    def __eq__(self, other):
        if not isinstance(other, FdtNode):
            return NotImplemented
        return self.offset == other.offset and self.header is other.header

    def __hash__(self):
        return hash((self.offset, id(self.header)))

    def __repr__(self):
        if not self.is_valid():
            return "FdtNode(<invalid>)"
        return f"FdtNode({self.name!r} @ 0x{self.offset:x})"


class Fdt(FdtNode):
    """Root handle of a blob, as returned by open_fdt()."""

    __slots__ = ("structure_error",)

    def __init__(self, header: Optional[FdtHeader] = None,
                 structure_error: Optional[InvalidStructure] = None):
        offset = header.off_dt_struct if header is not None else None
        super().__init__(offset, header)
        self.structure_error = structure_error

    def _traverse(self, visitor: Visitor):
        if self.structure_error is not None:
            error = self.structure_error
            raise type(error)(*error.args) from error
        traverse_fdt(self.header, visitor)

    def __repr__(self):
        if not self.is_valid():
            return "Fdt(<invalid>)"
        return f"Fdt(version={self.header.version}, totalsize={self.header.totalsize})"


def open_fdt(buffer, offset: int = 0, *, strict: bool = False,
             check_structure: bool = True) -> Fdt:
    """Open the blob whose header starts at offset in buffer.

    Args:
        buffer: Any bytes-like object (bytes, bytearray, mmap, memoryview).
            It must stay alive and unmodified while handles are in use.
        offset: Byte offset of the header; must be a multiple of 8.
        strict: Raise InvalidBlob on a bad header instead of returning an
            invalid handle.
        check_structure: Walk the whole structure block once up front so
            that corruption anywhere in it fails every root query, not only
            those that happen to reach it.

    Returns:
        Root handle. is_valid() is False if the header was rejected.

    Raises:
        InvalidBlob: Only with strict=True.
    """
    try:
        header = FdtHeader.parse(buffer, offset)
    except InvalidBlob as e:
        if strict:
            raise
        log.debug("rejecting blob at offset %d: %s", offset, e)
        return Fdt()

    structure_error = None
    if check_structure:
        try:
            traverse_fdt(header, Visitor())
        except InvalidStructure as e:
            structure_error = e
    return Fdt(header, structure_error)
