"""
Lookup visitors: the two queries the tree handle supports.

Both are scoped to the node the traversal starts from. NodeLookup matches
only its immediate children, PropertyLookup only its own properties. The
engine still walks into descendants but neither visitor reacts to them.
"""

from typing import NamedTuple, Optional, Union

from .header import FdtHeader
from .traversal import Visitor


Name = Union[str, bytes]


def _as_bytes(name: Name) -> bytes:
    if isinstance(name, str):
        return name.encode("utf-8")
    return bytes(name)


class PropertyMatch(NamedTuple):
    """Outcome of a property lookup.

    offset is None both when the property is absent and when it is present
    with an empty value; check found to tell the two apart.
    """
    found: bool
    offset: Optional[int]
    length: int


class NodeLookup:
    """Finds the first immediate child named name (or name@unit_address)."""

    def __init__(self, name: Name, unit_address: Optional[Name] = None):
        self.name = _as_bytes(name)
        self.unit_address = None if unit_address is None else _as_bytes(unit_address)
        self.match: Optional[int] = None
        self._depth = 0

    def matches(self, node_name: bytes) -> bool:
        if self.unit_address is None:
            return node_name == self.name
        base, at, address = node_name.partition(b"@")
        return bool(at) and base == self.name and address == self.unit_address

    def on_begin_node(self, header: FdtHeader, offset: int):
        self._depth += 1
        if self._depth == 2 and self.matches(header.read_node_name(offset)):
            self.match = offset

    def on_end_node(self, header: FdtHeader, offset: int):
        self._depth -= 1

    def is_satisfied(self) -> bool:
        return self.match is not None

    def visitor(self) -> Visitor:
        return Visitor(
            on_begin_node=self.on_begin_node,
            on_end_node=self.on_end_node,
            is_satisfied=self.is_satisfied,
        )


class PropertyLookup:
    """Finds the property called name among the starting node's properties."""

    def __init__(self, name: Name):
        self.name = _as_bytes(name)
        self.found = False
        self.offset: Optional[int] = None
        self.length = 0
        self._depth = 0

    def on_begin_node(self, header: FdtHeader, offset: int):
        self._depth += 1

    def on_end_node(self, header: FdtHeader, offset: int):
        self._depth -= 1

    def on_property(self, header: FdtHeader, offset: int):
        if self._depth != 1:
            return
        length, nameoff = header.read_prop_desc(offset)
        if header.read_string(nameoff) != self.name:
            return
        self.found = True
        self.length = length
        if length > 0:
            # value starts right after the token and the {len, nameoff} pair
            self.offset = offset + 12

    def is_satisfied(self) -> bool:
        return self.found

    def result(self) -> PropertyMatch:
        return PropertyMatch(self.found, self.offset, self.length)

    def visitor(self) -> Visitor:
        return Visitor(
            on_begin_node=self.on_begin_node,
            on_end_node=self.on_end_node,
            on_property=self.on_property,
            is_satisfied=self.is_satisfied,
        )
