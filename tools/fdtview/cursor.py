"""
Token cursor: step from one structure-block token to the next.
"""

from .errors import InvalidStructure
from .header import (
    FDT_BEGIN_NODE,
    FDT_END,
    FDT_END_NODE,
    FDT_NOP,
    FDT_PROP,
    FdtHeader,
)
from .reader import align4


def next_token(header: FdtHeader, offset: int) -> int:
    """Return the offset of the token following the one at offset.

    Variable-length payloads (node names, property values) are skipped and
    the result is rounded up to the next 4-byte boundary. FDT_END has no
    successor, so its own offset is returned unchanged.

    Raises:
        InvalidStructure: On an unknown token value.
        OutOfBounds: If the payload does not fit in the structure block.
    """
    token = header.read_token(offset)

    if token == FDT_BEGIN_NODE:
        name = header.read_node_name(offset)
        if name:
            return offset + 4 + align4(len(name) + 1)
        # The root's empty name still occupies one padding word
        return offset + 8

    if token in (FDT_END_NODE, FDT_NOP):
        return offset + 4

    if token == FDT_PROP:
        length, _ = header.read_prop_desc(offset)
        header.read_value(offset + 12, length)
        return offset + 4 + align4(8 + length)

    if token == FDT_END:
        return offset

    raise InvalidStructure(f"Unknown token 0x{token:08x} at 0x{offset:x}")
