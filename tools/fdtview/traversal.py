"""Structure-block traversal engine.

traverse_node() walks one node and all of its descendants in depth-first
document order, calling back into a Visitor for every token:

    BEGIN_NODE  -> on_begin_node   (pre-order)
    PROP        -> on_property     (in stored order, before child nodes)
    NOP         -> on_no_op
    END_NODE    -> on_end_node     (post-order)

Before each token the visitor's is_satisfied() predicate is consulted and the
walk stops as soon as it returns True, so lookups cost O(first match).

Nesting is tracked with a depth counter rather than Python recursion. Depth
is bounded only by the blob's size, which may exceed the interpreter's
recursion limit.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .cursor import next_token
from .errors import InvalidStructure
from .header import (
    FDT_BEGIN_NODE,
    FDT_END,
    FDT_END_NODE,
    FDT_NOP,
    FDT_PROP,
    FdtHeader,
)


log = logging.getLogger(__name__)

TokenCallback = Callable[[FdtHeader, int], None]


@dataclass
class Visitor:
    """Set of optional traversal callbacks.

    Each token callback receives the header and the offset of the token.
    A callback left as None is a no-op; an is_satisfied left as None means
    the visitor never asks to stop early.
    """
    on_begin_node: Optional[TokenCallback] = None
    on_end_node: Optional[TokenCallback] = None
    on_property: Optional[TokenCallback] = None
    on_no_op: Optional[TokenCallback] = None
    is_satisfied: Optional[Callable[[], bool]] = None

    def satisfied(self) -> bool:
        return self.is_satisfied is not None and self.is_satisfied()


def _notify(callback: Optional[TokenCallback], header: FdtHeader, offset: int):
    if callback is not None:
        callback(header, offset)


def traverse_node(header: FdtHeader, offset: int, visitor: Visitor) -> int:
    """Walk the node whose FDT_BEGIN_NODE token is at offset.

    When offset is the start of the structure block the walk covers the
    whole tree and must finish on FDT_END after the root is closed.
    Otherwise it finishes on the FDT_END_NODE that closes the node.

    Args:
        header: Header of the blob being walked.
        offset: Offset of the node's FDT_BEGIN_NODE token.
        visitor: Callbacks to invoke.

    Returns:
        Offset at which the walk stopped: the token after the node's
        FDT_END_NODE, the FDT_END token, or the next unvisited token if
        the visitor was satisfied.

    Raises:
        InvalidStructure: If the token stream is malformed. Nothing after
            the point of failure is read.
    """
    is_root = offset == header.off_dt_struct
    start = offset

    token = header.read_token(offset)
    if token != FDT_BEGIN_NODE:
        raise InvalidStructure(
            f"Expected FDT_BEGIN_NODE at 0x{offset:x}, found 0x{token:08x}"
        )
    _notify(visitor.on_begin_node, header, offset)
    offset = next_token(header, offset)
    depth = 1

    while True:
        if visitor.satisfied():
            return offset

        token = header.read_token(offset)
        if token == FDT_END:
            if is_root and depth == 0:
                return offset
            raise InvalidStructure(
                f"Unexpected FDT_END at 0x{offset:x} "
                f"({depth} node(s) still open below 0x{start:x})"
            )

        if token == FDT_NOP:
            _notify(visitor.on_no_op, header, offset)
        elif depth == 0:
            # only the root walk gets here: the root is closed, so nothing
            # but NOPs may come before FDT_END
            raise InvalidStructure(
                f"Token 0x{token:08x} at 0x{offset:x} after the root node was closed"
            )
        elif token == FDT_BEGIN_NODE:
            _notify(visitor.on_begin_node, header, offset)
            depth += 1
        elif token == FDT_END_NODE:
            _notify(visitor.on_end_node, header, offset)
            depth -= 1
            if depth == 0 and not is_root:
                return next_token(header, offset)
        elif token == FDT_PROP:
            _notify(visitor.on_property, header, offset)
        else:
            raise InvalidStructure(f"Unknown token 0x{token:08x} at 0x{offset:x}")

        offset = next_token(header, offset)


def traverse_fdt(header: FdtHeader, visitor: Visitor) -> int:
    """Walk the whole structure block, starting at the root node."""
    try:
        return traverse_node(header, header.off_dt_struct, visitor)
    except InvalidStructure as e:
        log.debug("structure block rejected: %s", e)
        raise
