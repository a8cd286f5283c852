"""
Bounds-checked big-endian reads over a blob.

All FDT fields are big-endian 32-bit words. Every helper takes an explicit
end bound and raises OutOfBounds instead of reading past it.
"""

import struct
from typing import Optional

from .errors import OutOfBounds


_U32 = struct.Struct(">I")


def align4(size: int) -> int:
    """Round up to 4-byte alignment."""
    return (size + 3) & ~3


def _limit(data: memoryview, end: Optional[int]) -> int:
    if end is None or end > len(data):
        return len(data)
    return end


def read_u32(data: memoryview, offset: int, end: Optional[int] = None) -> int:
    """Read one big-endian uint32 at offset."""
    limit = _limit(data, end)
    if offset < 0 or offset + 4 > limit:
        raise OutOfBounds(
            f"u32 read at 0x{offset:x} past end of block (0x{limit:x})"
        )
    return _U32.unpack_from(data, offset)[0]


def read_cstring(data: memoryview, offset: int, end: Optional[int] = None) -> bytes:
    """Read a NUL-terminated string at offset, without the terminator."""
    limit = _limit(data, end)
    if offset < 0 or offset >= limit:
        raise OutOfBounds(
            f"string read at 0x{offset:x} past end of block (0x{limit:x})"
        )
    for i, byte in enumerate(data[offset:limit]):
        if byte == 0:
            return data[offset:offset + i].tobytes()
    raise OutOfBounds(f"unterminated string at 0x{offset:x}")


def read_view(data: memoryview, offset: int, length: int,
              end: Optional[int] = None) -> memoryview:
    """Return a zero-copy view of length bytes at offset."""
    limit = _limit(data, end)
    if offset < 0 or length < 0 or offset + length > limit:
        raise OutOfBounds(
            f"{length} byte span at 0x{offset:x} past end of block (0x{limit:x})"
        )
    return data[offset:offset + length]
