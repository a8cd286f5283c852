"""FDT blob header and block-bounded read helpers.

Header layout (big-endian, 40 bytes):
  magic, totalsize, off_dt_struct, off_dt_strings, off_mem_rsvmap,
  version, last_comp_version, boot_cpuid_phys, size_dt_strings,
  size_dt_struct

All offsets handed around by the traversal code are byte offsets from the
start of the header, i.e. from the start of FdtHeader.data.
"""

import logging
import struct
from dataclasses import dataclass, field
from typing import Tuple

from .errors import InvalidBlob, OutOfBounds
from .reader import read_cstring, read_u32, read_view


log = logging.getLogger(__name__)


# FDT tokens
FDT_BEGIN_NODE = 1
FDT_END_NODE = 2
FDT_PROP = 3
FDT_NOP = 4
FDT_END = 9

# FDT magic number
FDT_MAGIC = 0xD00DFEED

FDT_HEADER_SIZE = 40
FDT_HEADER_ALIGN = 8

# Oldest layout the token cursor understands, newest layout this reader knows
FDT_FIRST_SUPPORTED_VERSION = 16
FDT_LAST_SUPPORTED_VERSION = 17

_HEADER = struct.Struct(">10I")


@dataclass(frozen=True)
class FdtHeader:
    """Parsed header of a flattened device tree blob."""
    magic: int
    totalsize: int
    off_dt_struct: int
    off_dt_strings: int
    off_mem_rsvmap: int
    version: int
    last_comp_version: int
    boot_cpuid_phys: int
    size_dt_strings: int
    size_dt_struct: int
    data: memoryview = field(repr=False, compare=False)

    @classmethod
    def parse(cls, buffer, offset: int = 0) -> "FdtHeader":
        """Validate and parse the header found at offset in buffer.

        Args:
            buffer: Any bytes-like object holding the blob.
            offset: Byte offset of the header inside buffer.

        Returns:
            FdtHeader whose data is a read-only view of the blob,
            bounded to totalsize.

        Raises:
            InvalidBlob: If the header is misaligned, truncated, has bad
                magic, uses an unsupported format version, or declares
                blocks that do not fit.
        """
        view = memoryview(buffer).cast("B").toreadonly()

        if offset < 0 or offset % FDT_HEADER_ALIGN != 0:
            raise InvalidBlob(
                f"Header offset {offset} is not {FDT_HEADER_ALIGN}-byte aligned"
            )
        available = len(view) - offset
        if available < FDT_HEADER_SIZE:
            raise InvalidBlob(
                f"Blob too small ({max(available, 0)} bytes, need {FDT_HEADER_SIZE})"
            )

        values = _HEADER.unpack_from(view, offset)
        magic, totalsize, off_struct, off_strings = values[:4]
        version, last_comp_version = values[5:7]
        if magic != FDT_MAGIC:
            raise InvalidBlob(f"Bad FDT magic: 0x{magic:08X} (expected 0xD00DFEED)")
        if version < FDT_FIRST_SUPPORTED_VERSION:
            raise InvalidBlob(
                f"Unsupported FDT version {version} "
                f"(need at least {FDT_FIRST_SUPPORTED_VERSION})"
            )
        if last_comp_version > FDT_LAST_SUPPORTED_VERSION:
            raise InvalidBlob(
                f"FDT last_comp_version {last_comp_version} is newer than "
                f"{FDT_LAST_SUPPORTED_VERSION}"
            )
        if totalsize < FDT_HEADER_SIZE or totalsize > available:
            raise InvalidBlob(
                f"totalsize {totalsize} outside {FDT_HEADER_SIZE}..{available}"
            )
        if off_struct % 4 != 0:
            raise InvalidBlob(f"off_dt_struct 0x{off_struct:x} is not 4-byte aligned")

        header = cls(*values, data=view[offset:offset + totalsize])
        for name, (start, end) in (("structure", header.struct_bounds),
                                   ("strings", header.strings_bounds)):
            if start < FDT_HEADER_SIZE or start > end or end > totalsize:
                raise InvalidBlob(
                    f"{name} block 0x{start:x}..0x{end:x} outside blob "
                    f"(totalsize 0x{totalsize:x})"
                )

        log.debug("FDT header at %d: version %d, totalsize %d",
                  offset, header.version, totalsize)
        return header

    @property
    def struct_bounds(self) -> Tuple[int, int]:
        """(start, end) of the structure block. The size field exists from v17."""
        if self.version >= 17:
            return self.off_dt_struct, self.off_dt_struct + self.size_dt_struct
        return self.off_dt_struct, self.totalsize

    @property
    def strings_bounds(self) -> Tuple[int, int]:
        """(start, end) of the strings block."""
        return self.off_dt_strings, self.off_dt_strings + self.size_dt_strings

    def read_token(self, offset: int) -> int:
        """Read a structure-block word (token, length or name offset)."""
        start, end = self.struct_bounds
        if offset < start:
            raise OutOfBounds(f"Offset 0x{offset:x} before structure block")
        return read_u32(self.data, offset, end)

    def read_node_name(self, offset: int) -> bytes:
        """Name of the node whose FDT_BEGIN_NODE token is at offset."""
        return read_cstring(self.data, offset + 4, self.struct_bounds[1])

    def read_prop_desc(self, offset: int) -> Tuple[int, int]:
        """(len, nameoff) of the property whose FDT_PROP token is at offset."""
        return self.read_token(offset + 4), self.read_token(offset + 8)

    def read_string(self, nameoff: int) -> bytes:
        """Property name stored at nameoff in the strings block."""
        start, end = self.strings_bounds
        return read_cstring(self.data, start + nameoff, end)

    def read_value(self, offset: int, length: int) -> memoryview:
        """Zero-copy view of a property value inside the structure block."""
        return read_view(self.data, offset, length, self.struct_bounds[1])
