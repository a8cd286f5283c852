"""
Exceptions raised while reading a flattened device tree.

"Not found" is never an error: lookups report absence through an invalid
node handle, a false has_property() or a None property value.
"""


class FdtError(Exception):
    """Base class for all fdtview errors."""
    pass


class InvalidBlob(FdtError):
    """Raised when the blob header is misaligned, truncated or has bad magic."""
    pass


class InvalidStructure(FdtError):
    """Raised when the structure block token stream is malformed."""
    pass


class OutOfBounds(InvalidStructure):
    """Raised when a read or token advance would leave its block."""
    pass
