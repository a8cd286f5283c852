"""
Render raw property bytes the way dtc prints them in a .dts file.

Device tree properties carry no type information, so this guesses: a list
of printable NUL-terminated strings, else 32-bit cells, else plain bytes.
"""

import string
import struct


_PRINTABLE = set(string.printable.encode("ascii")) - set(b"\t\n\r\x0b\x0c")


def _is_string_list(value: bytes) -> bool:
    if not value or value[-1] != 0 or value[0] == 0:
        return False
    for part in value[:-1].split(b"\x00"):
        if not part or any(b not in _PRINTABLE for b in part):
            return False
    return True


def decode_strings(value: bytes) -> list:
    """Split a NUL-terminated string list into Python strings."""
    return [p.decode("utf-8", "replace") for p in bytes(value).split(b"\x00")[:-1]]


def _quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def format_value(value) -> str:
    """Format a property value for display."""
    value = bytes(value)
    if not value:
        return '""'
    if _is_string_list(value):
        return ", ".join(_quote(s) for s in decode_strings(value))
    if len(value) % 4 == 0:
        cells = struct.unpack(f">{len(value) // 4}I", value)
        return "<" + " ".join(f"0x{c:x}" for c in cells) + ">"
    return "[" + " ".join(f"{b:02x}" for b in value) + "]"
