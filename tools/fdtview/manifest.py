"""
YAML check manifest parser and runner for fdtview.

A manifest lists nodes that must (or must not) exist in a blob and the
property values expected on them:

    checks:
      - node: /soc/uart@10000000
        properties:
          compatible: ns16550a      # string
          reg: [0x10000000, 0x100]  # u32 cells
          clock-frequency: 3686400  # single u32
          dma-coherent: true        # present, any value
          secure-status: false      # absent
      - node: /reserved-memory
        present: false
"""

import struct
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import yaml

from .node import FdtNode


class ManifestError(Exception):
    """Raised when a manifest file fails validation."""
    pass


@dataclass
class NodeCheck:
    """Expectations for a single node."""
    path: str
    present: bool = True
    properties: Dict[str, object] = field(default_factory=dict)


@dataclass
class Manifest:
    """Parsed check manifest."""
    checks: List[NodeCheck]


@dataclass
class CheckResult:
    """Outcome of one node or property expectation."""
    path: str
    prop: Optional[str]
    passed: bool
    message: str


def _require(data: dict, key: str, context: str = "root") -> object:
    """Require a key in a dict, raising ManifestError if missing."""
    if key not in data or data[key] is None:
        raise ManifestError(
            f"Missing required field '{key}' in {context} section"
        )
    return data[key]


def encode_expectation(value: object) -> Optional[bytes]:
    """Encode an expected property value the way dtc would store it.

    Returns None for booleans, which only express presence.

    Raises:
        ManifestError: For values with no device tree encoding.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value.encode("utf-8") + b"\x00"
    if isinstance(value, int):
        return _pack_cells([value])
    if isinstance(value, list) and value:
        if all(isinstance(v, str) for v in value):
            return b"".join(v.encode("utf-8") + b"\x00" for v in value)
        if all(isinstance(v, int) and not isinstance(v, bool) for v in value):
            return _pack_cells(value)
    raise ManifestError(f"Unsupported expected value: {value!r}")


def _pack_cells(cells: List[int]) -> bytes:
    for cell in cells:
        if not 0 <= cell <= 0xFFFFFFFF:
            raise ManifestError(f"Cell value {cell:#x} does not fit in 32 bits")
    return struct.pack(f">{len(cells)}I", *cells)


def parse_manifest_yaml(yaml_str: str) -> Manifest:
    """Parse a YAML manifest string into a Manifest.

    Args:
        yaml_str: YAML string containing the manifest.

    Returns:
        Manifest with one NodeCheck per entry.

    Raises:
        ManifestError: If required fields are missing or invalid.
    """
    if not yaml_str or not yaml_str.strip():
        raise ManifestError("Empty YAML input")

    try:
        data = yaml.safe_load(yaml_str)
    except yaml.YAMLError as e:
        raise ManifestError(f"Invalid YAML: {e}")

    if not isinstance(data, dict):
        raise ManifestError("YAML root must be a mapping")

    entries = _require(data, "checks")
    if not isinstance(entries, list):
        raise ManifestError("'checks' must be a list")

    checks = []
    for index, entry in enumerate(entries):
        context = f"checks[{index}]"
        if not isinstance(entry, dict):
            raise ManifestError(f"{context} must be a mapping")
        path = str(_require(entry, "node", context))
        if not path.startswith("/"):
            raise ManifestError(f"{context}: node path '{path}' must be absolute")

        present = entry.get("present", True)
        if not isinstance(present, bool):
            raise ManifestError(f"{context}: 'present' must be true or false")

        properties = entry.get("properties") or {}
        if not isinstance(properties, dict):
            raise ManifestError(f"{context}: 'properties' must be a mapping")
        for expected in properties.values():
            # validate now so a bad manifest fails before any blob is read
            encode_expectation(expected)
        if properties and not present:
            raise ManifestError(
                f"{context}: properties given for a node expected to be absent"
            )

        checks.append(NodeCheck(
            path=path,
            present=present,
            properties={str(k): v for k, v in properties.items()},
        ))

    return Manifest(checks=checks)


def _check_property(node: FdtNode, path: str, name: str,
                    expected: object) -> CheckResult:
    if expected is False:
        if node.has_property(name):
            return CheckResult(path, name, False, "present but expected absent")
        return CheckResult(path, name, True, "absent")

    value = node.get_property(name)
    if value is None:
        return CheckResult(path, name, False, "missing")

    encoded = encode_expectation(expected)
    if encoded is None or bytes(value) == encoded:
        return CheckResult(path, name, True, "ok")
    return CheckResult(
        path, name, False,
        f"value {bytes(value).hex()} != expected {encoded.hex()}",
    )


def run_manifest(fdt: FdtNode, manifest: Manifest) -> List[CheckResult]:
    """Evaluate every check of manifest against the tree rooted at fdt.

    Raises:
        InvalidStructure: If the blob is corrupt.
    """
    results = []
    for check in manifest.checks:
        node = fdt.find_node(check.path)
        if not check.present:
            results.append(CheckResult(
                check.path, None, not node.is_valid(),
                "present but expected absent" if node.is_valid() else "absent",
            ))
            continue
        if not node.is_valid():
            results.append(CheckResult(check.path, None, False, "node not found"))
            continue
        results.append(CheckResult(check.path, None, True, "found"))
        for name, expected in check.properties.items():
            results.append(_check_property(node, check.path, name, expected))
    return results
