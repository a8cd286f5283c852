"""
CLI entry point for fdtview (flattened device tree query tool).

Usage:
    python3 -m tools.fdtview boards/pynq-z2/board.dtb /console uart baud
    python3 -m tools.fdtview firmware.img --offset 0x40000 /chosen
    python3 -m tools.fdtview boards/pynq-z2/board.dtb --check boards/pynq-z2/checks.yaml
"""

import argparse
import logging
import sys

from .display import format_value
from .errors import FdtError
from .manifest import ManifestError, parse_manifest_yaml, run_manifest
from .node import open_fdt


EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_INVALID = 2


def _init_logging(verbose: int):
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(format="[%(levelname)s]: %(message)s", level=level)


def _query(fdt, path, props) -> int:
    node = fdt.find_node(path)
    if not node.is_valid():
        print(f"{path}: node not found", file=sys.stderr)
        return EXIT_NOT_FOUND

    print(f"{path} ({node.name or '/'})")
    status = EXIT_OK
    for name in props:
        value = node.get_property(name)
        if value is None:
            print(f"  {name}: not found", file=sys.stderr)
            status = EXIT_NOT_FOUND
        else:
            print(f"  {name} = {format_value(value)};")
    return status


def _check(fdt, manifest_path) -> int:
    with open(manifest_path) as f:
        manifest = parse_manifest_yaml(f.read())

    results = run_manifest(fdt, manifest)
    failed = 0
    for result in results:
        where = result.path if result.prop is None else f"{result.path}:{result.prop}"
        print(f"  {'PASS' if result.passed else 'FAIL'} {where} ({result.message})")
        if not result.passed:
            failed += 1

    print(f"\n{len(results) - failed}/{len(results)} checks passed")
    return EXIT_NOT_FOUND if failed else EXIT_OK


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Query nodes and properties of a flattened device tree blob"
    )
    parser.add_argument("blob", help="Input .dtb (or image containing one)")
    parser.add_argument("path", nargs="?", help="Node path (default: /)")
    parser.add_argument("props", nargs="*", help="Property names to print")
    parser.add_argument("--offset", type=lambda s: int(s, 0), default=0,
                        help="Byte offset of the FDT header in the file")
    parser.add_argument("--check", metavar="MANIFEST",
                        help="YAML manifest of expected nodes and properties")
    parser.add_argument("-v", "--verbose", action="count", default=0)
    # options may sit between the node path and the property names
    args = parser.parse_intermixed_args(argv)

    if args.check and (args.path is not None or args.props):
        parser.error("--check cannot be combined with a node path or properties")

    _init_logging(args.verbose)

    try:
        with open(args.blob, "rb") as f:
            blob = f.read()
        fdt = open_fdt(blob, args.offset, strict=True)
        if args.check:
            return _check(fdt, args.check)
        return _query(fdt, args.path or "/", args.props)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_INVALID
    except FdtError as e:
        print(f"Error: {args.blob}: {e}", file=sys.stderr)
        return EXIT_INVALID
    except ManifestError as e:
        print(f"Error: {args.check}: {e}", file=sys.stderr)
        return EXIT_INVALID


if __name__ == "__main__":
    sys.exit(main())
