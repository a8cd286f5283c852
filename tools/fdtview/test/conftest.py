"""Shared fixtures for fdtview tests."""

import pytest
import sys
import os

# Add the project root to sys.path so 'tools.fdtview' is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "..", ".."))

from fdtbuild import BlobNode, BlobProperty, build_dtb  # noqa: E402


def make_board() -> BlobNode:
    """A small board tree.

    / {
        compatible = "fdtview,test-board";
        model = "Test Board";
        chosen { bootargs = "console=ttyS0,115200"; };
        soc {
            uart@0 { compatible = "ns16550a"; reg = <0x0 0x100>; };
            uart@1 { compatible = "ns16550a"; reg = <0x1000 0x100>; status = "disabled"; };
            gpio { gpio-controller; };
            bus { uart@1 { compatible = "nested-uart"; }; };
        };
        memory@80000000 { device_type = "memory"; reg = <0x80000000 0x10000000>; };
    };
    """
    return BlobNode(
        "",
        BlobProperty.string("compatible", "fdtview,test-board"),
        BlobProperty.string("model", "Test Board"),
        BlobNode("chosen", BlobProperty.string("bootargs", "console=ttyS0,115200")),
        BlobNode(
            "soc",
            BlobNode(
                "uart@0",
                BlobProperty.string("compatible", "ns16550a"),
                BlobProperty.cells("reg", 0x0, 0x100),
            ),
            BlobNode(
                "uart@1",
                BlobProperty.string("compatible", "ns16550a"),
                BlobProperty.cells("reg", 0x1000, 0x100),
                BlobProperty.string("status", "disabled"),
            ),
            BlobNode("gpio", BlobProperty.empty("gpio-controller")),
            BlobNode(
                "bus",
                BlobNode("uart@1", BlobProperty.string("compatible", "nested-uart")),
            ),
        ),
        BlobNode(
            "memory@80000000",
            BlobProperty.string("device_type", "memory"),
            BlobProperty.cells("reg", 0x80000000, 0x10000000),
        ),
    )


@pytest.fixture
def board_dtb():
    """DTB bytes of the test board."""
    return build_dtb(make_board())


@pytest.fixture
def minimal_dtb():
    """{ root { child@1 { prop = "x"; }; }; }"""
    root = BlobNode("", BlobNode("child@1", BlobProperty.string("prop", "x")))
    return build_dtb(root)
