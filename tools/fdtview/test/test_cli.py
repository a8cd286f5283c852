"""Tests for the fdtview command line entry point."""

import pytest

from tools.fdtview.__main__ import EXIT_INVALID, EXIT_NOT_FOUND, EXIT_OK, main

from fdtbuild import StructWriter


@pytest.fixture
def board_file(tmp_path, board_dtb):
    path = tmp_path / "board.dtb"
    path.write_bytes(board_dtb)
    return str(path)


class TestQuery:
    def test_root_by_default(self, board_file, capsys):
        assert main([board_file]) == EXIT_OK
        assert capsys.readouterr().out.startswith("/ (/)")

    def test_properties(self, board_file, capsys):
        rc = main([board_file, "/soc/uart@1", "compatible", "reg", "status"])
        assert rc == EXIT_OK
        out = capsys.readouterr().out.splitlines()
        assert out == [
            "/soc/uart@1 (uart@1)",
            '  compatible = "ns16550a";',
            "  reg = <0x1000 0x100>;",
            '  status = "disabled";',
        ]

    def test_empty_property(self, board_file, capsys):
        assert main([board_file, "/soc/gpio", "gpio-controller"]) == EXIT_OK
        assert '  gpio-controller = "";' in capsys.readouterr().out

    def test_missing_node(self, board_file, capsys):
        assert main([board_file, "/soc/uart@7"]) == EXIT_NOT_FOUND
        assert "node not found" in capsys.readouterr().err

    def test_missing_property(self, board_file, capsys):
        rc = main([board_file, "/chosen", "bootargs", "stdout-path"])
        assert rc == EXIT_NOT_FOUND
        captured = capsys.readouterr()
        assert '  bootargs = "console=ttyS0,115200";' in captured.out
        assert "stdout-path: not found" in captured.err

    def test_offset(self, tmp_path, board_dtb, capsys):
        path = tmp_path / "image.bin"
        path.write_bytes(b"\x00" * 0x40 + board_dtb)
        assert main([str(path), "--offset", "0x40", "/chosen", "bootargs"]) == EXIT_OK
        assert "bootargs" in capsys.readouterr().out

    def test_option_between_path_and_properties(self, tmp_path, board_dtb, capsys):
        path = tmp_path / "image.bin"
        path.write_bytes(b"\x00" * 0x40 + board_dtb)
        rc = main([str(path), "/chosen", "--offset", "0x40", "bootargs"])
        assert rc == EXIT_OK
        assert '  bootargs = "console=ttyS0,115200";' in capsys.readouterr().out


class TestInvalidBlob:
    def test_bad_magic(self, tmp_path, capsys):
        path = tmp_path / "bad.dtb"
        path.write_bytes(b"\x00" * 64)
        assert main([str(path)]) == EXIT_INVALID
        assert "Error:" in capsys.readouterr().err

    def test_wrong_offset(self, board_file, capsys):
        assert main([board_file, "--offset", "8"]) == EXIT_INVALID

    def test_missing_blob_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "absent.dtb")]) == EXIT_INVALID
        assert "Error:" in capsys.readouterr().err

    def test_corrupt_structure(self, tmp_path, capsys):
        path = tmp_path / "corrupt.dtb"
        path.write_bytes(StructWriter().begin_node("").begin_node("a").end().build())
        assert main([str(path), "/a"]) == EXIT_INVALID
        assert "Unexpected FDT_END" in capsys.readouterr().err


class TestCheck:
    def test_all_pass(self, tmp_path, board_file, capsys):
        manifest = tmp_path / "checks.yaml"
        manifest.write_text(
            "checks:\n"
            "  - node: /memory@80000000\n"
            "    properties:\n"
            "      device_type: memory\n"
            "      reg: [0x80000000, 0x10000000]\n"
            "  - node: /cpus\n"
            "    present: false\n"
        )
        assert main([board_file, "--check", str(manifest)]) == EXIT_OK
        out = capsys.readouterr().out
        assert "  PASS /memory@80000000:reg (ok)" in out
        assert "4/4 checks passed" in out

    def test_failure(self, tmp_path, board_file, capsys):
        manifest = tmp_path / "checks.yaml"
        manifest.write_text("checks:\n  - node: /soc/uart@0\n    properties: {status: okay}\n")
        assert main([board_file, "--check", str(manifest)]) == EXIT_NOT_FOUND
        out = capsys.readouterr().out
        assert "  FAIL /soc/uart@0:status (missing)" in out
        assert "1/2 checks passed" in out

    def test_invalid_manifest(self, tmp_path, board_file, capsys):
        manifest = tmp_path / "checks.yaml"
        manifest.write_text("nodes: []\n")
        assert main([board_file, "--check", str(manifest)]) == EXIT_INVALID
        assert "'checks'" in capsys.readouterr().err

    def test_missing_manifest_file(self, tmp_path, board_file, capsys):
        rc = main([board_file, "--check", str(tmp_path / "absent.yaml")])
        assert rc == EXIT_INVALID
        assert "absent.yaml" in capsys.readouterr().err

    def test_rejects_path_with_check(self, tmp_path, board_file, capsys):
        manifest = tmp_path / "checks.yaml"
        manifest.write_text("checks:\n  - node: /chosen\n")
        with pytest.raises(SystemExit) as exc:
            main([board_file, "/chosen", "bootargs", "--check", str(manifest)])
        assert exc.value.code == 2
        assert "--check" in capsys.readouterr().err
