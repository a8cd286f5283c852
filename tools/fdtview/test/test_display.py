"""Tests for property value formatting."""

from tools.fdtview.display import decode_strings, format_value


class TestFormatValue:
    def test_empty(self):
        assert format_value(b"") == '""'

    def test_string(self):
        assert format_value(b"okay\x00") == '"okay"'

    def test_string_list(self):
        assert format_value(b"vendor,board\x00generic\x00") == '"vendor,board", "generic"'

    def test_cells(self):
        assert format_value(b"\x00\x00\x10\x00\x00\x00\x01\x00") == "<0x1000 0x100>"

    def test_bytes(self):
        assert format_value(b"\xde\xad\xbe") == "[de ad be]"

    def test_non_printable_multiple_of_four(self):
        assert format_value(b"\x00\x00\x00\x01") == "<0x1>"

    def test_empty_string_in_list_is_not_a_string(self):
        assert format_value(b"ab\x00\x00") == "<0x61620000>"

    def test_accepts_memoryview(self):
        assert format_value(memoryview(b"x\x00")) == '"x"'

    def test_quote_and_backslash_escaped(self):
        assert format_value(b'a"b\x00') == r'"a\"b"'
        assert format_value(b"c:\\dir\x00") == r'"c:\\dir"'


class TestDecodeStrings:
    def test_list(self):
        assert decode_strings(b"a\x00bc\x00") == ["a", "bc"]

    def test_single(self):
        assert decode_strings(memoryview(b"ns16550a\x00")) == ["ns16550a"]
