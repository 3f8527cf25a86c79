# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tests for data type tags and DWORD conversion."""
from __future__ import annotations

import pytest

from regimport.parser.literals import RegType, convert_hex_to_dword, parse_data_type, reg_type_name


@pytest.mark.unit
class TestParseDataType:
    def test_string(self):
        m = parse_data_type('"abc"')
        assert m.parse_type is RegType.REG_SZ
        assert m.data_type == RegType.REG_SZ
        assert m.pos == 1

    def test_binary(self):
        m = parse_data_type("hex:01,02")
        assert m.parse_type is RegType.REG_BINARY
        assert m.data_type == RegType.REG_BINARY
        assert m.pos == 4

    def test_dword(self):
        m = parse_data_type("dword:000000ff")
        assert m.parse_type is RegType.REG_DWORD
        assert m.data_type == RegType.REG_DWORD
        assert m.pos == 6

    @pytest.mark.parametrize(
        "text,data_type,pos",
        [
            ("hex(2):41,00", 2, 7),
            ("hex(7):00", 7, 7),
            ("hex(0):", 0, 7),
            ("hex(a):", 10, 7),
            ("hex(ffffffff):", 0xFFFFFFFF, 14),
        ],
    )
    def test_typed_binary(self, text, data_type, pos):
        m = parse_data_type(text)
        assert m is not None
        assert m.parse_type is RegType.REG_BINARY
        assert m.data_type == data_type
        assert m.pos == pos

    @pytest.mark.parametrize(
        "text",
        [
            "hex(2:41",
            "hex(2)41",
            "hex():",
            "hex(0x2):",
            "hex(zz):",
            "hex(100000000):",
            "hex(",
        ],
    )
    def test_malformed_typed_binary(self, text):
        assert parse_data_type(text) is None

    @pytest.mark.parametrize("text", ["", "foo", "DWORD:1", "Hex:00", "'single'", "-"])
    def test_no_match(self, text):
        assert parse_data_type(text) is None

    def test_offset(self):
        line = '"Name"=dword:1'
        m = parse_data_type(line, 7)
        assert m.parse_type is RegType.REG_DWORD
        assert line[m.pos:] == "1"


@pytest.mark.unit
class TestConvertHexToDword:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("000000ff", 255),
            ("ff", 255),
            ("FF", 255),
            ("  ff  ", 255),
            ("\tff\t", 255),
            ("ff ; comment", 255),
            ("ff;comment", 255),
            ("ffffffff", 0xFFFFFFFF),
            ("0", 0),
        ],
    )
    def test_valid(self, text, expected):
        assert convert_hex_to_dword(text) == expected

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "   ",
            "123456789",
            "000000000",
            "ff x",
            "0x10",
            "-1",
            "+1",
            "g",
            "; only a comment",
        ],
    )
    def test_invalid(self, text):
        assert convert_hex_to_dword(text) is None


@pytest.mark.unit
def test_reg_type_name():
    assert reg_type_name(1) == "REG_SZ"
    assert reg_type_name(0x20) == "0x20"
