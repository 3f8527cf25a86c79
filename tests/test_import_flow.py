# SPDX-License-Identifier: LGPL-3.0-or-later
"""End-to-end imports: file on disk -> reg_import -> MemoryStore."""
from __future__ import annotations

import io

import pytest

from regimport.config.config_loader import ImportConfig
from regimport.importer import import_stream, reg_import
from regimport.parser.header import RegVersion
from regimport.parser.state_machine import encode_reg_sz
from regimport.reader.line_source import Encoding
from regimport.store.memory import MemoryStore

SAMPLE_V5 = (
    "Windows Registry Editor Version 5.00\r\n"
    "\r\n"
    "[HKEY_CURRENT_USER\\Software\\Wine\\Test]\r\n"
    '"Greeting"="Grüße"\r\n'
    '"Count"=dword:00000010\r\n'
    '"Blob"=hex:de,ad,be,ef\r\n'
    "\r\n"
    "[HKEY_BOGUS\\Nope]\r\n"
    '"Lost"="x"\r\n'
)

CP1252 = ImportConfig(codepage="cp1252")


def _write(tmp_path, name, data):
    p = tmp_path / name
    p.write_bytes(data)
    return p


@pytest.fixture
def store():
    return MemoryStore()


class TestEncodings:
    def test_utf16_file(self, tmp_path, store):
        p = _write(tmp_path, "wide.reg", b"\xff\xfe" + SAMPLE_V5.encode("utf-16-le"))
        result = reg_import(p, store, config=CP1252)

        assert result.ok
        assert result.exit_code == 0
        assert result.encoding is Encoding.WIDE
        assert result.version is RegVersion.V5
        key = "HKEY_CURRENT_USER\\Software\\Wine\\Test"
        assert store.get_value(key, "Greeting").data == encode_reg_sz("Grüße")
        assert store.get_value(key, "Count").data == (16).to_bytes(4, "little")
        assert store.get_value(key, "Blob") is None

    def test_single_byte_file(self, tmp_path, store):
        p = _write(tmp_path, "ansi.reg", SAMPLE_V5.replace("Windows Registry Editor Version 5.00", "REGEDIT4").encode("cp1252"))
        result = reg_import(p, store, config=CP1252)

        assert result.ok
        assert result.encoding is Encoding.SINGLE_BYTE
        assert result.version is RegVersion.V4
        assert store.get_value("HKCU\\Software\\Wine\\Test", "Greeting").data == encode_reg_sz("Grüße")

    def test_stats(self, tmp_path, store):
        p = _write(tmp_path, "wide.reg", b"\xff\xfe" + SAMPLE_V5.encode("utf-16-le"))
        stats = reg_import(p, store, config=CP1252).stats
        assert stats.keys_opened == 1
        assert stats.key_open_failures == 1
        assert stats.values_set == 2
        assert stats.values_dropped == 2

    def test_bom_only_file(self, tmp_path, store):
        result = reg_import(_write(tmp_path, "bom.reg", b"\xff\xfe"), store, config=CP1252)
        assert not result.ok
        assert result.version is RegVersion.INVALID


class TestVersions:
    @pytest.mark.parametrize("header", ["REGEDIT4", "Windows Registry Editor Version 5.00"])
    def test_empty_body_succeeds(self, tmp_path, store, header):
        result = reg_import(_write(tmp_path, "e.reg", (header + "\r\n").encode("cp1252")), store, config=CP1252)
        assert result.ok
        assert store.mutations == []

    def test_invalid_header_fails_without_writes(self, tmp_path, store):
        data = "Not a registry file\r\n[HKEY_CURRENT_USER\\x]\r\n\"a\"=\"b\"\r\n".encode("cp1252")
        result = reg_import(_write(tmp_path, "bad.reg", data), store, config=CP1252)
        assert not result.ok
        assert result.exit_code == 1
        assert "not a valid registry file" in result.error.msg
        assert store.mutations == []

    def test_fuzzy_header_succeeds_without_writes(self, tmp_path, store):
        data = "REGEDIT 4\r\n[HKEY_CURRENT_USER\\x]\r\n\"a\"=\"b\"\r\n".encode("cp1252")
        result = reg_import(_write(tmp_path, "fuzzy.reg", data), store, config=CP1252)
        assert result.ok
        assert result.version is RegVersion.FUZZY
        assert store.mutations == []

    def test_strict_versions_fail_after_parsing(self, tmp_path, store):
        cfg = ImportConfig(codepage="cp1252", reject_unsupported_versions=True)
        data = "REGEDIT4\r\n[HKEY_CURRENT_USER\\x]\r\n\"a\"=\"b\"\r\n".encode("cp1252")
        result = reg_import(_write(tmp_path, "v4.reg", data), store, config=cfg)
        assert not result.ok
        assert result.version is RegVersion.V4
        assert len(store.value_mutations) == 1

    def test_strict_versions_allow_win31(self, tmp_path, store):
        cfg = ImportConfig(codepage="cp1252", reject_unsupported_versions=True)
        data = b"REGEDIT\r\nHKEY_CLASSES_ROOT\\.txt = txtfile\r\n"
        result = reg_import(_write(tmp_path, "w31.reg", data), store, config=cfg)
        assert result.ok
        assert result.version is RegVersion.WIN31
        assert store.get_value("HKCR\\.txt").data == encode_reg_sz("txtfile")


class TestFailures:
    def test_missing_file(self, tmp_path, store):
        result = reg_import(tmp_path / "nope.reg", store)
        assert not result.ok
        assert result.exit_code == 1
        assert result.error.msg.startswith("Unable to find the specified file")

    @pytest.mark.parametrize("data", [b"", b"R"])
    def test_too_short_for_encoding_marker(self, tmp_path, store, data):
        result = reg_import(_write(tmp_path, "short.reg", data), store, config=CP1252)
        assert not result.ok
        assert "encoding marker" in result.error.msg

    def test_unknown_codepage(self, tmp_path, store):
        p = _write(tmp_path, "a.reg", b"REGEDIT4\r\n")
        result = reg_import(p, store, config=ImportConfig(codepage="no-such-codec"))
        assert not result.ok
        assert result.exit_code == 2

    def test_read_error_is_fatal(self, store):
        class Broken(io.RawIOBase):
            def __init__(self):
                self._first = True

            def readable(self):
                return True

            def readinto(self, b):
                if self._first:
                    self._first = False
                    b[:2] = b"RE"
                    return 2
                raise OSError("EIO")

        result = import_stream(io.BufferedReader(Broken(), buffer_size=2), store, config=CP1252)
        assert not result.ok
        assert "read error" in result.error.msg
