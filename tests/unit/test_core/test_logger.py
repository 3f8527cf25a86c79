# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import json
import logging
import sys

import pytest

from regimport.core.logger import TRACE, ConsoleFormatter, ConsoleStyle, JsonFormatter, Log
from regimport.core.logging_utils import log_step


@pytest.mark.unit
class TestLevels:
    @pytest.mark.parametrize(
        "verbose,quiet,expected",
        [
            (0, 0, logging.INFO),
            (1, 0, logging.INFO),
            (2, 0, logging.DEBUG),
            (3, 0, TRACE),
            (0, 1, logging.WARNING),
            (3, 2, logging.ERROR),
        ],
    )
    def test_level_from_flags(self, verbose, quiet, expected):
        assert Log._level_from_flags(verbose, quiet) == expected


@pytest.mark.unit
class TestSetup:
    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "import.log"
        logger = Log.setup(0, str(log_file), color=False)
        Log.ok(logger, "Import finished", values=3)
        for h in logger.handlers:
            h.flush()
        text = log_file.read_text(encoding="utf-8")
        assert "Import finished" in text
        assert "values=3" in text

    def test_json_file_handler(self, tmp_path):
        log_file = tmp_path / "import.ndjson"
        logger = Log.setup(0, str(log_file), json_logs=True)
        logger.warning("Unable to open %s", "HKXX", extra={"ctx": {"line": 7}})
        for h in logger.handlers:
            h.flush()
        obj = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
        assert obj["level"] == "WARNING"
        assert obj["msg"] == "Unable to open HKXX"
        assert obj["ctx"] == {"line": "7"}

    def test_setup_replaces_handlers(self):
        logger = Log.setup(0)
        Log.setup(2)
        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG


@pytest.mark.unit
def test_trace_respects_level(caplog):
    lg = logging.getLogger("regimport.test.trace")
    with caplog.at_level(logging.DEBUG, logger="regimport.test.trace"):
        Log.trace(lg, "hidden %d", 1)
    assert "hidden" not in caplog.text
    with caplog.at_level(TRACE, logger="regimport.test.trace"):
        Log.trace(lg, "shown %d", 2)
    assert "shown 2" in caplog.text


@pytest.mark.unit
def test_json_formatter_exception():
    fmt = JsonFormatter(include_src=False)
    try:
        raise OSError("EIO")
    except OSError:
        rec = logging.LogRecord("regimport", logging.ERROR, __file__, 1, "read failed", None, sys.exc_info())
    obj = json.loads(fmt.format(rec))
    assert obj["exc_type"] == "OSError"
    assert "module" not in obj


@pytest.mark.unit
def test_log_step_reraises(caplog):
    lg = logging.getLogger("regimport.test.step")
    with caplog.at_level(logging.INFO, logger="regimport.test.step"):
        with pytest.raises(RuntimeError):
            with log_step(lg, "Importing x.reg"):
                raise RuntimeError("bad")
    assert "Importing x.reg ..." in caplog.text
    assert "Importing x.reg failed" in caplog.text


@pytest.mark.unit
def test_console_formatter_shows_reg_line():
    fmt = ConsoleFormatter(ConsoleStyle(color=False, emoji=False))
    rec = logging.LogRecord("regimport.parser", logging.WARNING, __file__, 1, "Unable to open %s", ("HKXX",), None)
    rec.ctx = {"line": 12, "key": "HKXX"}
    out = fmt.format(rec)
    assert "L12: Unable to open HKXX key=HKXX" in out
    assert "WARNING" in out
