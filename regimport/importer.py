# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# regimport/importer.py
"""
Import driver: file -> encoding sniff -> line source -> parser -> store.

Only import-level failures surface here (unreadable file, missing encoding
marker, invalid header, read errors, rejected versions). Everything local to
a key section or a value is handled inside the parser and only shows up in
the stats.
"""
from __future__ import annotations

import codecs
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Optional, Union

from .config.config_loader import ImportConfig
from .core.exceptions import Fatal, RegImportError, wrap_fatal
from .core.logger import Log
from .core.logging_utils import log_step
from .parser.header import RegVersion
from .parser.state_machine import ImportStats, Parser
from .reader.line_source import Encoding, LineSource, decode_prefix, sniff_encoding
from .store.base import KeyStore


@dataclass
class ImportResult:
    ok: bool
    version: Optional[RegVersion] = None
    encoding: Optional[Encoding] = None
    stats: ImportStats = field(default_factory=ImportStats)
    error: Optional[RegImportError] = None

    @property
    def exit_code(self) -> int:
        if self.ok:
            return 0
        return self.error.code if self.error is not None else 1


def _check_codepage(codepage: str) -> None:
    try:
        codecs.lookup(codepage)
    except LookupError as e:
        raise Fatal(code=2, msg=f"unknown code page: {codepage}", cause=e)


def _run_import(
    stream: BinaryIO,
    store: KeyStore,
    cfg: ImportConfig,
    logger: logging.Logger,
    result: ImportResult,
) -> None:
    try:
        first = stream.read(2)
    except OSError as e:
        raise wrap_fatal("unable to read the registry file", e)
    if len(first) != 2:
        raise Fatal(msg="unable to read the registry file encoding marker")

    encoding = sniff_encoding(first)
    result.encoding = encoding
    codepage = cfg.effective_codepage()
    _check_codepage(codepage)
    prefix = "" if encoding is Encoding.WIDE else decode_prefix(first, codepage)
    logger.debug("Detected %s encoding (codepage=%s)", encoding.value, codepage)

    source = LineSource(
        stream,
        encoding,
        codepage=codepage,
        buffer_size=cfg.buffer_size,
        logger=logger.getChild("reader"),
    )
    with Parser(source, store, header_prefix=prefix, logger=logger.getChild("parser")) as parser:
        result.stats = parser.stats
        try:
            version = parser.run()
        except OSError as e:
            raise wrap_fatal("read error while importing", e, line=parser.stats.lines_read)
    result.version = version

    if version is RegVersion.INVALID:
        raise Fatal(msg="the file is not a valid registry file (unrecognized header)")

    if version is RegVersion.FUZZY:
        Log.warn(logger, "Registry file header is not an exact match; nothing was imported")
        return

    if version in (RegVersion.V4, RegVersion.V5) and cfg.reject_unsupported_versions:
        raise Fatal(msg=f"import of version {version.value} registry files is disabled")


def import_stream(
    stream: BinaryIO,
    store: KeyStore,
    *,
    config: Optional[ImportConfig] = None,
    logger: Optional[logging.Logger] = None,
) -> ImportResult:
    """Import an already opened binary stream. The caller owns (and closes) the stream and the store."""
    cfg = config or ImportConfig()
    log = logger or logging.getLogger("regimport")
    result = ImportResult(ok=False)

    try:
        _run_import(stream, store, cfg, log, result)
    except Fatal as e:
        Log.fail(log, e.user_message(include_context=True))
        result.error = e
        return result

    result.ok = True
    Log.ok(log, "Import finished", version=result.version.value if result.version else "?", **result.stats.as_dict())
    return result


def reg_import(
    path: Union[str, Path],
    store: KeyStore,
    *,
    config: Optional[ImportConfig] = None,
    logger: Optional[logging.Logger] = None,
) -> ImportResult:
    """Import the .reg file at `path` into `store`."""
    log = logger or logging.getLogger("regimport")
    p = Path(path)

    try:
        fp = p.open("rb")
    except OSError as e:
        err = wrap_fatal(f"Unable to find the specified file: {p}", e)
        Log.fail(log, str(err))
        return ImportResult(ok=False, error=err)

    with fp, log_step(log, f"Importing {p}"):
        return import_stream(fp, store, config=config, logger=log)
