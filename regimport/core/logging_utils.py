# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# regimport/core/logging_utils.py
from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Generator


@contextmanager
def log_step(logger: logging.Logger, description: str) -> Generator[None, None, None]:
    """
    Log the start of a step, then its completion or failure with the elapsed
    time. Exceptions are logged and re-raised.

        with log_step(logger, "Importing setup.reg"):
            ...
    """
    t0 = time.monotonic()
    logger.info("➡️  %s ...", description)
    try:
        yield
    except Exception as e:
        logger.error("❌ %s failed (%.2fs): %s", description, time.monotonic() - t0, e)
        raise
    logger.info("✅ %s done (%.2fs)", description, time.monotonic() - t0)
