# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
from __future__ import annotations

from .cli.main import entrypoint

if __name__ == "__main__":
    entrypoint()
