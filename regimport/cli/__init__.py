# SPDX-License-Identifier: LGPL-3.0-or-later
from .main import main

__all__ = ["main"]
