"""
Process-wide logging setup.
"""

from __future__ import annotations

import logging
import os
import sys


def log_level() -> int:
    name = os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"
    return getattr(logging, name, logging.INFO)


def setup_logging() -> None:
    logging.basicConfig(
        level=log_level(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
