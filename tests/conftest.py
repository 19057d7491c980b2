from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
for path in (SRC, ROOT):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))


@pytest.fixture(autouse=True)
def _package_debug_logging(caplog):
    # Surface the package's key=value log lines on failures.
    caplog.set_level(logging.DEBUG, logger="pmm_positions")
