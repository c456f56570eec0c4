#!/usr/bin/env python3
"""Run the NFSv3 mount driver HTTP server (same flags as `nfsv3driver serve`)."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from nfsv3driver.cli import main  # noqa: E402


if __name__ == "__main__":
    main(["serve", *sys.argv[1:]])
