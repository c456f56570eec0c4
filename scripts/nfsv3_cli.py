#!/usr/bin/env python3
"""Entrypoint for running the nfsv3driver CLI from a checkout."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from nfsv3driver.cli import main  # noqa: E402


if __name__ == "__main__":
    main()
