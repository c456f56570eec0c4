"""Version helpers for the NFSv3 driver.

The `dev-<sha>` form is only reported when running from a git checkout (a
directory holding both `.git` and `pyproject.toml`); installed wheels fall
back to the distribution metadata.
"""

from __future__ import annotations

import os
import subprocess
from importlib import metadata
from pathlib import Path


def _find_repo_root() -> Path | None:
    here = Path(__file__).resolve()
    for parent in [here] + list(here.parents):
        if (parent / ".git").exists() and (parent / "pyproject.toml").exists():
            return parent
    return None


def _git_version(repo_root: Path) -> str | None:
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None
    sha = result.stdout.strip()
    return sha or None


def get_version() -> str:
    env_version = os.environ.get("NFSV3DRIVER_VERSION")
    if env_version:
        return env_version
    repo_root = _find_repo_root()
    if repo_root:
        sha = _git_version(repo_root)
        if sha:
            return f"dev-{sha}"
    try:
        return metadata.version("nfsv3driver")
    except metadata.PackageNotFoundError:
        return "unknown"
